"""Tests for outgoing mail."""

import smtplib

import pytest

from deiwy.core.errors import MailerError
from deiwy.core.settings import settings
from deiwy.services.mailer import Mailer, build_password_reset_email, build_verification_email


def test_verification_email_carries_the_code():
    message = build_verification_email("jane#1234", "jane@x.com", "654321")
    assert message["Subject"] == "Verification Code: 654321"
    assert message["To"] == "jane@x.com"
    body = message.get_body(preferencelist=("plain",)).get_content()
    assert "Hello jane," in body
    assert "654321" in body


def test_password_reset_email_links_to_the_client(monkeypatch):
    monkeypatch.setattr(settings, "client_url", "https://chat.example.com/")
    monkeypatch.setattr(settings, "password_reset_ttl_seconds", 600)

    message = build_password_reset_email("jane#1234", "jane@x.com", "tok.en")

    assert message["Subject"] == "Password Reset Request"
    body = message.get_body(preferencelist=("plain",)).get_content()
    assert "https://chat.example.com/password/reset/tok.en" in body
    assert "within 10 minutes" in body
    html = message.get_body(preferencelist=("html",)).get_content()
    assert 'href="https://chat.example.com/password/reset/tok.en"' in html


def test_without_smtp_messages_are_recorded_not_sent(monkeypatch):
    monkeypatch.setattr(settings, "smtp_host", None)

    def _fail(*args, **kwargs):
        raise AssertionError("SMTP should not be used")

    monkeypatch.setattr(smtplib, "SMTP", _fail)
    mailer = Mailer()
    mailer.send_verification_code("jane", "jane@x.com", "123456")
    assert [m["To"] for m in mailer.sent] == ["jane@x.com"]


def test_smtp_failures_raise_mailer_error(monkeypatch):
    monkeypatch.setattr(settings, "smtp_host", "smtp.invalid")
    monkeypatch.setattr(settings, "smtp_use_tls", True)

    class _BrokenSMTP:
        def __init__(self, *args, **kwargs):
            raise smtplib.SMTPConnectError(421, b"unavailable")

    monkeypatch.setattr(smtplib, "SMTP", _BrokenSMTP)
    mailer = Mailer()
    with pytest.raises(MailerError):
        mailer.send_verification_code("jane", "jane@x.com", "123456")
    assert len(mailer.sent) == 0


def test_smtp_delivery_uses_starttls_and_login(monkeypatch):
    monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
    monkeypatch.setattr(settings, "smtp_use_tls", True)
    monkeypatch.setattr(settings, "smtp_username", "mailer")
    monkeypatch.setattr(settings, "smtp_password", "secret")
    calls = []

    class _RecordingSMTP:
        def __init__(self, host, port, timeout):
            calls.append(("connect", host, port))

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def starttls(self):
            calls.append(("starttls",))

        def login(self, user, password):
            calls.append(("login", user, password))

        def send_message(self, message):
            calls.append(("send", message["To"]))

    monkeypatch.setattr(smtplib, "SMTP", _RecordingSMTP)
    Mailer().send_verification_code("jane", "jane@x.com", "123456")

    assert calls == [
        ("connect", "smtp.example.com", settings.smtp_port),
        ("starttls",),
        ("login", "mailer", "secret"),
        ("send", "jane@x.com"),
    ]
