"""Tests for password reset, password change, profile edits and account deletion."""

import pytest

from deiwy.core import security
from deiwy.core.errors import (
    ChangePasswordError,
    ConstraintError,
    DeleteAccountError,
    ResetPasswordError,
    UserNotFoundError,
)
from deiwy.core.settings import settings
from deiwy.models import SchemaValidationError, User
from deiwy.schemas.user import ProfileUpdateRequest
from deiwy.services import user_service
from deiwy.services.mailer import Mailer

NEW_PASSWORD = "N3wPassword!"


def test_request_password_reset_mails_a_link(db_session, test_user, monkeypatch):
    monkeypatch.setattr(settings, "client_url", "https://chat.example.com/")
    mailer = Mailer()

    user = user_service.request_password_reset(db_session, "ALICE@example.com", mailer)

    assert user.user_id == test_user.user_id
    message = mailer.sent[-1]
    assert message["Subject"] == "Password Reset Request"
    assert message["To"] == "alice@example.com"
    assert "https://chat.example.com/password/reset/" in message.get_body(preferencelist=("plain",)).get_content()


def test_request_password_reset_for_unknown_email(db_session):
    mailer = Mailer()
    with pytest.raises(UserNotFoundError):
        user_service.request_password_reset(db_session, "nobody@example.com", mailer)
    assert not mailer.sent


def test_reset_password_sets_the_new_password(db_session, test_user):
    token = security.create_password_reset_token(test_user.user_id, test_user.password)

    user_service.reset_password(db_session, token, NEW_PASSWORD)

    db_session.expire_all()
    user = db_session.get(User, test_user.user_id)
    assert user.check_password(NEW_PASSWORD)
    assert not user.check_password("Passw0rd!")


def test_reset_link_works_only_once(db_session, test_user):
    token = security.create_password_reset_token(test_user.user_id, test_user.password)
    user_service.reset_password(db_session, token, NEW_PASSWORD)

    with pytest.raises(ResetPasswordError):
        user_service.reset_password(db_session, token, "An0therOne!")


def test_expired_reset_token_is_rejected(db_session, test_user, monkeypatch):
    monkeypatch.setattr(settings, "password_reset_ttl_seconds", -60)
    token = security.create_password_reset_token(test_user.user_id, test_user.password)

    with pytest.raises(ResetPasswordError):
        user_service.reset_password(db_session, token, NEW_PASSWORD)


@pytest.mark.parametrize("token", ["", "not-a-token"])
def test_malformed_reset_token_is_rejected(db_session, token):
    with pytest.raises(ResetPasswordError):
        user_service.reset_password(db_session, token, NEW_PASSWORD)


def test_session_cookie_is_not_a_reset_token(db_session, test_user):
    with pytest.raises(ResetPasswordError):
        user_service.reset_password(db_session, security.sign_session_id("abc"), NEW_PASSWORD)


def test_reset_password_checks_the_password_pattern(db_session, test_user):
    token = security.create_password_reset_token(test_user.user_id, test_user.password)
    with pytest.raises(SchemaValidationError):
        user_service.reset_password(db_session, token, "weak")


def test_change_password(db_session, test_user):
    user_service.change_password(db_session, test_user, "Passw0rd!", NEW_PASSWORD)
    assert test_user.check_password(NEW_PASSWORD)


def test_change_password_requires_the_current_one(db_session, test_user):
    with pytest.raises(ChangePasswordError):
        user_service.change_password(db_session, test_user, "Wr0ngPass!", NEW_PASSWORD)
    assert test_user.check_password("Passw0rd!")


def test_update_profile_without_email_change(db_session, test_user):
    old_key = test_user.userkey
    payload = ProfileUpdateRequest.model_validate({"Firstname": "Alicia", "Username": "alicia"})

    user, email_changed = user_service.update_profile(db_session, test_user, payload)

    assert email_changed is False
    assert user.firstname == "Alicia"
    assert user.username == "alicia"
    assert user.userkey.startswith("alicia#")
    assert user.userkey != old_key
    assert user.is_verified is True


def test_update_profile_email_change_requires_verification(db_session, test_user):
    payload = ProfileUpdateRequest.model_validate({"Email": "Alice.New@Example.com"})

    user, email_changed = user_service.update_profile(db_session, test_user, payload)

    assert email_changed is True
    assert user.email == "alice.new@example.com"
    assert user.is_verified is False
    assert user.last_verified_at is None


def test_update_profile_same_email_in_other_case_is_not_a_change(db_session, test_user):
    payload = ProfileUpdateRequest.model_validate({"Email": "ALICE@example.com"})
    _, email_changed = user_service.update_profile(db_session, test_user, payload)
    assert email_changed is False
    assert test_user.is_verified is True


def test_update_profile_invalid_field_leaves_user_untouched(db_session, test_user):
    payload = ProfileUpdateRequest.model_validate({"Firstname": "Alicia", "Lastname": "x"})

    with pytest.raises(SchemaValidationError):
        user_service.update_profile(db_session, test_user, payload)

    assert db_session.get(User, test_user.user_id).firstname == "Alice"


def test_update_profile_taken_email(db_session, test_user, other_user):
    payload = ProfileUpdateRequest.model_validate({"Email": "bob@example.com"})
    with pytest.raises(ConstraintError):
        user_service.update_profile(db_session, test_user, payload)


def test_profile_update_needs_at_least_one_field():
    with pytest.raises(ValueError):
        ProfileUpdateRequest.model_validate({})


def test_delete_account(db_session, test_user):
    user_id = test_user.user_id
    user_service.delete_account(db_session, test_user, " Alice@Example.com ")
    assert db_session.get(User, user_id) is None


def test_delete_account_requires_matching_email(db_session, test_user):
    with pytest.raises(DeleteAccountError):
        user_service.delete_account(db_session, test_user, "bob@example.com")
    assert db_session.get(User, test_user.user_id) is not None
