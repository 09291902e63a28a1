"""Tests for the database-backed session store."""

from deiwy.db.time import epoch_seconds
from deiwy.models import WebSession
from deiwy.services.session_store import USER_KEY, SessionStore


def test_create_and_load_round_trip(db_session):
    store = SessionStore(db_session, ttl_seconds=60)
    state = store.create({USER_KEY: 7})

    loaded = store.load(state.session_id)
    assert loaded is not None
    assert loaded.user_id == 7
    assert loaded.expires == state.expires


def test_expires_is_an_absolute_timestamp(db_session):
    before = epoch_seconds()
    state = SessionStore(db_session, ttl_seconds=120).create()
    assert before + 120 <= state.expires <= epoch_seconds() + 120

    record = db_session.get(WebSession, state.session_id)
    assert record.expires == state.expires
    assert isinstance(record.data, bytes)


def test_expired_session_is_treated_as_missing_and_removed(db_session):
    store = SessionStore(db_session)
    state = store.create({USER_KEY: 1})
    record = db_session.get(WebSession, state.session_id)
    record.expires = epoch_seconds() - 1
    db_session.commit()

    assert store.load(state.session_id) is None
    assert db_session.get(WebSession, state.session_id) is None


def test_unknown_or_empty_ids_load_nothing(db_session):
    store = SessionStore(db_session)
    assert store.load(None) is None
    assert store.load("") is None
    assert store.load("does-not-exist") is None


def test_flash_messages_are_consumed_once(db_session):
    store = SessionStore(db_session)
    state = store.create({USER_KEY: 3})
    state.flash("success", "Saved")
    state.flash("error", "Oops")
    store.save(state)

    reloaded = store.load(state.session_id)
    assert reloaded.consume_flash() == {"success": "Saved", "error": "Oops"}
    store.save(reloaded)
    assert store.load(state.session_id).consume_flash() == {}


def test_destroy_removes_the_row(db_session):
    store = SessionStore(db_session)
    state = store.create()
    store.destroy(state.session_id)
    store.destroy(state.session_id)
    assert store.load(state.session_id) is None


def test_purge_expired_only_removes_stale_rows(db_session):
    store = SessionStore(db_session)
    live = store.create()
    db_session.add(WebSession(session_id="stale", expires=epoch_seconds() - 10, data=b"{}"))
    db_session.commit()

    assert store.purge_expired() == 1
    assert store.load(live.session_id) is not None


def test_undecodable_payload_yields_empty_data(db_session):
    db_session.add(WebSession(session_id="garbled", expires=epoch_seconds() + 60, data=b"\xff\xfe"))
    db_session.commit()

    state = SessionStore(db_session).load("garbled")
    assert state is not None
    assert state.data == {}
    assert state.user_id is None
