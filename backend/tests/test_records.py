import logging

import pytest

from lifejournal.crypto import seal
from lifejournal.records import unseal_rows

def _rows(master_key, other_key):
    return [
        {"id": "a", "payload": seal({"n": 1}, master_key).to_json()},
        {"id": "b", "payload": seal({"n": 2}, other_key).to_json()},   # wrong key
        {"id": "c", "payload": "garbage"},                              # not an envelope
        {"id": "d", "payload": None},                                   # null column
        {"id": "e", "payload": seal({"n": 5}, master_key).to_json()},
    ]

def test_unreadable_rows_become_none(master_key, other_key):
    pairs = unseal_rows(_rows(master_key, other_key), "payload", master_key)
    assert [(r["id"], v) for r, v in pairs] == [
        ("a", {"n": 1}), ("b", None), ("c", None), ("d", None), ("e", {"n": 5}),
    ]

def test_unreadable_rows_skipped(master_key, other_key):
    pairs = unseal_rows(_rows(master_key, other_key), "payload", master_key, skip_unreadable=True)
    assert [(r["id"], v) for r, v in pairs] == [("a", {"n": 1}), ("e", {"n": 5})]

def test_unreadable_rows_are_logged_without_secrets(master_key, other_key, caplog):
    rows = _rows(master_key, other_key)
    with caplog.at_level(logging.WARNING, logger="lifejournal.records"):
        unseal_rows(rows, "payload", master_key)
    assert "record b" in caplog.text and "AuthenticationError" in caplog.text
    assert "record c" in caplog.text and "EnvelopeFormatError" in caplog.text
    assert rows[1]["payload"] not in caplog.text
    assert master_key.hex() not in caplog.text

def test_bad_key_is_not_swallowed(master_key):
    rows = [{"id": "a", "payload": seal({"n": 1}, master_key).to_json()}]
    with pytest.raises(ValueError):
        unseal_rows(rows, "payload", b"short")

def test_empty_batch(master_key):
    assert unseal_rows([], "payload", master_key) == []
