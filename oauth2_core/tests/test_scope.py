"""Tests for scope parsing."""
from oauth2_core.scope import normalize_separators, parse_scope


def test_parse_space_separated():
    assert parse_scope("read write", " ") == ["read", "write"]


def test_parse_absent_scope_is_empty_list():
    assert parse_scope(None) == []
    assert parse_scope("") == []


def test_parse_single_token():
    assert parse_scope("read") == ["read"]


def test_first_separator_that_splits_wins():
    assert parse_scope("read,write", [" ", ","]) == ["read", "write"]
    assert parse_scope("read write,admin", [" ", ","]) == ["read", "write,admin"]


def test_empty_tokens_and_duplicates_dropped():
    assert parse_scope("read  write read ") == ["read", "write"]


def test_rejoin_is_idempotent():
    scope = parse_scope("profile email  profile openid")
    assert parse_scope(" ".join(scope)) == scope


def test_list_input_is_normalized():
    assert parse_scope(["read", " write", "read"]) == ["read", "write"]


def test_normalize_separators():
    assert normalize_separators(None) == [" "]
    assert normalize_separators(",") == [","]
    assert normalize_separators((" ", ",")) == [" ", ","]
