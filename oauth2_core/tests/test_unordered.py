"""Tests for UnorderedList."""
from oauth2_core.unordered import UnorderedList


def test_order_insensitive_equality():
    assert UnorderedList("code token") == UnorderedList("token code")
    assert UnorderedList("code token").equal_to("token code")
    assert UnorderedList(["code", "token"]) == "token code"


def test_different_lengths_not_equal():
    assert UnorderedList("code") != UnorderedList("code token")


def test_contains():
    types = UnorderedList("code id_token")
    assert types.contains("code")
    assert not types.contains("token")
    assert types.contains_any(["token", "id_token"])
    assert not types.contains_any(["token"])


def test_empty():
    assert len(UnorderedList(None)) == 0
    assert len(UnorderedList("")) == 0
    assert str(UnorderedList("code  token")) == "code token"


def test_hash_matches_equality():
    assert hash(UnorderedList("a b")) == hash(UnorderedList("b a"))
