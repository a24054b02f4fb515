"""
Scope parameter parsing (RFC 6749 §3.3).
Several separators may be configured to accept clients that join scope with e.g. commas;
they are tried in order and the first one that actually splits the value wins.
"""
from collections.abc import Sequence


def normalize_separators(separators: str | Sequence[str] | None) -> list[str]:
    if not separators:
        return [" "]
    if isinstance(separators, str):
        return [separators]
    return list(separators)


def parse_scope(value: str | Sequence[str] | None, separators: str | Sequence[str] | None = " ") -> list[str]:
    """
    Split a scope string into an ordered list of tokens.
    Empty tokens are dropped and duplicates keep their first position, so re-joining the
    result with the same separator and parsing again yields the same list.
    """
    if not value:
        return []
    if isinstance(value, str):
        tokens = [value]
        for sep in normalize_separators(separators):
            separated = value.split(sep)
            if len(separated) > 1:
                tokens = separated
                break
    else:
        tokens = list(value)

    scope: list[str] = []
    for token in tokens:
        token = token.strip()
        if token and token not in scope:
            scope.append(token)
    return scope
