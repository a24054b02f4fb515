"""
Resource owner password credentials exchange (grant_type=password).
"""
from collections.abc import Mapping
from typing import Any

from oauth2_core.callbacks import strategy
from oauth2_core.exchange.base import ExchangeHandler


class PasswordExchange(ExchangeHandler):
    grant_type = "password"
    token_type = "Bearer"
    invalid_message = "invalid resource owner credentials"
    issue_strategies = (
        strategy("simple", "client", "username", "password"),
        strategy("with_scope", "client", "username", "password", "scope"),
        strategy("with_body", "client", "username", "password", "scope", "body"),
        strategy("with_auth_info", "client", "username", "password", "scope", "body", "auth_info"),
    )

    def extract(self, body: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "username": self.require(body, "username"),
            "password": self.require(body, "password"),
            "scope": self.scope_from(body),
        }


def password(issue, **options) -> PasswordExchange:
    return PasswordExchange(issue, **options)
