"""
Refresh token exchange (grant_type=refresh_token). The requested scope must not exceed the
originally granted one; enforcing that is the issue callback's job.
"""
from collections.abc import Mapping
from typing import Any

from oauth2_core.callbacks import strategy
from oauth2_core.exchange.base import ExchangeHandler


class RefreshTokenExchange(ExchangeHandler):
    grant_type = "refresh_token"
    token_type = "bearer"
    invalid_message = "invalid refresh token"
    issue_strategies = (
        strategy("simple", "client", "refresh_token"),
        strategy("with_scope", "client", "refresh_token", "scope"),
        strategy("with_body", "client", "refresh_token", "scope", "body"),
        strategy("with_auth_info", "client", "refresh_token", "scope", "body", "auth_info"),
    )

    def extract(self, body: Mapping[str, Any]) -> dict[str, Any]:
        return {"refresh_token": self.require(body, "refresh_token"), "scope": self.scope_from(body)}


def refresh_token(issue, **options) -> RefreshTokenExchange:
    return RefreshTokenExchange(issue, **options)
