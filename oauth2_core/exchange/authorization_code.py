"""
Authorization code exchange (grant_type=authorization_code).
redirect_uri is passed through as a verifier: when the authorization request carried one,
the issue callback must check that both are identical.
"""
from collections.abc import Mapping
from typing import Any

from oauth2_core.callbacks import strategy
from oauth2_core.exchange.base import ExchangeHandler


class AuthorizationCodeExchange(ExchangeHandler):
    grant_type = "authorization_code"
    token_type = "bearer"
    invalid_message = "invalid code"
    issue_strategies = (
        strategy("simple", "client", "code", "redirect_uri"),
        strategy("with_body", "client", "code", "redirect_uri", "body"),
        strategy("with_auth_info", "client", "code", "redirect_uri", "body", "auth_info"),
    )

    def extract(self, body: Mapping[str, Any]) -> dict[str, Any]:
        return {"code": self.require(body, "code"), "redirect_uri": body.get("redirect_uri")}


def authorization_code(issue, **options) -> AuthorizationCodeExchange:
    return AuthorizationCodeExchange(issue, **options)


code = authorization_code
