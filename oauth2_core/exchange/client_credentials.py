"""
Client credentials exchange (grant_type=client_credentials).
The client authenticated itself before the endpoint ran; scope is optional.
"""
from collections.abc import Mapping
from typing import Any

from oauth2_core.callbacks import strategy
from oauth2_core.exchange.base import ExchangeHandler


class ClientCredentialsExchange(ExchangeHandler):
    grant_type = "client_credentials"
    token_type = "Bearer"
    invalid_message = "invalid client credentials"
    issue_strategies = (
        strategy("simple", "client"),
        strategy("with_scope", "client", "scope"),
        strategy("with_body", "client", "scope", "body"),
        strategy("with_auth_info", "client", "scope", "body", "auth_info"),
    )

    def extract(self, body: Mapping[str, Any]) -> dict[str, Any]:
        return {"scope": self.scope_from(body)}


def client_credentials(issue, **options) -> ClientCredentialsExchange:
    return ClientCredentialsExchange(issue, **options)
