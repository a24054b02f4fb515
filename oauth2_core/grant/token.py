"""
Implicit grant (RFC 6749 §4.2): response_type=token.
The access token is delivered in the redirect URI fragment (or a form post). The query string
leaks through referrers and server logs, so it is used only when configured with
response_mode="query".
"""
from collections.abc import Mapping
from typing import Any

from oauth2_core.callbacks import strategy
from oauth2_core.errors import AuthorizationError
from oauth2_core.grant.base import RedirectGrant
from oauth2_core.request import OAuth2Request, Transaction


class TokenGrant(RedirectGrant):
    name = "token"
    response_types = ("token",)
    default_mode = "fragment"
    issue_strategies = (
        strategy("simple", "client", "user"),
        strategy("with_decision", "client", "user", "ares"),
        strategy("with_request", "client", "user", "ares", "areq"),
        strategy("with_locals", "client", "user", "ares", "areq", "locals"),
    )

    def __init__(self, issue, *, token_type: str = "Bearer", **options):
        super().__init__(issue, **options)
        # query stays available only when it is the configured mode
        if self.response_mode != "query":
            self.modes.pop("query", None)
        self.token_type = token_type

    async def parse_request(self, request: OAuth2Request) -> dict[str, Any]:
        if request.param("response_mode") == "query" and "query" not in self.modes:
            raise AuthorizationError("Unsupported response mode: query", "invalid_request")
        return await super().parse_request(request)

    def build_params(self, grant: str, params: Mapping[str, Any] | None, txn: Transaction) -> dict[str, Any]:
        out: dict[str, Any] = {"access_token": grant}
        if params:
            out.update(params)
        out.setdefault("token_type", self.token_type)
        if txn.state:
            out["state"] = txn.state
        return out


def token(issue, **options) -> TokenGrant:
    return TokenGrant(issue, **options)


implicit = token
