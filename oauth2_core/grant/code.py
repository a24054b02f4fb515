"""
Authorization code grant (RFC 6749 §4.1): response_type=code.

The issue callback creates a short-lived code bound to the client, the redirect URI the
client asked for and the approving user:

    async def issue(client, redirect_uri, user, ares):
        return await codes.create(client.id, redirect_uri, user.id, ares.get("scope"))

It may return the code, or (code, extra_params); a falsy value denies the request.
"""
from collections.abc import Mapping
from typing import Any

from oauth2_core.callbacks import strategy
from oauth2_core.grant.base import RedirectGrant
from oauth2_core.request import Transaction


class CodeGrant(RedirectGrant):
    name = "code"
    response_types = ("code",)
    default_mode = "query"
    issue_strategies = (
        strategy("simple", "client", "redirect_uri", "user"),
        strategy("with_decision", "client", "redirect_uri", "user", "ares"),
        strategy("with_request", "client", "redirect_uri", "user", "ares", "areq"),
        strategy("with_locals", "client", "redirect_uri", "user", "ares", "areq", "locals"),
    )

    def build_params(self, grant: str, params: Mapping[str, Any] | None, txn: Transaction) -> dict[str, Any]:
        out: dict[str, Any] = {"code": grant}
        if params:
            out.update(params)
        if txn.state:
            out["state"] = txn.state
        return out


def code(issue, **options) -> CodeGrant:
    return CodeGrant(issue, **options)


authorization_code = code
