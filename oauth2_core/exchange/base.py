"""
Token endpoint exchange contract (RFC 6749 §4.1.3, §4.3.2, §4.4.2, §6, RFC 7523).

Every exchange follows the same envelope: require a parsed body, pull the grant-specific
parameters out of it, call the application's issue callback with the strategy chosen at
construction, and write the JSON token response. The callback returns the access token,
or a tuple (access_token, refresh_token, params); a mapping in second position is taken as
params. A falsy access token becomes invalid_grant; exceptions propagate unchanged.
"""
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from starlette.responses import JSONResponse, Response

from oauth2_core.callbacks import Strategy, invoke, resolve_strategy
from oauth2_core.errors import ConfigurationError, TokenError
from oauth2_core.request import OAuth2Request
from oauth2_core.scope import normalize_separators, parse_scope

logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


def unpack_issued(result: Any) -> tuple[Any, Any, str | None, Mapping[str, Any] | None]:
    """Normalize an issue callback's return value to (access_token, refresh_token, token_type, params)."""
    if not isinstance(result, (tuple, list)):
        return result, None, None, None
    if not result:
        return None, None, None, None
    access_token, *rest = result
    refresh_token = rest[0] if rest else None
    token_type = None
    params = None
    if isinstance(refresh_token, Mapping):
        params, refresh_token = refresh_token, None
    for extra in rest[1:]:
        if isinstance(extra, Mapping):
            params = extra
        elif isinstance(extra, str):
            token_type = extra
    return access_token, refresh_token, token_type, params


def token_body(
    access_token: str,
    refresh_token: str | None = None,
    params: Mapping[str, Any] | None = None,
    token_type: str = "Bearer",
) -> dict[str, Any]:
    """
    access_token, refresh_token (if any), then params in the order given, then token_type
    unless params already carried one (which then keeps its own position).
    """
    tok: dict[str, Any] = {"access_token": access_token}
    if refresh_token:
        tok["refresh_token"] = refresh_token
    if params:
        tok.update(params)
    if not tok.get("token_type"):
        tok["token_type"] = token_type
    return tok


def token_response(body: Mapping[str, Any]) -> JSONResponse:
    return JSONResponse(dict(body), headers=NO_STORE_HEADERS)


class ExchangeHandler:
    """Base exchange; subclasses declare grant_type, strategies and how to read the body."""

    grant_type = ""
    token_type = "Bearer"
    invalid_message = "invalid grant"
    issue_strategies: Sequence[Strategy] = ()

    def __init__(
        self,
        issue: Callable,
        *,
        user_property: str = "user",
        scope_separator: str | Sequence[str] = " ",
        token_type: str | None = None,
        strategy: str | Strategy | None = None,
    ):
        if issue is None or not callable(issue):
            raise TypeError(f"{self.grant_type} exchange requires an issue callback")
        self.issue = issue
        self.user_property = user_property
        self.separators = normalize_separators(scope_separator)
        if token_type:
            self.token_type = token_type
        self.strategy = resolve_strategy(
            issue, self.issue_strategies, strategy, owner=f"{self.grant_type} exchange"
        )

    @property
    def __name__(self) -> str:
        return self.grant_type

    def require(self, body: Mapping[str, Any], field: str) -> Any:
        value = body.get(field)
        if not value:
            raise TokenError(f"missing {field} parameter", "invalid_request")
        return value

    def scope_from(self, body: Mapping[str, Any]) -> list[str]:
        return parse_scope(body.get("scope"), self.separators)

    def extract(self, body: Mapping[str, Any]) -> dict[str, Any]:
        """Grant-specific issue arguments read from the body; raise TokenError when invalid."""
        return {}

    async def __call__(self, request: OAuth2Request) -> Response:
        if request.body is None:
            raise ConfigurationError("Request body not parsed. Use bodyParser middleware.")
        values = self.extract(request.body)
        values["client"] = request.get(self.user_property)
        values["body"] = request.body
        values["auth_info"] = request.auth_info

        result = await invoke(self.issue, self.strategy, values)
        access_token, refresh_token, token_type, params = unpack_issued(result)
        if not access_token:
            raise TokenError(self.invalid_message, "invalid_grant")
        logger.debug("%s exchange issued an access token (refresh_token=%s)", self.grant_type, bool(refresh_token))
        return token_response(token_body(access_token, refresh_token, params, token_type or self.token_type))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(strategy={self.strategy.name!r})"
