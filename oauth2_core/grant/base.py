"""
Grant handler contract for the authorization endpoint.

A grant handler takes part in three phases, each optional:
  parse_request(request) -> mapping merged into the transaction's req (or None)
  respond(txn)           -> Response when it completes the transaction, None to pass
  respond_error(err, txn)-> Response when it can deliver err to the client, None to pass
Raising from any phase fails the request.
"""
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from starlette.responses import Response

from oauth2_core.callbacks import Strategy, invoke, maybe_await, resolve_strategy
from oauth2_core.errors import AuthorizationError, OAuth2Error
from oauth2_core.request import OAuth2Request, Transaction
from oauth2_core.response_modes import DEFAULT_MODES, ResponseMode
from oauth2_core.scope import normalize_separators, parse_scope

logger = logging.getLogger(__name__)


class GrantHandler:
    response_types: tuple[str, ...] = ()

    async def parse_request(self, request: OAuth2Request) -> Mapping[str, Any] | None:
        return None

    async def respond(self, txn: Transaction) -> Response | None:
        return None

    async def respond_error(self, err: Exception, txn: Transaction) -> Response | None:
        return None


class RequestExtension(GrantHandler):
    """Wraps a plain function(request) -> mapping registered to add parameters to req."""

    def __init__(self, fn: Callable):
        self.fn = fn

    async def parse_request(self, request: OAuth2Request) -> Mapping[str, Any] | None:
        return await maybe_await(self.fn(request))

    def __repr__(self) -> str:
        return f"RequestExtension({getattr(self.fn, '__name__', self.fn)!r})"


def error_params(err: Exception, state: str | None) -> dict[str, str]:
    if isinstance(err, OAuth2Error):
        params = err.to_params()
    else:
        params = {"error": "server_error"}
        if str(err):
            params["error_description"] = str(err)
    if state and "state" not in params:
        params["state"] = state
    return params


class RedirectGrant(GrantHandler):
    """
    Shared behaviour of grants delivered to the redirect URI (code, implicit):
    request parsing, the allow/deny split, issue-callback dispatch and response-mode encoding.
    """

    name = "grant"
    default_mode = "query"
    issue_strategies: Sequence[Strategy] = ()

    def __init__(
        self,
        issue: Callable,
        *,
        scope_separator: str | Sequence[str] = " ",
        response_mode: str | None = None,
        modes: Mapping[str, ResponseMode] | None = None,
        strategy: str | Strategy | None = None,
    ):
        if issue is None or not callable(issue):
            raise TypeError(f"{self.name} grant requires an issue callback")
        self.issue = issue
        self.strategy = resolve_strategy(issue, self.issue_strategies, strategy, owner=f"{self.name} grant")
        self.separators = normalize_separators(scope_separator)
        self.modes = dict(DEFAULT_MODES)
        if modes:
            self.modes.update(modes)
        self.response_mode = response_mode or self.default_mode
        if self.response_mode not in self.modes:
            raise ValueError(f"{self.name} grant: unknown response mode {self.response_mode!r}")

    async def parse_request(self, request: OAuth2Request) -> dict[str, Any]:
        client_id = request.param("client_id")
        if not client_id:
            raise AuthorizationError("Missing required parameter: client_id", "invalid_request")
        areq: dict[str, Any] = {
            "client_id": client_id,
            "redirect_uri": request.param("redirect_uri"),
            "scope": parse_scope(request.param("scope"), self.separators),
            "state": request.param("state"),
        }
        response_mode = request.param("response_mode")
        if response_mode:
            if response_mode not in self.modes:
                raise AuthorizationError(f"Unsupported response mode: {response_mode}", "invalid_request")
            areq["response_mode"] = response_mode
        return areq

    def encoder_for(self, txn: Transaction) -> ResponseMode:
        mode = txn.req.get("response_mode") or self.response_mode
        return self.modes.get(mode) or self.modes[self.response_mode]

    def issue_values(self, txn: Transaction) -> dict[str, Any]:
        return {
            "client": txn.client,
            "redirect_uri": txn.req.get("redirect_uri"),
            "user": txn.user,
            "ares": txn.res or {},
            "areq": txn.req,
            "locals": txn.locals,
        }

    def build_params(self, grant: str, params: Mapping[str, Any] | None, txn: Transaction) -> dict[str, Any]:
        raise NotImplementedError

    async def respond(self, txn: Transaction) -> Response | None:
        if not txn.redirect_uri:
            raise AuthorizationError("Unable to issue redirect for OAuth 2.0 transaction", "server_error")
        if not (txn.res or {}).get("allow"):
            return await self.respond_error(AuthorizationError(None, "access_denied"), txn)

        result = await invoke(self.issue, self.strategy, self.issue_values(txn))
        params = None
        if isinstance(result, (tuple, list)):
            result, params = result[0], (result[1] if len(result) > 1 else None)
        if not result:
            raise AuthorizationError("Request denied by authorization server", "access_denied")
        logger.debug("%s grant issued for transaction %s", self.name, txn.transaction_id)
        return self.encoder_for(txn)(txn.redirect_uri, self.build_params(result, params, txn))

    async def respond_error(self, err: Exception, txn: Transaction) -> Response | None:
        if not txn.redirect_uri:
            return None
        return self.encoder_for(txn)(txn.redirect_uri, error_params(err, txn.state))
