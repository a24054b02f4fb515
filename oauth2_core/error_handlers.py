"""
Turn raised errors into OAuth 2.0 error responses.

direct   - JSON body for the token endpoint (RFC 6749 §5.2).
indirect - redirect back to the client for the authorization endpoint (§4.1.2.1), when the
           request carries a transaction with a redirect URI; otherwise the error is re-raised.
"""
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse, Response

from oauth2_core.authorize import store_for
from oauth2_core.errors import OAuth2Error
from oauth2_core.grant.base import error_params
from oauth2_core.request import OAuth2Request
from oauth2_core.response_modes import DEFAULT_MODES, ResponseMode
from oauth2_core.unordered import UnorderedList

if TYPE_CHECKING:
    from oauth2_core.server import Server

logger = logging.getLogger(__name__)

CLIENT_CHALLENGE = 'Basic realm="Clients"'


def direct_response(err: Exception) -> JSONResponse:
    status = err.status if isinstance(err, OAuth2Error) else 500
    if not status or status < 400:
        status = 500
    body = error_params(err, None)
    body.pop("state", None)
    headers = {}
    if status == 401:
        headers["WWW-Authenticate"] = CLIENT_CHALLENGE
    return JSONResponse(body, status_code=status, headers=headers)


def error_handler(
    mode: str = "direct",
    *,
    fragment: Sequence[str] = ("token",),
    modes: Mapping[str, ResponseMode] | None = None,
):
    if mode not in ("direct", "indirect"):
        raise ValueError(f"unknown error handler mode {mode!r}")
    encoders = dict(DEFAULT_MODES)
    if modes:
        encoders.update(modes)

    async def direct(err: Exception, request: OAuth2Request) -> Response:
        if not isinstance(err, OAuth2Error):
            logger.exception("unhandled error at token endpoint", exc_info=err)
        return direct_response(err)

    async def indirect(err: Exception, request: OAuth2Request) -> Response:
        txn = getattr(request, "oauth2", None)
        if txn is None or not txn.redirect_uri:
            raise err
        enc = "fragment" if UnorderedList(txn.type).contains_any(fragment) else "query"
        enc = txn.req.get("response_mode") or enc
        encode = encoders.get(enc)
        if encode is None:
            raise err
        return encode(txn.redirect_uri, error_params(err, txn.state))

    return direct if mode == "direct" else indirect


def authorization_error_handler(
    server: "Server",
    *,
    session_key: str | None = None,
    transaction_field: str | None = None,
    id_length: int | None = None,
):
    """Deliver errors through the transaction's grant handlers, then drop the transaction."""
    store = store_for(server, session_key, transaction_field, id_length)

    async def authorization_error(err: Exception, request: OAuth2Request) -> Response:
        txn = getattr(request, "oauth2", None)
        if txn is None:
            raise err
        response = await server._respond_error(err, txn)
        if response is None:
            raise err
        await store.remove(request, txn.transaction_id)
        return response

    return authorization_error
