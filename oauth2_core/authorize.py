"""
Authorization endpoint (RFC 6749 §3.1) and the consent round trip.

authorization() validates the request and either answers at once (immediate approval) or
parks it in the session as a transaction and returns None; the application then renders a
consent page from request.oauth2. decision() completes the transaction with the resource
owner's answer; resume() re-runs immediate approval after an interruption such as a login.
"""
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from starlette.responses import Response

from oauth2_core.callbacks import invoke, maybe_await, resolve_strategy, strategy
from oauth2_core.errors import AuthorizationError, ConfigurationError, ForbiddenError
from oauth2_core.request import OAuth2Request, Transaction
from oauth2_core.txn import SessionStore

if TYPE_CHECKING:
    from oauth2_core.server import Server

logger = logging.getLogger(__name__)

VALIDATE_STRATEGIES = (
    strategy("request", "areq"),
    strategy("simple", "client_id", "redirect_uri"),
    strategy("with_scope", "client_id", "redirect_uri", "scope"),
    strategy("with_type", "client_id", "redirect_uri", "scope", "type"),
)

IMMEDIATE_STRATEGIES = (
    strategy("simple", "client", "user"),
    strategy("with_scope", "client", "user", "scope"),
    strategy("with_type", "client", "user", "scope", "type"),
    strategy("with_request", "client", "user", "scope", "type", "areq"),
    strategy("with_locals", "client", "user", "scope", "type", "areq", "locals"),
)


def _never_immediate(client, user):
    return False


def store_for(server: "Server", session_key=None, transaction_field=None, id_length=None) -> SessionStore:
    """The server's store, or a copy of it with per-endpoint overrides."""
    if session_key is None and transaction_field is None and id_length is None:
        return server.store
    base = server.store
    return SessionStore(
        session_key=session_key or base.session_key,
        transaction_field=transaction_field or base.transaction_field,
        id_length=id_length or base.id_length,
    )


def unpack_validated(result: Any) -> tuple[Any, str | None]:
    if isinstance(result, (tuple, list)):
        client = result[0] if result else None
        redirect_uri = result[1] if len(result) > 1 else None
        return client, redirect_uri
    return result, None


def unpack_immediate(result: Any) -> tuple[bool, dict[str, Any] | None, Mapping[str, Any] | None]:
    """immediate() returns allow, or (allow, info), or (allow, info, locals)."""
    if isinstance(result, (tuple, list)):
        allow = bool(result[0]) if result else False
        info = result[1] if len(result) > 1 else None
        locals_ = result[2] if len(result) > 2 else None
        return allow, info, locals_
    return bool(result), None, None


def unsupported(txn: Transaction) -> AuthorizationError:
    return AuthorizationError(f"Unsupported response type: {txn.type}", "unsupported_response_type")


def immediate_values(txn: Transaction) -> dict[str, Any]:
    return {
        "client": txn.client,
        "user": txn.user,
        "scope": txn.req.get("scope"),
        "type": txn.type,
        "areq": txn.req,
        "locals": txn.locals,
    }


async def complete(server: "Server", txn: Transaction, ares: Mapping[str, Any] | None) -> Response:
    """Approve txn and let its grant handlers answer."""
    txn.res = dict(ares or {})
    txn.res["allow"] = True
    response = await server._respond(txn)
    if response is None:
        raise unsupported(txn)
    return response


def authorization(
    server: "Server",
    validate: Callable,
    immediate: Callable | None = None,
    *,
    user_property: str = "user",
    validate_strategy=None,
    immediate_strategy=None,
    session_key: str | None = None,
    transaction_field: str | None = None,
    id_length: int | None = None,
):
    if validate is None or not callable(validate):
        raise TypeError("authorization endpoint requires a validate callback")
    immediate = immediate or _never_immediate
    validate_with = resolve_strategy(validate, VALIDATE_STRATEGIES, validate_strategy, owner="validate")
    immediate_with = resolve_strategy(immediate, IMMEDIATE_STRATEGIES, immediate_strategy, owner="immediate")
    store = store_for(server, session_key, transaction_field, id_length)

    async def authorization_endpoint(request: OAuth2Request) -> Response | None:
        if request.session is None:
            raise ConfigurationError("server requires session support")

        response_type = request.param("response_type")
        areq = await server._parse(response_type, request)
        if not areq:
            raise AuthorizationError("Missing required parameter: response_type", "invalid_request")
        if len(areq) == 1 and "type" in areq:
            raise AuthorizationError(f"Unsupported response type: {response_type}", "unsupported_response_type")

        validated = await invoke(
            validate,
            validate_with,
            {
                "areq": areq,
                "client_id": areq.get("client_id"),
                "redirect_uri": areq.get("redirect_uri"),
                "scope": areq.get("scope"),
                "type": areq.get("type"),
            },
        )
        client, redirect_uri = unpack_validated(validated)
        txn = Transaction(client=client or None, redirect_uri=redirect_uri, req=areq)
        request.oauth2 = txn
        if not client:
            logger.info("authorization request from unauthorized client %s", areq.get("client_id"))
            raise AuthorizationError("Unauthorized client", "unauthorized_client")

        txn.user = request.get(user_property)
        allow, info, locals_ = unpack_immediate(await invoke(immediate, immediate_with, immediate_values(txn)))
        if locals_:
            txn.locals.update(locals_)
        if allow:
            logger.debug("authorization request for client %s approved immediately", areq.get("client_id"))
            return await complete(server, txn, info)

        txn.info = info
        txn.transaction_id = await store.create(server, request, txn)
        return None

    return authorization_endpoint


async def load_transaction(server: "Server", store: SessionStore, request: OAuth2Request) -> Transaction:
    """request.oauth2 if a loader already ran, else the transaction named by the request."""
    if request.oauth2 is not None and request.oauth2.transaction_id:
        return request.oauth2
    txn = await store.load(server, request)
    if txn is None:
        raise ForbiddenError(f"Unable to load OAuth 2.0 transaction: {store.transaction_id_from(request)}")
    request.oauth2 = txn
    return txn


def transaction_loader(server: "Server", *, session_key=None, transaction_field=None, id_length=None):
    """Endpoint that only restores request.oauth2 (e.g. to re-render a consent page)."""
    store = store_for(server, session_key, transaction_field, id_length)

    async def transaction_loader_endpoint(request: OAuth2Request) -> None:
        await load_transaction(server, store, request)

    return transaction_loader_endpoint


def decision(
    server: "Server",
    parse: Callable | None = None,
    *,
    cancel_field: str = "cancel",
    user_property: str = "user",
    session_key: str | None = None,
    transaction_field: str | None = None,
    id_length: int | None = None,
):
    """
    parse(request) may return extra decision values (e.g. a narrowed scope), including an
    explicit allow; otherwise the request is allowed unless body[cancel_field] is set.
    """
    store = store_for(server, session_key, transaction_field, id_length)

    async def decision_endpoint(request: OAuth2Request) -> Response:
        if request.session is None:
            raise ConfigurationError("server requires session support")
        if request.body is None:
            raise ConfigurationError("Request body not parsed. Use bodyParser middleware.")

        txn = await load_transaction(server, store, request)
        ares = dict(await maybe_await(parse(request)) or {}) if parse else {}
        txn.user = request.get(user_property)
        if "allow" not in ares:
            ares["allow"] = not request.body.get(cancel_field)
        txn.res = ares
        if not ares["allow"]:
            logger.info("resource owner denied transaction %s", txn.transaction_id)

        response = await server._respond(txn)
        if response is None:
            raise unsupported(txn)
        await store.remove(request, txn.transaction_id)
        return response

    return decision_endpoint


def resume(
    server: "Server",
    immediate: Callable,
    *,
    user_property: str = "user",
    immediate_strategy=None,
    session_key: str | None = None,
    transaction_field: str | None = None,
    id_length: int | None = None,
):
    if immediate is None or not callable(immediate):
        raise TypeError("resume endpoint requires an immediate callback")
    immediate_with = resolve_strategy(immediate, IMMEDIATE_STRATEGIES, immediate_strategy, owner="immediate")
    store = store_for(server, session_key, transaction_field, id_length)

    async def resume_endpoint(request: OAuth2Request) -> Response | None:
        txn = await load_transaction(server, store, request)
        txn.user = request.get(user_property)
        allow, info, locals_ = unpack_immediate(await invoke(immediate, immediate_with, immediate_values(txn)))
        if locals_:
            txn.locals.update(locals_)
        if allow:
            response = await complete(server, txn, info)
            await store.remove(request, txn.transaction_id)
            return response

        txn.info = info
        await store.update(server, request, txn.transaction_id, txn)
        return None

    return resume_endpoint
