"""
OAuth 2.0 authorization server: registries of grant and exchange handlers, client
serialization for the transaction store, and factories for the endpoints built on them.

    server = Server()
    server.grant(code(issue_code))
    server.exchange(authorization_code(exchange_code))
    server.serialize_client(lambda client: client.id)
    server.deserialize_client(clients.get)

    authorize = server.authorize(validate)
    decision = server.decision()
    token = server.token()
"""
import logging
from collections.abc import Callable
from typing import Any

from starlette.responses import Response

from oauth2_core import authorize as authorize_endpoints
from oauth2_core import error_handlers, token_endpoint
from oauth2_core.callbacks import maybe_await
from oauth2_core.errors import ConfigurationError
from oauth2_core.grant.base import GrantHandler, RequestExtension
from oauth2_core.request import OAuth2Request, Transaction
from oauth2_core.txn import SessionStore
from oauth2_core.unordered import UnorderedList

logger = logging.getLogger(__name__)

WILDCARD = "*"


class PassError(Exception):
    """Raised by a client (de)serializer to decline and let the next one try."""


def _as_chain(handler_or_chain) -> list:
    if isinstance(handler_or_chain, (list, tuple)):
        return list(handler_or_chain)
    return [handler_or_chain]


def _as_types(type_or_types) -> list[str]:
    if isinstance(type_or_types, str):
        return [type_or_types]
    return list(type_or_types)


class Server:
    def __init__(self, store: SessionStore | None = None):
        self.store = store or SessionStore()
        self._grants: list[tuple[Any, GrantHandler]] = []
        self._exchanges: list[tuple[str, Callable]] = []
        self._serializers: list[Callable] = []
        self._deserializers: list[Callable] = []

    # -- registration -------------------------------------------------------

    def register_grant(self, type_or_types, handler_or_chain=None) -> "Server":
        """
        Register grant handlers for one or more response types.
        grant(handler) uses the handler's own response_types; a plain callable in the chain is
        a request extension whose returned mapping is merged into the authorization request.
        """
        if handler_or_chain is None:
            handler_or_chain = type_or_types
            type_or_types = getattr(handler_or_chain, "response_types", None)
            if not type_or_types:
                raise TypeError("grant() requires a response type when the handler declares none")

        chain: list[GrantHandler] = []
        for handler in _as_chain(handler_or_chain):
            if isinstance(handler, GrantHandler):
                chain.append(handler)
            elif callable(handler):
                chain.append(RequestExtension(handler))
            else:
                raise TypeError(f"grant handler must be a GrantHandler or a callable, got {handler!r}")

        for response_type in _as_types(type_or_types):
            key = WILDCARD if response_type == WILDCARD else UnorderedList(response_type)
            for handler in chain:
                self._grants.append((key, handler))
            logger.debug("registered grant %s -> %s", key, chain)
        return self

    grant = register_grant

    def register_exchange(self, type_or_types, handler_or_chain=None) -> "Server":
        """Register exchange handlers for one or more grant types (grant_type values)."""
        if handler_or_chain is None:
            handler_or_chain = type_or_types
            type_or_types = getattr(handler_or_chain, "grant_type", None)
            if not type_or_types:
                raise TypeError("exchange() requires a grant type when the handler declares none")

        chain = _as_chain(handler_or_chain)
        for handler in chain:
            if not callable(handler):
                raise TypeError(f"exchange handler must be callable, got {handler!r}")

        for grant_type in _as_types(type_or_types):
            for handler in chain:
                self._exchanges.append((grant_type, handler))
            logger.debug("registered exchange %s -> %s", grant_type, chain)
        return self

    exchange = register_exchange

    def serialize_client(self, fn: Callable) -> Callable:
        """Append a client serializer; usable as a decorator."""
        self._serializers.append(fn)
        return fn

    def deserialize_client(self, fn: Callable) -> Callable:
        """Append a client deserializer; usable as a decorator."""
        self._deserializers.append(fn)
        return fn

    # -- client (de)serialization ----------------------------------------------

    async def serialize(self, client: Any) -> Any:
        for fn in self._serializers:
            try:
                obj = await maybe_await(fn(client))
            except PassError:
                continue
            if obj is not None:
                return obj
        raise ConfigurationError(
            "Failed to serialize client. Register serialization function using serialize_client()."
        )

    async def deserialize(self, obj: Any) -> Any:
        """The deserialized client, or False when a deserializer reports it revoked (False or None)."""
        for fn in self._deserializers:
            try:
                client = await maybe_await(fn(obj))
            except PassError:
                continue
            if client is None or client is False:
                return False
            return client
        raise ConfigurationError(
            "Failed to deserialize client. Register deserialization function using deserialize_client()."
        )

    # -- endpoints -------------------------------------------------------------

    def authorize(self, validate: Callable, immediate: Callable | None = None, **options):
        return authorize_endpoints.authorization(self, validate, immediate, **options)

    authorization = authorize

    def decision(self, parse: Callable | None = None, **options):
        return authorize_endpoints.decision(self, parse, **options)

    def resume(self, immediate: Callable, **options):
        return authorize_endpoints.resume(self, immediate, **options)

    def transaction_loader(self, **options):
        return authorize_endpoints.transaction_loader(self, **options)

    def token(self):
        return token_endpoint.token(self)

    def error_handler(self, mode: str = "direct", **options):
        return error_handlers.error_handler(mode, **options)

    def authorization_error_handler(self, **options):
        return error_handlers.authorization_error_handler(self, **options)

    # -- dispatch ----------------------------------------------------------------

    def _grants_for(self, response_type: str | None) -> list[GrantHandler]:
        wanted = UnorderedList(response_type)
        handlers = []
        for key, handler in self._grants:
            if isinstance(key, str):
                handlers.append(handler)
            elif len(wanted) and key.equal_to(wanted):
                handlers.append(handler)
        return handlers

    async def _parse(self, response_type: str | None, request: OAuth2Request) -> dict[str, Any]:
        """Normalized authorization request; only {"type": ...} when no handler recognized it."""
        areq: dict[str, Any] = {}
        if response_type:
            areq["type"] = response_type
        for handler in self._grants_for(response_type):
            parsed = await handler.parse_request(request)
            if parsed:
                areq.update(parsed)
        return areq

    async def _respond(self, txn: Transaction) -> Response | None:
        for handler in self._grants_for(txn.type):
            response = await handler.respond(txn)
            if response is not None:
                logger.debug("%r answered transaction %s", handler, txn.transaction_id)
                return response
        return None

    async def _respond_error(self, err: Exception, txn: Transaction) -> Response | None:
        for handler in self._grants_for(txn.type):
            response = await handler.respond_error(err, txn)
            if response is not None:
                return response
        return None

    async def _exchange(self, grant_type: str | None, request: OAuth2Request) -> Response | None:
        for key, handler in self._exchanges:
            if key != WILDCARD and key != grant_type:
                continue
            response = await maybe_await(handler(request))
            if response is not None:
                logger.debug("exchange %s answered by %r", grant_type, handler)
                return response
        return None


def create_server(store: SessionStore | None = None) -> Server:
    return Server(store)
