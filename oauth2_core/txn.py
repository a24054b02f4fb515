"""
Session-backed storage of pending authorization transactions.

Transactions live in the user's session under session[session_key], a mapping of
transaction ID -> serialized transaction. The ID doubles as the CSRF token echoed by the
consent form, so it is random, fixed-length and only ever looked up inside the session
that created it.
"""
import logging
import secrets
import string
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Protocol

from oauth2_core.errors import AuthorizationError, BadRequestError, ConfigurationError
from oauth2_core.request import OAuth2Request, Transaction

if TYPE_CHECKING:
    from oauth2_core.server import Server

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = "authorize"
DEFAULT_TRANSACTION_FIELD = "transaction_id"
DEFAULT_ID_LENGTH = 8

_ID_ALPHABET = string.ascii_letters + string.digits


def generate_transaction_id(length: int = DEFAULT_ID_LENGTH) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class TransactionSession(Protocol):
    """Typed view of the transactions held in one user's session."""

    def get(self, transaction_id: str) -> dict[str, Any] | None: ...

    def set(self, transaction_id: str, data: dict[str, Any]) -> None: ...

    def delete(self, transaction_id: str) -> None: ...


class MappingTransactionSession:
    """TransactionSession over a plain mutable-mapping session (e.g. Starlette's request.session)."""

    def __init__(self, session: MutableMapping[str, Any] | None, key: str = DEFAULT_SESSION_KEY):
        if session is None:
            raise ConfigurationError("server requires session support")
        self.session = session
        self.key = key

    @property
    def exists(self) -> bool:
        return isinstance(self.session.get(self.key), MutableMapping)

    def get(self, transaction_id: str) -> dict[str, Any] | None:
        if not self.exists:
            raise ConfigurationError("invalid session key")
        return self.session[self.key].get(transaction_id)

    def set(self, transaction_id: str, data: dict[str, Any]) -> None:
        txns = dict(self.session.get(self.key) or {})
        txns[transaction_id] = data
        # Reassign so change-tracking sessions notice the write
        self.session[self.key] = txns

    def delete(self, transaction_id: str) -> None:
        txns = self.session.get(self.key)
        if not txns or transaction_id not in txns:
            return
        txns = dict(txns)
        del txns[transaction_id]
        self.session[self.key] = txns


class SessionStore:
    """
    Create, load, update and remove transactions in the request's session.
    Clients are stored through the server's serializer chain and restored through its
    deserializer chain, so only a compact reference (usually the client id) is persisted.
    """

    def __init__(
        self,
        session_key: str = DEFAULT_SESSION_KEY,
        transaction_field: str = DEFAULT_TRANSACTION_FIELD,
        id_length: int = DEFAULT_ID_LENGTH,
    ):
        self.session_key = session_key
        self.transaction_field = transaction_field
        self.id_length = id_length

    def session_for(self, request: OAuth2Request) -> MappingTransactionSession:
        return MappingTransactionSession(request.session, self.session_key)

    def transaction_id_from(self, request: OAuth2Request) -> str | None:
        return request.param(self.transaction_field)

    async def create(self, server: "Server", request: OAuth2Request, txn: Transaction) -> str:
        txns = self.session_for(request)
        obj = await server.serialize(txn.client)
        transaction_id = generate_transaction_id(self.id_length)
        txns.set(transaction_id, txn.to_session(obj))
        logger.debug("created transaction %s for response_type=%s", transaction_id, txn.type)
        return transaction_id

    async def load(self, server: "Server", request: OAuth2Request) -> Transaction | None:
        """
        Load the transaction named by the request, or None when this session holds no such
        transaction. A client that no longer deserializes (revoked) removes the transaction and
        fails with unauthorized_client; a deserializer error leaves it in place.
        """
        txns = self.session_for(request)
        if not txns.exists:
            raise ConfigurationError("invalid session key")
        transaction_id = self.transaction_id_from(request)
        if not transaction_id:
            raise BadRequestError(f"Missing required parameter: {self.transaction_field}")
        data = txns.get(transaction_id)
        if data is None:
            logger.debug("transaction %s not found in session", transaction_id)
            return None

        client = await server.deserialize(data.get("client"))
        if not client:
            logger.info("client for transaction %s is no longer authorized", transaction_id)
            txns.delete(transaction_id)
            raise AuthorizationError("Unauthorized client", "unauthorized_client")
        return Transaction.from_session(transaction_id, data, client)

    async def update(self, server: "Server", request: OAuth2Request, transaction_id: str, txn: Transaction) -> None:
        txns = self.session_for(request)
        obj = await server.serialize(txn.client)
        txns.set(transaction_id, txn.to_session(obj))

    async def remove(self, request: OAuth2Request, transaction_id: str | None) -> None:
        if not transaction_id:
            return
        self.session_for(request).delete(transaction_id)
        logger.debug("removed transaction %s", transaction_id)
