from oauth2_core import exchange, grant
from oauth2_core.errors import (
    AuthorizationError,
    BadRequestError,
    ConfigurationError,
    ForbiddenError,
    OAuth2Error,
    TokenError,
)
from oauth2_core.request import OAuth2Request, Transaction
from oauth2_core.scope import parse_scope
from oauth2_core.server import PassError, Server, create_server
from oauth2_core.txn import SessionStore
from oauth2_core.unordered import UnorderedList

__all__ = [
    "AuthorizationError",
    "BadRequestError",
    "ConfigurationError",
    "ForbiddenError",
    "OAuth2Error",
    "OAuth2Request",
    "PassError",
    "Server",
    "SessionStore",
    "TokenError",
    "Transaction",
    "UnorderedList",
    "create_server",
    "exchange",
    "grant",
    "parse_scope",
]
