"""
Token endpoint (RFC 6749 §3.2). Dispatches on grant_type to the registered exchanges.
The client must already be authenticated and placed on the request (request.user by default).
"""
import logging
from typing import TYPE_CHECKING

from starlette.responses import Response

from oauth2_core.errors import ConfigurationError, TokenError
from oauth2_core.request import OAuth2Request

if TYPE_CHECKING:
    from oauth2_core.server import Server

logger = logging.getLogger(__name__)


def token(server: "Server"):
    async def token_endpoint(request: OAuth2Request) -> Response:
        if request.body is None:
            raise ConfigurationError("Request body not parsed. Use bodyParser middleware.")
        grant_type = request.body.get("grant_type")
        response = await server._exchange(grant_type, request)
        if response is None:
            logger.info("token request with unsupported grant_type %s", grant_type)
            raise TokenError(f"Unsupported grant type: {grant_type}", "unsupported_grant_type")
        return response

    return token_endpoint
