"""
Client authentication at the token endpoint (RFC 6749 §2.3.1).
Credentials via Authorization: Basic base64(client_id:client_secret) or client_id + client_secret
in the form. Public clients identify themselves with client_id alone.
"""
import base64
import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session
from starlette.requests import Request

from demo_server.models import Client
from demo_server.seed import verify_password
from oauth2_core.errors import TokenError

logger = logging.getLogger(__name__)


def _parse_basic(header_value: str) -> tuple[str, str] | None:
    """Parse 'Basic <base64(client_id:client_secret)>'. Returns (client_id, client_secret) or None."""
    if not header_value or not header_value.strip().lower().startswith("basic "):
        return None
    try:
        decoded = base64.b64decode(header_value.strip()[6:].strip(), validate=True).decode("utf-8")
    except ValueError:
        return None
    if ":" not in decoded:
        return None
    client_id, _, client_secret = decoded.partition(":")
    return client_id.strip(), client_secret


def get_client_credentials(request: Request, body: Mapping[str, Any]) -> tuple[str | None, str | None, str]:
    """(client_id, client_secret, method); form credentials take precedence over Basic."""
    client_id_form = body.get("client_id")
    client_secret_form = body.get("client_secret")
    if client_id_form and client_secret_form is not None:
        return client_id_form.strip(), client_secret_form, "client_secret_post"
    basic = _parse_basic(request.headers.get("Authorization", ""))
    if basic:
        return basic[0], basic[1], "client_secret_basic"
    if client_id_form:
        return client_id_form.strip(), None, "none"
    return None, None, "none"


def authenticate_client(db: Session, request: Request, body: Mapping[str, Any]) -> tuple[Client, dict]:
    """
    Resolve and authenticate the client. Raises TokenError(invalid_client) when client_id is
    missing or unknown, or a confidential client's secret is wrong. Returns (client, auth_info).
    """
    client_id, client_secret, method = get_client_credentials(request, body)
    if not client_id:
        raise TokenError("client_id is required", "invalid_client")
    client = db.query(Client).filter(Client.client_id == client_id).first()
    if not client:
        raise TokenError("Unknown client", "invalid_client")
    if client.is_confidential and not (client_secret and verify_password(client_secret, client.client_secret_hash)):
        logger.info("client authentication failed for %s", client_id)
        raise TokenError("Invalid client credentials", "invalid_client")
    return client, {"method": method}
