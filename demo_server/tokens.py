"""
Token material: RS256 access tokens (PyJWT), opaque authorization codes and refresh tokens
stored in the database, and verification of clients' JWT bearer assertions.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone

import jwt
from sqlalchemy.orm import Session

from demo_server.config import (
    ACCESS_TOKEN_EXPIRES,
    API_AUDIENCE,
    CODE_TTL_SECONDS,
    ISSUER,
    REFRESH_TOKEN_EXPIRES,
    TOKEN_ENDPOINT_URL,
)
from demo_server.keys import get_public_key, get_signing_key
from demo_server.models import AuthorizationCode, Client, RefreshToken

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def expired(expires_at: datetime) -> bool:
    # SQLite hands back naive datetimes
    return expires_at.replace(tzinfo=timezone.utc) < _now()


def issue_access_token(subject: str, client_id: str, scope: list[str]) -> str:
    private_key, kid = get_signing_key()
    now = _now()
    payload = {
        "iss": ISSUER,
        "sub": subject,
        "aud": API_AUDIENCE,
        "client_id": client_id,
        "exp": int((now + timedelta(seconds=ACCESS_TOKEN_EXPIRES)).timestamp()),
        "iat": int(now.timestamp()),
        "scope": " ".join(scope),
    }
    return jwt.encode(payload, private_key, algorithm="RS256", headers={"kid": kid, "typ": "JWT"})


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, get_public_key(), algorithms=["RS256"], audience=API_AUDIENCE, issuer=ISSUER)


def token_params(scope: list[str]) -> dict:
    """Extra token response parameters (RFC 6749 §5.1)."""
    return {"expires_in": ACCESS_TOKEN_EXPIRES, "scope": " ".join(scope)}


def create_authorization_code(
    db: Session, client_id: str, redirect_uri: str | None, user_id: int, scope: list[str]
) -> str:
    code = secrets.token_urlsafe(32)
    db.add(
        AuthorizationCode(
            code=code,
            client_id=client_id,
            redirect_uri=redirect_uri,
            user_id=user_id,
            scope=" ".join(scope),
            expires_at=_now() + timedelta(seconds=CODE_TTL_SECONDS),
        )
    )
    db.commit()
    return code


def create_refresh_token(db: Session, user_id: int, client_id: str, scope: list[str]) -> str:
    value = secrets.token_urlsafe(48)
    db.add(
        RefreshToken(
            token=value,
            user_id=user_id,
            client_id=client_id,
            scope=" ".join(scope),
            expires_at=_now() + timedelta(seconds=REFRESH_TOKEN_EXPIRES),
        )
    )
    db.commit()
    return value


def verify_assertion(client: Client, assertion: str) -> dict | None:
    """
    Claims of a JWT bearer assertion signed by the client's registered key
    (iss = client_id, aud = token endpoint), or None when it does not verify.
    """
    if not client.assertion_key:
        logger.info("client %s has no assertion key registered", client.client_id)
        return None
    try:
        return jwt.decode(
            assertion,
            client.assertion_key,
            algorithms=["RS256"],
            audience=TOKEN_ENDPOINT_URL,
            issuer=client.client_id,
            options={"require": ["exp", "iss", "aud", "sub"]},
        )
    except jwt.PyJWTError as e:
        logger.info("rejected assertion from client %s: %s", client.client_id, e)
        return None
