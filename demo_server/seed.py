"""
Password hashing and seeding of users and OAuth clients from the environment.
Optional: DEMO_SEED_USER + DEMO_SEED_PASSWORD, DEMO_CLIENT_ID + DEMO_REDIRECT_URIS
(+ DEMO_CLIENT_SECRET for a confidential client, DEMO_CLIENT_ASSERTION_KEY for a PEM file
holding the client's JWT bearer public key). No hardcoded credentials.
"""
import json
import logging
import os
from pathlib import Path

import bcrypt
from sqlalchemy.orm import Session

from demo_server.models import Client, User

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ID = "demo-client"
DEFAULT_REDIRECT_URI = "http://127.0.0.1:8000/callback"


def hash_password(password: str) -> str:
    # Bcrypt has a 72-byte limit
    raw = password.encode("utf-8")
    if len(raw) > 72:
        raw = raw[:72]
    return bcrypt.hashpw(raw, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    raw = plain.encode("utf-8")[:72]
    return bcrypt.checkpw(raw, hashed.encode("utf-8"))


def _seed_user(db: Session, username: str, password: str) -> None:
    if db.query(User).filter(User.username == username).first() is not None:
        logger.debug("User already exists: %s", username)
        return
    db.add(User(username=username, password_hash=hash_password(password)))
    db.commit()
    logger.info("Seeded user: %s", username)


def _seed_client(
    db: Session,
    client_id: str,
    redirect_uris: list[str],
    client_secret: str | None = None,
    assertion_key: str | None = None,
) -> None:
    if db.query(Client).filter(Client.client_id == client_id).first() is not None:
        logger.debug("Client already exists: %s", client_id)
        return
    secret_hash = hash_password(client_secret) if client_secret else None
    db.add(
        Client(
            client_id=client_id,
            redirect_uris=json.dumps(redirect_uris),
            client_secret_hash=secret_hash,
            assertion_key=assertion_key,
        )
    )
    db.commit()
    logger.info("Seeded client: %s (confidential=%s)", client_id, bool(secret_hash))


def seed_from_env(db: Session) -> None:
    """Create one user and/or one client from env if set, plus the default development client."""
    seed_user = os.environ.get("DEMO_SEED_USER")
    seed_password = os.environ.get("DEMO_SEED_PASSWORD")
    if seed_user and seed_password:
        _seed_user(db, seed_user, seed_password)

    client_id = os.environ.get("DEMO_CLIENT_ID")
    redirect_uris_str = os.environ.get("DEMO_REDIRECT_URIS")
    if client_id and redirect_uris_str:
        uris = [u.strip() for u in redirect_uris_str.split(",") if u.strip()]
        key_path = os.environ.get("DEMO_CLIENT_ASSERTION_KEY")
        assertion_key = Path(key_path).read_text() if key_path else None
        if uris:
            _seed_client(db, client_id, uris, os.environ.get("DEMO_CLIENT_SECRET"), assertion_key)

    # Public development client so the quick start works on an empty database
    _seed_client(db, DEFAULT_CLIENT_ID, [DEFAULT_REDIRECT_URI])
