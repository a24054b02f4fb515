"""
RSA key for signing access tokens. Loaded from file, or generated and persisted there;
no key material in code.
"""
import logging
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, generate_private_key

logger = logging.getLogger(__name__)

_KEY_BITS = 2048
KID = "demo-server-key"

_signing_key: RSAPrivateKey | None = None


def generate_key() -> RSAPrivateKey:
    return generate_private_key(public_exponent=65537, key_size=_KEY_BITS)


def private_pem(key: RSAPrivateKey) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def public_pem(key: RSAPrivateKey) -> str:
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")


def load_or_create_signing_key(path: str) -> RSAPrivateKey:
    p = Path(path)
    if p.exists():
        try:
            key = serialization.load_pem_private_key(p.read_bytes(), password=None)
        except ValueError as e:
            logger.warning("Failed to load signing key from %s: %s; generating new key", path, e)
        else:
            if isinstance(key, RSAPrivateKey):
                return key
            logger.warning("Signing key in %s is not an RSA key; generating new key", path)
    key = generate_key()
    try:
        p.write_bytes(private_pem(key))
        logger.info("Generated and saved signing key to %s", path)
    except OSError as e:
        logger.warning("Could not save signing key to %s: %s", path, e)
    return key


def get_signing_key() -> tuple[RSAPrivateKey, str]:
    """Return the (private) key and kid for signing access tokens."""
    global _signing_key
    if _signing_key is None:
        from demo_server.config import SIGNING_KEY_PATH

        _signing_key = load_or_create_signing_key(SIGNING_KEY_PATH)
    return _signing_key, KID


def get_public_key():
    key, _ = get_signing_key()
    return key.public_key()
