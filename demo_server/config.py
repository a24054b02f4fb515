"""
Demo server configuration. Everything overridable comes from the environment;
no secrets in this file.
"""
import os
import secrets

# Issuer URL (public identifier, also the base for the token endpoint URL)
ISSUER = os.environ.get("DEMO_ISSUER", "http://127.0.0.1:9000").rstrip("/")

# Token endpoint URL; JWT bearer assertions must name it as their audience (RFC 7523 §3)
TOKEN_ENDPOINT_URL = f"{ISSUER}/oauth/token"

# SQLite for development
DATABASE_URL = os.environ.get("DEMO_DATABASE_URL", "sqlite:///./demo_server.db")

# Signs the session cookie holding logins and pending authorization transactions.
# Unset: a random per-process secret, so sessions do not survive a restart.
SESSION_SECRET = os.environ.get("DEMO_SESSION_SECRET") or secrets.token_urlsafe(32)

# API audience for access tokens
API_AUDIENCE = os.environ.get("DEMO_API_AUDIENCE", "http://127.0.0.1:7000")

# Authorization code lifetime (seconds)
CODE_TTL_SECONDS = int(os.environ.get("DEMO_CODE_TTL_SECONDS", "60"))

# Access token lifetime (seconds)
ACCESS_TOKEN_EXPIRES = int(os.environ.get("DEMO_ACCESS_TOKEN_EXPIRES", "600"))

# Refresh token lifetime (seconds)
REFRESH_TOKEN_EXPIRES = int(os.environ.get("DEMO_REFRESH_TOKEN_EXPIRES", "3600"))

# Path to RSA private key PEM for signing access tokens. Missing file: generated and saved there.
SIGNING_KEY_PATH = os.environ.get("DEMO_SIGNING_KEY_PATH", ".demo_signing_key.pem")

# Scopes clients may request
ALLOWED_SCOPES = {"profile", "email", "api.read", "api.write"}

# Characters accepted between scope tokens, tried in order (e.g. " ," also accepts comma-joined scope)
SCOPE_SEPARATORS = list(os.environ.get("DEMO_SCOPE_SEPARATORS", " "))
