"""
Pytest configuration for demo_server. In-memory SQLite and a throwaway signing key, set before
demo_server.config is imported.
"""
import json
import os
import tempfile

# In-memory SQLite; database.py uses StaticPool so all connections share the same DB
os.environ["DEMO_DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DEMO_SIGNING_KEY_PATH"] = os.path.join(tempfile.mkdtemp(prefix="demo-key-"), "signing_key.pem")
os.environ["DEMO_SESSION_SECRET"] = "test-session-secret"
# Keep seed_from_env to the default client during tests
for name in ("DEMO_SEED_USER", "DEMO_SEED_PASSWORD", "DEMO_CLIENT_ID", "DEMO_REDIRECT_URIS"):
    os.environ.pop(name, None)

import pytest
from fastapi.testclient import TestClient

from demo_server.database import SessionLocal, init_db
from demo_server.keys import generate_key, public_pem
from demo_server.main import app
from demo_server.models import Client, User
from demo_server.seed import hash_password

WEB_APP_CALLBACK = "https://app.example.com/cb"
FIRST_PARTY_CALLBACK = "https://first.example.com/cb"

# Key the assertion-client signs its JWT bearer assertions with
ASSERTION_KEY = generate_key()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seeded_db(client):
    """Tables plus one user and four clients (lifespan does not run without a context manager)."""
    init_db()
    db = SessionLocal()
    try:
        if not db.query(User).filter(User.username == "alice").first():
            db.add(User(username="alice", name="Alice", password_hash=hash_password("wonderland")))
        clients = [
            Client(client_id="web-app", name="Web App", redirect_uris=json.dumps([WEB_APP_CALLBACK, "https://app.example.com/alt"])),
            Client(client_id="first-party", redirect_uris=json.dumps([FIRST_PARTY_CALLBACK]), trusted=True),
            Client(client_id="service", redirect_uris=json.dumps([]), client_secret_hash=hash_password("s3cret")),
            Client(client_id="assertion-client", redirect_uris=json.dumps([]), assertion_key=public_pem(ASSERTION_KEY)),
        ]
        for c in clients:
            if not db.query(Client).filter(Client.client_id == c.client_id).first():
                db.add(c)
        db.commit()
        yield db
    finally:
        db.close()


@pytest.fixture
def login(client, seeded_db):
    """Log alice in on the test client's session cookie."""

    def do_login(username="alice", password="wonderland"):
        return client.post(
            "/login",
            data={"username": username, "password": password, "return_to": "/"},
            follow_redirects=False,
        )

    return do_login


@pytest.fixture
def assertion_key():
    return ASSERTION_KEY
