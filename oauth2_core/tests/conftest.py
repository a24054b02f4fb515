"""
Shared fixtures for oauth2_core tests: in-memory clients and a server that (de)serializes
them by id. Client "c456" is registered but revoked.
"""
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlsplit

import pytest

from oauth2_core.server import Server


@dataclass
class Client:
    id: str
    name: str = ""
    redirect_uris: list[str] = field(default_factory=list)


@dataclass
class User:
    id: str


CLIENTS = {
    "c123": Client("c123", "Example Client", ["https://client.example.com/cb"]),
    "c456": Client("c456", "Revoked Client", ["https://revoked.example.com/cb"]),
}


def _redirect_params(response, part="query"):
    location = urlsplit(response.headers["location"])
    raw = location.query if part == "query" else location.fragment
    return {k: v[0] for k, v in parse_qs(raw).items()}


@pytest.fixture
def server():
    srv = Server()
    srv.serialize_client(lambda client: client.id)

    def deserialize(client_id):
        if client_id == "c456":
            return False
        return CLIENTS.get(client_id)

    srv.deserialize_client(deserialize)
    return srv


@pytest.fixture
def client():
    return CLIENTS["c123"]


@pytest.fixture
def revoked_client():
    return CLIENTS["c456"]


@pytest.fixture
def user():
    return User("u1")


@pytest.fixture
def redirect_params():
    """Single-valued parameters from a redirect's Location query (or fragment)."""
    return _redirect_params
