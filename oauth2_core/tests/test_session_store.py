"""Tests for the session-backed transaction store."""
import re
from types import SimpleNamespace

import pytest

from oauth2_core.errors import AuthorizationError, BadRequestError, ConfigurationError
from oauth2_core.request import OAuth2Request, Transaction
from oauth2_core.server import Server
from oauth2_core.txn import MappingTransactionSession, SessionStore, generate_transaction_id


def _txn(client):
    return Transaction(
        client=client,
        redirect_uri="https://client.example.com/cb",
        req={"type": "code", "client_id": client.id, "scope": ["read"], "state": "s1"},
    )


def test_generated_ids_are_alphanumeric():
    tid = generate_transaction_id(12)
    assert len(tid) == 12
    assert re.match(r"^[A-Za-z0-9]+$", tid)
    assert generate_transaction_id() != generate_transaction_id()


def test_mapping_session_requires_session():
    with pytest.raises(ConfigurationError, match="server requires session support"):
        MappingTransactionSession(None)


@pytest.mark.asyncio
async def test_create_then_load_round_trip(server, client):
    store = SessionStore()
    session = {}
    tid = await store.create(server, OAuth2Request(session=session), _txn(client))

    assert len(tid) == 8
    stored = session["authorize"][tid]
    assert stored["protocol"] == "oauth2"
    assert stored["client"] == "c123"

    txn = await store.load(server, OAuth2Request(query={"transaction_id": tid}, session=session))
    assert txn.transaction_id == tid
    assert txn.client is client
    assert txn.redirect_uri == "https://client.example.com/cb"
    assert txn.req == {"type": "code", "client_id": "c123", "scope": ["read"], "state": "s1"}


@pytest.mark.asyncio
async def test_load_reads_transaction_id_from_body(server, client):
    store = SessionStore()
    session = {}
    tid = await store.create(server, OAuth2Request(session=session), _txn(client))
    txn = await store.load(server, OAuth2Request(body={"transaction_id": tid}, session=session))
    assert txn.transaction_id == tid


@pytest.mark.asyncio
async def test_custom_session_key_and_field(server, client):
    store = SessionStore(session_key="oauth2", transaction_field="tx", id_length=16)
    session = {}
    tid = await store.create(server, OAuth2Request(session=session), _txn(client))
    assert len(tid) == 16
    assert tid in session["oauth2"]
    txn = await store.load(server, OAuth2Request(body={"tx": tid}, session=session))
    assert txn.transaction_id == tid


@pytest.mark.asyncio
async def test_unknown_transaction_id_returns_none(server, client):
    store = SessionStore()
    session = {}
    await store.create(server, OAuth2Request(session=session), _txn(client))
    txn = await store.load(server, OAuth2Request(body={"transaction_id": "forged"}, session=session))
    assert txn is None


@pytest.mark.asyncio
async def test_load_without_session(server):
    with pytest.raises(ConfigurationError, match="server requires session support"):
        await SessionStore().load(server, OAuth2Request(body={"transaction_id": "x"}))


@pytest.mark.asyncio
async def test_load_without_container(server):
    with pytest.raises(ConfigurationError, match="invalid session key"):
        await SessionStore().load(server, OAuth2Request(body={"transaction_id": "x"}, session={}))


@pytest.mark.asyncio
async def test_load_without_transaction_id(server, client):
    store = SessionStore()
    session = {}
    await store.create(server, OAuth2Request(session=session), _txn(client))
    with pytest.raises(BadRequestError, match="Missing required parameter: transaction_id"):
        await store.load(server, OAuth2Request(body={}, session=session))


@pytest.mark.asyncio
async def test_revoked_client_removes_transaction(server, revoked_client):
    store = SessionStore()
    session = {}
    tid = await store.create(server, OAuth2Request(session=session), _txn(revoked_client))

    with pytest.raises(AuthorizationError) as excinfo:
        await store.load(server, OAuth2Request(body={"transaction_id": tid}, session=session))
    assert excinfo.value.code == "unauthorized_client"
    assert tid not in session["authorize"]


@pytest.mark.asyncio
async def test_deleted_client_removes_transaction(server):
    deleted = SimpleNamespace(id="c999")
    store = SessionStore()
    session = {}
    tid = await store.create(server, OAuth2Request(session=session), _txn(deleted))

    with pytest.raises(AuthorizationError) as excinfo:
        await store.load(server, OAuth2Request(body={"transaction_id": tid}, session=session))
    assert excinfo.value.code == "unauthorized_client"
    assert tid not in session["authorize"]


@pytest.mark.asyncio
async def test_deserializer_error_keeps_transaction(client):
    srv = Server()
    srv.serialize_client(lambda c: c.id)

    def broken(client_id):
        raise LookupError("database unavailable")

    srv.deserialize_client(broken)
    store = SessionStore()
    session = {}
    tid = await store.create(srv, OAuth2Request(session=session), _txn(client))

    with pytest.raises(LookupError):
        await store.load(srv, OAuth2Request(body={"transaction_id": tid}, session=session))
    assert tid in session["authorize"]


@pytest.mark.asyncio
async def test_update_overwrites_info(server, client):
    store = SessionStore()
    session = {}
    request = OAuth2Request(session=session)
    txn = _txn(client)
    tid = await store.create(server, request, txn)
    txn.info = {"scope": "read"}
    await store.update(server, request, tid, txn)
    assert session["authorize"][tid]["info"] == {"scope": "read"}


@pytest.mark.asyncio
async def test_remove_is_idempotent(server, client):
    store = SessionStore()
    session = {}
    request = OAuth2Request(session=session)
    tid = await store.create(server, request, _txn(client))
    await store.remove(request, tid)
    await store.remove(request, tid)
    assert session["authorize"] == {}
