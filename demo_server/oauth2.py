"""
The demo's authorization server: every grant and exchange oauth2_core provides, wired to the
SQLAlchemy models. Callbacks open their own DB session.
"""
import logging

from demo_server.config import ALLOWED_SCOPES, SCOPE_SEPARATORS
from demo_server.database import SessionLocal
from demo_server.models import AuthorizationCode, Client, RefreshToken, User
from demo_server.seed import verify_password
from demo_server.tokens import (
    create_authorization_code,
    create_refresh_token,
    expired,
    issue_access_token,
    token_params,
    verify_assertion,
)
from oauth2_core import AuthorizationError, Server, TokenError
from oauth2_core.exchange import authorization_code, client_credentials, jwt_bearer, password, refresh_token
from oauth2_core.grant import code, token
from oauth2_core.scope import parse_scope

logger = logging.getLogger(__name__)


def check_scope(scope: list[str], error=AuthorizationError) -> None:
    invalid = set(scope) - ALLOWED_SCOPES
    if invalid:
        raise error(f"Invalid scope(s): {', '.join(sorted(invalid))}", "invalid_scope")


# -- authorization endpoint ------------------------------------------------------


def validate(client_id, redirect_uri):
    """Registered client and exact-match redirect URI; a single registered URI is the default."""
    with SessionLocal() as db:
        client = db.query(Client).filter(Client.client_id == client_id).first()
    if client is None:
        raise AuthorizationError("Unknown client_id", "unauthorized_client")
    uris = client.get_redirect_uris_list()
    if not redirect_uri and len(uris) == 1:
        redirect_uri = uris[0]
    if not redirect_uri or not client.redirect_uri_allowed(redirect_uri):
        raise AuthorizationError("redirect_uri not allowed", "invalid_request")
    return client, redirect_uri


def immediate(client, user, scope):
    """Trusted clients skip consent."""
    check_scope(scope)
    if client.trusted:
        logger.info("trusted client %s approved for user %s", client.client_id, user.id)
        return True, {"scope": scope}
    return False


def parse_decision(request):
    """The consent form may narrow the requested scope; it can never widen it."""
    granted = request.body.get("scope")
    if granted is None:
        return {}
    granted = parse_scope(granted, SCOPE_SEPARATORS)
    requested = request.oauth2.req.get("scope") or []
    if not set(granted) <= set(requested):
        raise AuthorizationError("Granted scope exceeds the requested scope", "invalid_scope")
    return {"scope": granted}


def issue_code(client, redirect_uri, user, ares, areq):
    # redirect_uri is the one requested (None if defaulted); the exchange must repeat it
    scope = ares.get("scope", areq.get("scope") or [])
    with SessionLocal() as db:
        value = create_authorization_code(db, client.client_id, redirect_uri, user.id, scope)
    logger.info("authorization code issued for client_id=%s sub=%s", client.client_id, user.id)
    return value


def issue_implicit_token(client, user, ares, areq):
    scope = ares.get("scope", areq.get("scope") or [])
    logger.info("implicit access token issued for client_id=%s sub=%s", client.client_id, user.id)
    return issue_access_token(str(user.id), client.client_id, scope), token_params(scope)


# -- token endpoint --------------------------------------------------------------


def exchange_code(client, code_value, redirect_uri):
    """
    The code must be unused, unexpired, issued to this client, and presented with the same
    redirect_uri the authorization request carried (none if it carried none).
    """
    with SessionLocal() as db:
        auth_code = db.query(AuthorizationCode).filter(AuthorizationCode.code == code_value).first()
        if auth_code is None or auth_code.used or expired(auth_code.expires_at):
            return False
        if auth_code.client_id != client.client_id or auth_code.redirect_uri != redirect_uri:
            return False
        auth_code.used = True
        db.commit()
        scope = auth_code.scope.split()
        refresh = create_refresh_token(db, auth_code.user_id, client.client_id, scope)
        access = issue_access_token(str(auth_code.user_id), client.client_id, scope)
    logger.info("authorization_code grant: tokens issued for client_id=%s", client.client_id)
    return access, refresh, token_params(scope)


def exchange_client_credentials(client, scope):
    if not client.is_confidential:
        raise TokenError("Public clients cannot use client_credentials", "unauthorized_client")
    check_scope(scope, TokenError)
    logger.info("client_credentials grant: token issued for client_id=%s", client.client_id)
    return issue_access_token(client.client_id, client.client_id, scope), None, token_params(scope)


def exchange_password(client, username, password_value, scope):
    check_scope(scope, TokenError)
    with SessionLocal() as db:
        user = db.query(User).filter(User.username == username).first()
        if user is None or not verify_password(password_value, user.password_hash):
            logger.info("password grant: bad credentials for client_id=%s", client.client_id)
            return False
        refresh = create_refresh_token(db, user.id, client.client_id, scope)
        access = issue_access_token(str(user.id), client.client_id, scope)
    return access, refresh, token_params(scope)


def exchange_refresh_token(client, refresh_value, scope):
    """Rotate: the presented token is revoked and a new one issued. scope may only narrow."""
    with SessionLocal() as db:
        rt = db.query(RefreshToken).filter(RefreshToken.token == refresh_value).first()
        if rt is None or rt.revoked or expired(rt.expires_at) or rt.client_id != client.client_id:
            return False
        original = rt.scope.split()
        if scope and not set(scope) <= set(original):
            raise TokenError("Requested scope exceeds the original grant", "invalid_scope")
        scope = scope or original
        rt.revoked = True
        db.commit()
        refresh = create_refresh_token(db, rt.user_id, client.client_id, original)
        access = issue_access_token(str(rt.user_id), client.client_id, scope)
    logger.info("refresh_token grant: new tokens issued for client_id=%s (refresh token rotated)", client.client_id)
    return access, refresh, token_params(scope)


def exchange_assertion(client, assertion):
    """RFC 7523 authorization grant: sub names the resource owner (by username)."""
    claims = verify_assertion(client, assertion)
    if claims is None:
        return False
    scope = parse_scope(claims.get("scope"), SCOPE_SEPARATORS)
    check_scope(scope, TokenError)
    with SessionLocal() as db:
        user = db.query(User).filter(User.username == claims["sub"]).first()
    if user is None:
        return False
    logger.info("jwt-bearer grant: token issued for client_id=%s sub=%s", client.client_id, user.id)
    return issue_access_token(str(user.id), client.client_id, scope), None, token_params(scope)


# -- client (de)serialization ------------------------------------------------------


def serialize_client(client):
    return client.client_id


def deserialize_client(client_id):
    """None once the client is deleted: pending transactions for it are dropped."""
    with SessionLocal() as db:
        return db.query(Client).filter(Client.client_id == client_id).first()


def build_server() -> Server:
    server = Server()
    server.serialize_client(serialize_client)
    server.deserialize_client(deserialize_client)

    server.grant(code(issue_code, scope_separator=SCOPE_SEPARATORS))
    server.grant(token(issue_implicit_token, scope_separator=SCOPE_SEPARATORS))

    server.exchange(authorization_code(exchange_code))
    server.exchange(client_credentials(exchange_client_credentials, scope_separator=SCOPE_SEPARATORS))
    server.exchange(password(exchange_password, scope_separator=SCOPE_SEPARATORS))
    server.exchange(refresh_token(exchange_refresh_token, scope_separator=SCOPE_SEPARATORS))
    server.exchange(jwt_bearer(exchange_assertion))
    return server


server = build_server()
