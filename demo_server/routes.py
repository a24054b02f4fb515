"""
HTTP routes binding oauth2_core to FastAPI.
GET /login, POST /login: resource owner login (session cookie).
GET /dialog/authorize: authorization endpoint; renders the consent page for a pending transaction.
POST /dialog/authorize/decision: the resource owner's answer.
POST /oauth/token: token endpoint; authenticates the client, then dispatches on grant_type.
"""
import html
import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from demo_server.client_auth import authenticate_client
from demo_server.database import get_db
from demo_server.models import User
from demo_server.oauth2 import immediate, parse_decision, server, validate
from demo_server.seed import verify_password
from oauth2_core.binding import from_starlette
from oauth2_core.errors import ForbiddenError, OAuth2Error
from oauth2_core.request import OAuth2Request, Transaction

logger = logging.getLogger(__name__)
router = APIRouter()

authorization = server.authorize(validate, immediate)
decision = server.decision(parse_decision)
token_endpoint = server.token()
authorization_errors = server.authorization_error_handler()
token_errors = server.error_handler("direct")


def e(s) -> str:
    return html.escape(str(s) if s is not None else "")


def _current_user(request: Request, db: Session) -> User | None:
    user_id = request.session.get("user_id")
    if user_id is None:
        return None
    return db.get(User, user_id)


def _safe_return_to(return_to: str | None) -> str:
    # Local paths only
    if not return_to or not return_to.startswith("/") or return_to.startswith("//"):
        return "/"
    return return_to


def _login_page(return_to: str, username: str = "", failed: bool = False) -> str:
    error = '<p style="color:red;">Invalid username or password.</p>' if failed else ""
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Log in</title></head>
<body>
  <h1>Log in</h1>
  {error}
  <form method="post" action="/login">
    <input type="hidden" name="return_to" value="{e(return_to)}"/>
    <label>Username: <input type="text" name="username" value="{e(username)}" required/></label><br/>
    <label>Password: <input type="password" name="password" required/></label><br/>
    <button type="submit">Log in</button>
  </form>
</body>
</html>"""


def _consent_page(txn: Transaction, user: User) -> str:
    scope = txn.req.get("scope") or []
    items = "".join(f"<li>{e(s)}</li>" for s in scope) or "<li>(none)</li>"
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Consent</title></head>
<body>
  <h1>Consent</h1>
  <p>Hi {e(user.name or user.username)}, <strong>{e(txn.client.display_name)}</strong> is requesting access to your account:</p>
  <ul>{items}</ul>
  <form method="post" action="/dialog/authorize/decision">
    <input type="hidden" name="transaction_id" value="{e(txn.transaction_id)}"/>
    <input type="hidden" name="scope" value="{e(' '.join(scope))}"/>
    <button type="submit">Allow</button>
    <button type="submit" name="cancel" value="Deny">Deny</button>
  </form>
</body>
</html>"""


async def _authorization_step(endpoint, oreq: OAuth2Request):
    """Run an authorization endpoint; errors for a validated client go back to its redirect URI."""
    try:
        return await endpoint(oreq)
    except OAuth2Error as err:
        if oreq.oauth2 is None or not oreq.oauth2.client:
            raise
        logger.info("authorization error for client %s: %s", oreq.oauth2.req.get("client_id"), err.code)
        return await authorization_errors(err, oreq)


@router.get("/login", response_class=HTMLResponse)
def login_form(return_to: str = "/"):
    return HTMLResponse(_login_page(_safe_return_to(return_to)))


@router.post("/login")
def login(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    return_to: str = Form("/"),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.username == username).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("login failed for %s", username)
        return HTMLResponse(_login_page(_safe_return_to(return_to), username, failed=True), status_code=401)
    request.session["user_id"] = user.id
    logger.info("login ok for user %s", user.id)
    return RedirectResponse(url=_safe_return_to(return_to), status_code=302)


@router.get("/dialog/authorize")
async def authorize(request: Request, db: Session = Depends(get_db)):
    user = _current_user(request, db)
    if user is None:
        return_to = request.url.path + (f"?{request.url.query}" if request.url.query else "")
        return RedirectResponse(url=f"/login?{urlencode({'return_to': return_to})}", status_code=302)

    oreq = await from_starlette(request, user=user)
    response = await _authorization_step(authorization, oreq)
    if response is not None:
        return response
    return HTMLResponse(_consent_page(oreq.oauth2, user))


@router.post("/dialog/authorize/decision")
async def authorize_decision(request: Request, db: Session = Depends(get_db)):
    user = _current_user(request, db)
    if user is None:
        raise ForbiddenError("Login required")
    oreq = await from_starlette(request, user=user)
    return await _authorization_step(decision, oreq)


@router.post("/oauth/token")
async def issue_token(request: Request, db: Session = Depends(get_db)):
    oreq = await from_starlette(request)
    try:
        oreq.user, oreq.auth_info = authenticate_client(db, request, oreq.body or {})
        return await token_endpoint(oreq)
    except OAuth2Error as err:
        return await token_errors(err, oreq)
