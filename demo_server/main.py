"""
Demo authorization server: oauth2_core behind FastAPI with SQLAlchemy persistence.
Port 9000.
"""
import html
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from starlette.middleware.sessions import SessionMiddleware

from demo_server.config import SESSION_SECRET
from demo_server.database import SessionLocal, init_db
from demo_server.keys import get_signing_key
from demo_server.routes import router
from demo_server.seed import seed_from_env
from oauth2_core.errors import OAuth2Error

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, load signing key, seed user/client from env on startup."""
    init_db()
    get_signing_key()
    db = SessionLocal()
    try:
        seed_from_env(db)
    finally:
        db.close()
    yield


app = FastAPI(title="OAuth2 Demo Server", version="0.1.0", lifespan=lifespan)
app.add_middleware(SessionMiddleware, secret_key=SESSION_SECRET, same_site="lax")
app.include_router(router, tags=["oauth2"])


@app.exception_handler(OAuth2Error)
async def oauth2_error_page(request: Request, exc: OAuth2Error):
    """OAuth 2.0 errors that cannot be sent back to a client redirect URI."""
    logger.info("%s %s failed: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    return HTMLResponse(
        f"<h1>Invalid request</h1><p>{html.escape(exc.message or exc.code)}</p>",
        status_code=exc.status,
    )


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "demo_server"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "demo_server.main:app",
        host="127.0.0.1",
        port=9000,
        reload=True,
    )
