"""
Starlette/FastAPI binding: build an OAuth2Request from a Starlette request.
The session is only available when SessionMiddleware is installed; without it the endpoints
fail with ConfigurationError("server requires session support").
"""
from typing import Any

from starlette.requests import Request

from oauth2_core.request import OAuth2Request

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def parse_body(request: Request) -> dict[str, Any] | None:
    if request.method not in ("POST", "PUT", "PATCH"):
        return None
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items()}
    if content_type.startswith("application/json"):
        return dict(await request.json())
    return None


async def from_starlette(request: Request, **attributes: Any) -> OAuth2Request:
    """attributes (user, auth_info, or a custom user_property) are set on the OAuth2Request."""
    session = request.session if "session" in request.scope else None
    return OAuth2Request(
        query=dict(request.query_params),
        body=await parse_body(request),
        session=session,
        **attributes,
    )
