"""
Response modes: how authorization results reach the client's redirect URI.
query and fragment redirect (302); form_post answers with an auto-submitting HTML form
(OAuth 2.0 Form Post Response Mode). form_post HTML-escapes every injected value.
"""
import html
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from starlette.responses import HTMLResponse, RedirectResponse, Response

ResponseMode = Callable[[str, Mapping[str, Any]], Response]


def _clean(params: Mapping[str, Any] | None) -> dict[str, str]:
    return {k: str(v) for k, v in (params or {}).items() if v is not None}


def query(redirect_uri: str, params: Mapping[str, Any] | None) -> RedirectResponse:
    """Merge params into the redirect URI's query string; same-name parameters are replaced."""
    parts = urlsplit(redirect_uri)
    added = _clean(params)
    merged = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in added]
    merged.extend(added.items())
    location = urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(merged), parts.fragment))
    return RedirectResponse(url=location, status_code=302)


def fragment(redirect_uri: str, params: Mapping[str, Any] | None) -> RedirectResponse:
    """Replace the redirect URI's fragment with the form-urlencoded params."""
    parts = urlsplit(redirect_uri)
    location = urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, urlencode(_clean(params))))
    return RedirectResponse(url=location, status_code=302)


_FORM_POST_PAGE = (
    "<html>"
    "<head><title>Submit This Form</title></head>"
    '<body onload="javascript:document.forms[0].submit()">'
    '<form method="post" action="{action}">{inputs}</form>'
    "</body>"
    "</html>"
)
_FORM_POST_INPUT = '<input type="hidden" name="{name}" value="{value}"/>'


def form_post(redirect_uri: str, params: Mapping[str, Any] | None) -> HTMLResponse:
    """Auto-submitting form POSTing params to the redirect URI."""
    inputs = "".join(
        _FORM_POST_INPUT.format(name=html.escape(name), value=html.escape(value))
        for name, value in _clean(params).items()
    )
    body = _FORM_POST_PAGE.format(action=html.escape(redirect_uri), inputs=inputs)
    return HTMLResponse(
        body,
        headers={
            "Content-Type": "text/html;charset=UTF-8",
            "Cache-Control": "no-store",
            "Pragma": "no-cache",
        },
    )


DEFAULT_MODES: dict[str, ResponseMode] = {
    "query": query,
    "fragment": fragment,
    "form_post": form_post,
}
