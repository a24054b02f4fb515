"""
OAuth 2.0 error taxonomy (RFC 6749 §4.1.2.1, §4.2.2.1, §5.2).
AuthorizationError is delivered to the client through a response mode; TokenError is
rendered as a JSON body by the token endpoint. ConfigurationError signals a mis-wired
application and is deliberately outside the OAuth2Error hierarchy.
"""


class ConfigurationError(RuntimeError):
    """Raised when the embedding application is missing a required collaborator."""


class OAuth2Error(Exception):
    """Base class for errors that map onto an OAuth 2.0 wire-level error response."""

    default_code = "server_error"
    status_codes: dict[str, int] = {}
    default_status = 500

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        uri: str | None = None,
        status: int | None = None,
        state: str | None = None,
    ):
        super().__init__(message or "")
        self.message = message
        self.code = code or self.default_code
        self.uri = uri
        self.state = state
        self.status = status or self.status_codes.get(self.code, self.default_status)

    def to_params(self) -> dict[str, str]:
        """Wire parameters: error, error_description, error_uri (and state when known)."""
        params = {"error": self.code}
        if self.message:
            params["error_description"] = self.message
        if self.uri:
            params["error_uri"] = self.uri
        if self.state:
            params["state"] = self.state
        return params

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r}, status={self.status})"


class AuthorizationError(OAuth2Error):
    default_code = "server_error"
    default_status = 400
    status_codes = {
        "invalid_request": 400,
        "invalid_client": 401,
        "invalid_grant": 400,
        "unauthorized_client": 403,
        "access_denied": 403,
        "unsupported_response_type": 501,
        "invalid_scope": 400,
        "server_error": 500,
        "temporarily_unavailable": 503,
    }


class TokenError(OAuth2Error):
    default_code = "server_error"
    default_status = 400
    status_codes = {
        "invalid_request": 400,
        "invalid_client": 401,
        "invalid_grant": 400,
        "unauthorized_client": 400,
        "unsupported_grant_type": 400,
        "invalid_scope": 400,
        "server_error": 500,
        "temporarily_unavailable": 503,
    }


class BadRequestError(OAuth2Error):
    """Malformed request that must not be redirected back to the client (e.g. no transaction_id)."""

    default_code = "invalid_request"

    def __init__(self, message: str | None = None):
        super().__init__(message, status=400)


class ForbiddenError(OAuth2Error):
    """Request refers to state this session does not own (e.g. an unknown transaction)."""

    default_code = "access_denied"

    def __init__(self, message: str | None = None):
        super().__init__(message, status=403)
