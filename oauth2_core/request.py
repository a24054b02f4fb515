"""
Framework-neutral request and transaction objects.
The HTTP binding builds an OAuth2Request from its own request (query, parsed body, session,
authenticated user) and hands it to the endpoints returned by Server.
"""
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass, field
from typing import Any

PROTOCOL = "oauth2"


@dataclass
class Transaction:
    """One in-flight authorization request."""

    client: Any = None
    redirect_uri: str | None = None
    req: dict[str, Any] = field(default_factory=dict)
    transaction_id: str | None = None
    info: dict[str, Any] | None = None
    # Set while completing: authenticated resource owner and their decision
    user: Any = None
    res: dict[str, Any] | None = None
    # Request-local values from the immediate callback; never stored in the session
    locals: dict[str, Any] = field(default_factory=dict)

    @property
    def type(self) -> str | None:
        return self.req.get("type")

    @property
    def state(self) -> str | None:
        return self.req.get("state")

    def to_session(self, serialized_client: Any) -> dict[str, Any]:
        data = {
            "protocol": PROTOCOL,
            "client": serialized_client,
            "redirect_uri": self.redirect_uri,
            "req": self.req,
        }
        if self.info is not None:
            data["info"] = self.info
        return data

    @classmethod
    def from_session(cls, transaction_id: str, data: Mapping[str, Any], client: Any) -> "Transaction":
        return cls(
            client=client,
            redirect_uri=data.get("redirect_uri"),
            req=dict(data.get("req") or {}),
            transaction_id=transaction_id,
            info=data.get("info"),
        )


class OAuth2Request:
    """
    What the core needs from an HTTP request.
    body is None when the binding did not parse a body; session is None when the application
    has no session support. Extra keyword arguments become attributes, so a client
    authenticated under a custom property name (user_property) can be supplied as well.
    """

    def __init__(
        self,
        query: Mapping[str, Any] | None = None,
        body: Mapping[str, Any] | None = None,
        session: MutableMapping[str, Any] | None = None,
        user: Any = None,
        auth_info: Any = None,
        **extra: Any,
    ):
        self.query = dict(query or {})
        self.body = dict(body) if body is not None else None
        self.session = session
        self.user = user
        self.auth_info = auth_info
        self.oauth2: Transaction | None = None
        for name, value in extra.items():
            setattr(self, name, value)

    def param(self, name: str) -> Any:
        """Query parameter, falling back to the body field of the same name."""
        value = self.query.get(name)
        if not value and self.body is not None:
            value = self.body.get(name)
        return value

    def get(self, attribute: str) -> Any:
        return getattr(self, attribute, None)
