"""
JWT bearer assertion exchange (RFC 7523, grant_type=urn:ietf:params:oauth:grant-type:jwt-bearer).

The assertion is handed to the issue callback either whole, as (data, signature) where data is
everything before the last dot, or fully split into (header, claim_set, signature). Segments
stay base64url-encoded. The signature is not checked here; verifying it is up to the callback.
"""
from collections.abc import Mapping
from typing import Any

from oauth2_core.callbacks import strategy
from oauth2_core.errors import TokenError
from oauth2_core.exchange.base import ExchangeHandler

GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"


class JWTBearerExchange(ExchangeHandler):
    grant_type = GRANT_TYPE
    token_type = "bearer"
    invalid_message = "invalid JWT"
    issue_strategies = (
        strategy("assertion", "client", "assertion"),
        strategy("data_signature", "client", "data", "signature"),
        strategy("segments", "client", "header", "claim_set", "signature"),
        strategy("segments_with_body", "client", "header", "claim_set", "signature", "body"),
    )

    def extract(self, body: Mapping[str, Any]) -> dict[str, Any]:
        assertion = self.require(body, "assertion")
        segments = assertion.split(".") if isinstance(assertion, str) else []
        if len(segments) != 3:
            raise TokenError("malformed assertion parameter", "invalid_request")
        header, claim_set, signature = segments
        return {
            "assertion": assertion,
            "data": f"{header}.{claim_set}",
            "header": header,
            "claim_set": claim_set,
            "signature": signature,
        }


def jwt_bearer(issue, **options) -> JWTBearerExchange:
    return JWTBearerExchange(issue, **options)
