from oauth2_core.grant.base import GrantHandler, RedirectGrant, RequestExtension
from oauth2_core.grant.code import CodeGrant, authorization_code, code
from oauth2_core.grant.token import TokenGrant, implicit, token

__all__ = [
    "CodeGrant",
    "GrantHandler",
    "RedirectGrant",
    "RequestExtension",
    "TokenGrant",
    "authorization_code",
    "code",
    "implicit",
    "token",
]
