from oauth2_core.exchange.authorization_code import AuthorizationCodeExchange, authorization_code, code
from oauth2_core.exchange.base import ExchangeHandler, token_body, token_response, unpack_issued
from oauth2_core.exchange.client_credentials import ClientCredentialsExchange, client_credentials
from oauth2_core.exchange.jwt_bearer import JWTBearerExchange, jwt_bearer
from oauth2_core.exchange.password import PasswordExchange, password
from oauth2_core.exchange.refresh_token import RefreshTokenExchange, refresh_token

__all__ = [
    "AuthorizationCodeExchange",
    "ClientCredentialsExchange",
    "ExchangeHandler",
    "JWTBearerExchange",
    "PasswordExchange",
    "RefreshTokenExchange",
    "authorization_code",
    "client_credentials",
    "code",
    "jwt_bearer",
    "password",
    "refresh_token",
    "token_body",
    "token_response",
    "unpack_issued",
]
