"""
Steam OpenID Verifier for Python

Verify Steam OpenID 2.0 sign-in callbacks by direct verification with Steam.
"""

from .errors import (
    SteamOpenIdError,
    SteamOpenIdErrorType,
    SteamOpenIdUpstreamError,
    is_retryable_error,
)
from .models import StrategyConfig, SteamProfile, SteamUser, VerificationOutcome
from .client import SteamOpenIdClient
from .query import (
    collect_query,
    get_steam_id,
    has_auth_query,
    has_nonce_expired,
    is_query_valid,
    is_steam_response_valid,
    is_valid_identity,
)
from .transport import AsyncHttpxTransport, HttpxTransport, TransportResponse
from .middleware.wsgi import SteamOpenIdWSGIMiddleware

__version__ = "0.1.0"

__all__ = [
    "SteamOpenIdError",
    "SteamOpenIdErrorType",
    "SteamOpenIdUpstreamError",
    "is_retryable_error",
    "StrategyConfig",
    "SteamProfile",
    "SteamUser",
    "VerificationOutcome",
    "SteamOpenIdClient",
    "collect_query",
    "get_steam_id",
    "has_auth_query",
    "has_nonce_expired",
    "is_query_valid",
    "is_steam_response_valid",
    "is_valid_identity",
    "AsyncHttpxTransport",
    "HttpxTransport",
    "TransportResponse",
    "SteamOpenIdWSGIMiddleware",
]

# Middleware imports - optional, require framework dependencies
try:
    from .middleware.asgi import SteamOpenIdASGIMiddleware
    __all__.append("SteamOpenIdASGIMiddleware")
except ImportError:
    pass