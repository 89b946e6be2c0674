"""
Steam OpenID middleware for ASGI and WSGI frameworks.

Re-exports middleware classes for convenient imports:
    from steam_openid_verifier.middleware import SteamOpenIdASGIMiddleware
    from steam_openid_verifier.middleware import SteamOpenIdWSGIMiddleware
"""

from .wsgi import SteamOpenIdWSGIMiddleware

__all__: list[str] = ["SteamOpenIdWSGIMiddleware"]

# ASGI middleware (FastAPI, Starlette)
try:
    from .asgi import SteamOpenIdASGIMiddleware
    __all__.append("SteamOpenIdASGIMiddleware")
except ImportError:
    pass
