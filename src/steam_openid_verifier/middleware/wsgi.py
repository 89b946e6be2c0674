"""
WSGI middleware for Steam OpenID sign-in (Flask).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable
from urllib.parse import parse_qsl

from ..client import SteamOpenIdClient
from ..models import StrategyConfig
from ..query import collect_query

logger = logging.getLogger(__name__)

ENVIRON_KEY = "steam_openid.user"
NO_USER_ERROR = "No user was received from callback."


class SteamOpenIdWSGIMiddleware:
    """
    WSGI middleware that runs the Steam OpenID flow on one callback path.

    Behaves like SteamOpenIdASGIMiddleware, attaching the verified user to
    `environ["steam_openid.user"]`.

    Args:
        app: WSGI application
        config: Strategy configuration
        path: Callback path handled by the middleware (default: /auth/steam)
        verify: Optional callable `(steamid, user) -> user | None`.
            Returning None rejects the sign-in with 401.
        client: Preconfigured SteamOpenIdClient, built from config if omitted

    Example (Flask):
        >>> from flask import Flask, request
        >>> from steam_openid_verifier.middleware.wsgi import SteamOpenIdWSGIMiddleware
        >>>
        >>> app = Flask(__name__)
        >>> app.wsgi_app = SteamOpenIdWSGIMiddleware(app.wsgi_app, config=config)
        >>>
        >>> @app.route("/auth/steam")
        >>> def steam_callback():
        ...     user = request.environ["steam_openid.user"]
        ...     return {"steamid": user.steamid}
    """

    def __init__(
        self,
        app: Callable[..., Iterable[bytes]],
        config: StrategyConfig,
        path: str = "/auth/steam",
        verify: Callable[..., Any] | None = None,
        client: SteamOpenIdClient | None = None,
    ):
        self.app = app
        self.path = path
        self.verify = verify
        self.client = client or SteamOpenIdClient(config)

    def __call__(
        self,
        environ: dict[str, Any],
        start_response: Callable[..., Any],
    ) -> Iterable[bytes]:
        environ[ENVIRON_KEY] = None
        if environ.get("PATH_INFO", "/") != self.path:
            return self.app(environ, start_response)

        pairs = parse_qsl(environ.get("QUERY_STRING", ""), keep_blank_values=True)
        outcome = self.client.verify_sync(collect_query(pairs))

        if outcome.should_redirect:
            start_response(
                "302 Found",
                [
                    ("Location", self.client.build_redirect_url()),
                    ("Content-Length", "0"),
                ],
            )
            return [b""]

        if outcome.is_internal_error:
            logger.error("Steam sign-in failed: %s", outcome.error)
            return self._error_response(
                start_response, "500 Internal Server Error", "Internal Server Error"
            )

        if not outcome.verified:
            return self._error_response(start_response, "401 Unauthorized", outcome.error)

        user = outcome.user
        if self.verify is not None:
            user = self.verify(user.steamid, user)
            if user is None:
                return self._error_response(start_response, "401 Unauthorized", NO_USER_ERROR)

        environ[ENVIRON_KEY] = user
        return self.app(environ, start_response)

    def _error_response(
        self,
        start_response: Callable[..., Any],
        status: str,
        error: str | None,
    ) -> Iterable[bytes]:
        """Return a JSON error response."""
        body = json.dumps({"error": error}).encode("utf-8")
        start_response(
            status,
            [
                ("Content-Type", "application/json"),
                ("Content-Length", str(len(body))),
            ],
        )
        return [body]
