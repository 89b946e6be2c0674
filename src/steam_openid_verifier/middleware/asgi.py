"""
ASGI middleware for Steam OpenID sign-in (FastAPI/Starlette).
"""

import inspect
import logging
from typing import Any, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response

from ..client import SteamOpenIdClient
from ..models import StrategyConfig
from ..query import collect_query

logger = logging.getLogger(__name__)

NO_USER_ERROR = "No user was received from callback."


class SteamOpenIdASGIMiddleware(BaseHTTPMiddleware):
    """
    ASGI middleware that runs the Steam OpenID flow on one callback path.

    Requests to `path`:
    - without a Steam assertion are redirected to Steam (302)
    - with a rejected assertion get a 401 JSON error
    - that hit an upstream contract break get a 500 JSON error
    - with a verified assertion reach the handler with
      `request.state.steam_user` set to a SteamUser or SteamProfile

    Every other path passes through with `request.state.steam_user = None`.

    Args:
        app: ASGI application
        config: Strategy configuration
        path: Callback path handled by the middleware (default: /auth/steam)
        verify: Optional callable `(steamid, user) -> user | None`, sync or
            async. Returning None rejects the sign-in with 401.
        client: Preconfigured SteamOpenIdClient, built from config if omitted

    Example (FastAPI):
        >>> app = FastAPI()
        >>> app.add_middleware(
        ...     SteamOpenIdASGIMiddleware,
        ...     config=StrategyConfig(return_url="https://example.com/auth/steam"),
        ... )
        >>>
        >>> @app.get("/auth/steam")
        >>> async def steam_callback(request: Request):
        ...     return {"steamid": request.state.steam_user.steamid}
    """

    def __init__(
        self,
        app: Any,
        config: StrategyConfig,
        path: str = "/auth/steam",
        verify: Callable[..., Any] | None = None,
        client: SteamOpenIdClient | None = None,
    ):
        super().__init__(app)
        self.path = path
        self.verify = verify
        self.client = client or SteamOpenIdClient(config)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        request.state.steam_user = None
        if request.url.path != self.path:
            return await call_next(request)

        query = collect_query(request.query_params.multi_items())
        outcome = await self.client.verify(query)

        if outcome.should_redirect:
            return RedirectResponse(self.client.build_redirect_url(), status_code=302)

        if outcome.is_internal_error:
            logger.error("Steam sign-in failed: %s", outcome.error)
            return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

        if not outcome.verified:
            return JSONResponse(status_code=401, content={"error": outcome.error})

        user = outcome.user
        if self.verify is not None:
            user = self.verify(user.steamid, user)
            if inspect.isawaitable(user):
                user = await user
            if user is None:
                return JSONResponse(status_code=401, content={"error": NO_USER_ERROR})

        request.state.steam_user = user
        return await call_next(request)
