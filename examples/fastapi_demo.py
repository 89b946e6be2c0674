"""
FastAPI demo with Steam OpenID sign-in.

Usage:
    # Install dependencies
    pip install -e ".[fastapi,starlette]"

    # Run the server
    STEAM_RETURN_URL=http://localhost:8009/auth/steam uvicorn examples.fastapi_demo:app --port 8009 --reload

    # Or directly
    STEAM_RETURN_URL=http://localhost:8009/auth/steam python examples/fastapi_demo.py

Then open http://localhost:8009/auth/steam in a browser.

Environment variables:
    STEAM_RETURN_URL - Callback URL registered with Steam (required)
    STEAM_PROFILE - Set to "true" to fetch the player summary
    STEAM_API_KEY - Steam Web API key (required with STEAM_PROFILE)
    STEAM_MAX_NONCE_AGE - Reject assertions older than this many seconds
"""

import logging

from fastapi import FastAPI, Request

# Import from installed package
from steam_openid_verifier import SteamOpenIdASGIMiddleware, SteamProfile, StrategyConfig

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

config = StrategyConfig.from_env()

app = FastAPI(
    title="Steam OpenID Demo API",
    description="Demo API with Steam OpenID sign-in",
    version="0.1.0",
)


def verify(steamid, user):
    """Hook for looking up or creating the local account."""
    logger.info("Verified %s", steamid)
    return user


# Add Steam OpenID middleware
app.add_middleware(
    SteamOpenIdASGIMiddleware,
    config=config,
    path="/auth/steam",
    verify=verify,
)


@app.get("/")
async def root():
    """API info endpoint."""
    return {
        "service": "Steam OpenID Demo API",
        "profile": config.profile,
        "endpoints": {
            "/auth/steam": "Sign in through Steam",
            "/health": "Health check",
        },
    }


@app.get("/auth/steam")
async def steam_callback(request: Request):
    """Only reached with a verified assertion; the middleware handles the rest."""
    user = request.state.steam_user
    response = {"steamid": user.steamid}
    if isinstance(user, SteamProfile):
        response["personaname"] = user.personaname
        response["avatar"] = user.avatarfull
    return response


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8009)
