"""
Flask demo with Steam OpenID sign-in.

Usage:
    # Install dependencies
    pip install -e ".[flask]"

    # Run the server
    STEAM_RETURN_URL=http://localhost:8010/auth/steam flask --app examples.flask_demo run --port 8010

    # Or directly
    STEAM_RETURN_URL=http://localhost:8010/auth/steam python examples/flask_demo.py

Then open http://localhost:8010/auth/steam in a browser.

Environment variables:
    STEAM_RETURN_URL - Callback URL registered with Steam (required)
    STEAM_PROFILE - Set to "true" to fetch the player summary
    STEAM_API_KEY - Steam Web API key (required with STEAM_PROFILE)
    STEAM_MAX_NONCE_AGE - Reject assertions older than this many seconds
"""

import logging
import os

from flask import Flask, jsonify, request, session

# Import from installed package
from steam_openid_verifier import StrategyConfig
from steam_openid_verifier.middleware import SteamOpenIdWSGIMiddleware

logging.basicConfig(level=logging.INFO)

config = StrategyConfig.from_env()

app = Flask(__name__)
app.secret_key = os.getenv("FLASK_SECRET_KEY", "dev")

# Wrap with Steam OpenID middleware
app.wsgi_app = SteamOpenIdWSGIMiddleware(app.wsgi_app, config=config, path="/auth/steam")


@app.route("/")
def root():
    """API info endpoint."""
    return jsonify({
        "service": "Steam OpenID Flask Demo",
        "signed_in_as": session.get("steamid"),
        "endpoints": {
            "/auth/steam": "Sign in through Steam",
            "/me": "Current user",
            "/logout": "Forget the current user",
        },
    })


@app.route("/auth/steam")
def steam_callback():
    """Only reached with a verified assertion; the middleware handles the rest."""
    user = request.environ["steam_openid.user"]
    session["steamid"] = user.steamid
    return jsonify({"message": f"Authenticated as {user.steamid}"})


@app.route("/me")
def me():
    steamid = session.get("steamid")
    if not steamid:
        return jsonify({"error": "Not signed in"}), 401
    return jsonify({"steamid": steamid})


@app.route("/logout")
def logout():
    session.pop("steamid", None)
    return jsonify({"message": "Signed out"})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8010, debug=True)
