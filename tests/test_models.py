"""Tests for configuration, models and errors."""

import pytest

from steam_openid_verifier import (
    SteamOpenIdError,
    SteamOpenIdErrorType,
    SteamOpenIdUpstreamError,
    SteamProfile,
    StrategyConfig,
    is_retryable_error,
)

from .helpers import RETURN_URL, STEAMID


class TestStrategyConfig:
    """Tests for StrategyConfig."""

    def test_defaults(self):
        """Profile and nonce checks are off by default."""
        config = StrategyConfig(return_url=RETURN_URL)
        assert config.profile is False
        assert config.api_key is None
        assert config.max_nonce_age is None

    def test_immutable(self):
        """Config cannot be changed after construction."""
        config = StrategyConfig(return_url=RETURN_URL)
        with pytest.raises(AttributeError):
            config.return_url = "https://evil.example.com"

    def test_return_url_required(self):
        """Empty return URL is rejected."""
        with pytest.raises(ValueError, match="return_url"):
            StrategyConfig(return_url="")

    def test_profile_requires_api_key(self):
        """Profile enrichment needs an API key."""
        with pytest.raises(ValueError, match="api_key"):
            StrategyConfig(return_url=RETURN_URL, profile=True)

    def test_negative_nonce_age(self):
        """Negative nonce age is rejected."""
        with pytest.raises(ValueError, match="max_nonce_age"):
            StrategyConfig(return_url=RETURN_URL, max_nonce_age=-1)

    def test_from_env(self):
        """Config is read from environment variables."""
        config = StrategyConfig.from_env({
            "STEAM_RETURN_URL": RETURN_URL,
            "STEAM_PROFILE": "TRUE",
            "STEAM_API_KEY": "key",
            "STEAM_MAX_NONCE_AGE": "300",
            "STEAM_TIMEOUT_S": "2.5",
        })
        assert config == StrategyConfig(
            return_url=RETURN_URL,
            profile=True,
            api_key="key",
            max_nonce_age=300,
            timeout_s=2.5,
        )

    def test_from_env_minimal(self, monkeypatch):
        """Only the return URL is required."""
        for name in ("STEAM_PROFILE", "STEAM_API_KEY", "STEAM_MAX_NONCE_AGE", "STEAM_TIMEOUT_S"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("STEAM_RETURN_URL", RETURN_URL)

        config = StrategyConfig.from_env()

        assert config == StrategyConfig(return_url=RETURN_URL)

    def test_from_env_missing_return_url(self):
        """Missing return URL fails loudly."""
        with pytest.raises(ValueError):
            StrategyConfig.from_env({})


class TestSteamProfile:
    """Tests for SteamProfile."""

    def test_from_player(self):
        """Known attributes are mapped and the raw player kept."""
        player = {
            "steamid": STEAMID,
            "personaname": "Rabscuttle",
            "communityvisibilitystate": 3,
            "gameextrainfo": "Team Fortress 2",
        }

        profile = SteamProfile.from_player(player)

        assert profile.steamid == STEAMID
        assert profile.personaname == "Rabscuttle"
        assert profile.communityvisibilitystate == 3
        assert profile.realname is None
        assert profile.raw == player


class TestErrors:
    """Tests for error classification."""

    def test_retryable(self):
        """Only INVALID_MODE is retryable."""
        error = SteamOpenIdError("Invalid mode", SteamOpenIdErrorType.INVALID_MODE)
        assert is_retryable_error(error) is True

    def test_not_a_steam_error(self):
        """Other exceptions are not retryable."""
        assert is_retryable_error(ValueError("Message")) is False
        assert is_retryable_error(SteamOpenIdUpstreamError("Malformed")) is False

    def test_wrong_error_code(self):
        """Other codes are not retryable."""
        error = SteamOpenIdError("Unknown", SteamOpenIdErrorType.INVALID_STEAM_ID)
        assert is_retryable_error(error) is False
