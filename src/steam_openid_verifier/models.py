"""
Data models for Steam OpenID verification.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from .errors import SteamOpenIdErrorType


@dataclass(frozen=True)
class StrategyConfig:
    """
    Process-lifetime configuration of the verification pipeline.

    Attributes:
        return_url: Exact callback URL Steam must echo back in openid.return_to
        profile: Fetch the public player summary after verification
        api_key: Steam Web API key, required when profile is enabled
        max_nonce_age: Maximum assertion age in seconds, None disables the check
        timeout_s: Timeout for the default httpx transport
    """
    return_url: str
    profile: bool = False
    api_key: str | None = None
    max_nonce_age: int | None = None
    timeout_s: float = 10.0

    def __post_init__(self) -> None:
        if not self.return_url:
            raise ValueError("return_url is required")
        if self.profile and not self.api_key:
            raise ValueError("api_key is required when profile is enabled")
        if self.max_nonce_age is not None and self.max_nonce_age < 0:
            raise ValueError("max_nonce_age must not be negative")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StrategyConfig:
        """
        Build a config from environment variables.

        Environment variables:
            STEAM_RETURN_URL - Callback URL (required)
            STEAM_PROFILE - Set to "true" to fetch player summaries
            STEAM_API_KEY - Steam Web API key
            STEAM_MAX_NONCE_AGE - Maximum nonce age in seconds
            STEAM_TIMEOUT_S - Transport timeout in seconds (default: 10)
        """
        env = os.environ if environ is None else environ
        max_nonce_age = env.get("STEAM_MAX_NONCE_AGE")
        return cls(
            return_url=env.get("STEAM_RETURN_URL", ""),
            profile=env.get("STEAM_PROFILE", "false").lower() == "true",
            api_key=env.get("STEAM_API_KEY") or None,
            max_nonce_age=int(max_nonce_age) if max_nonce_age else None,
            timeout_s=float(env.get("STEAM_TIMEOUT_S", "10")),
        )


@dataclass(frozen=True)
class SteamUser:
    """Verified identity when profile enrichment is disabled."""
    steamid: str


@dataclass(frozen=True)
class SteamProfile:
    """
    Verified identity enriched with the public player summary.

    Attributes mirror the GetPlayerSummaries v2 response. Fields Steam omits
    for private profiles are None. The decoded player object is kept in raw.
    """
    steamid: str
    communityvisibilitystate: int | None = None
    profilestate: int | None = None
    personaname: str | None = None
    commentpermission: int | None = None
    profileurl: str | None = None
    avatar: str | None = None
    avatarmedium: str | None = None
    avatarfull: str | None = None
    avatarhash: str | None = None
    lastlogoff: int | None = None
    personastate: int | None = None
    realname: str | None = None
    primaryclanid: str | None = None
    timecreated: int | None = None
    personastateflags: int | None = None
    loccountrycode: str | None = None
    locstatecode: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_player(cls, player: Mapping[str, Any]) -> SteamProfile:
        known = {f.name for f in fields(cls)} - {"raw"}
        values = {k: v for k, v in player.items() if k in known}
        return cls(**values, raw=dict(player))


@dataclass
class VerificationOutcome:
    """
    Result of verifying one callback.

    Attributes:
        verified: Whether the assertion was confirmed by Steam
        user: SteamUser or SteamProfile if verified
        error: Error message if verification failed
        error_type: Failure classification if verification failed
    """
    verified: bool
    user: SteamUser | SteamProfile | None = None
    error: str | None = None
    error_type: SteamOpenIdErrorType | None = None

    @property
    def should_redirect(self) -> bool:
        return self.error_type == SteamOpenIdErrorType.INVALID_MODE

    @property
    def is_internal_error(self) -> bool:
        return self.error_type == SteamOpenIdErrorType.UPSTREAM_ERROR
