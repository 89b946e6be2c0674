"""
Verification pipeline for Steam OpenID 2.0 callbacks.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import urlencode

from .errors import SteamOpenIdError, SteamOpenIdErrorType, SteamOpenIdUpstreamError
from .models import StrategyConfig, SteamProfile, SteamUser, VerificationOutcome
from .query import (
    OPENID_ID_SELECT,
    OPENID_NS,
    PLAYER_SUMMARY_URL,
    STEAM_LOGIN_ENDPOINT,
    get_steam_id,
    has_auth_query,
    has_nonce_expired,
    is_query_valid,
    is_steam_response_valid,
)
from .transport import (
    AsyncHttpxTransport,
    AsyncTransport,
    HttpxTransport,
    Transport,
    TransportResponse,
)

logger = logging.getLogger(__name__)

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}


def build_verification_body(query: Mapping[str, str]) -> dict[str, str]:
    """Copy the assertion with openid.mode switched to check_authentication."""
    body = dict(query)
    body["openid.mode"] = "check_authentication"
    return body


def _parse_player_summary(steamid: str, response: TransportResponse) -> SteamProfile:
    """
    Turn a GetPlayerSummaries response into a profile for steamid.

    Raises:
        SteamOpenIdUpstreamError: If the response breaks the API contract
        SteamOpenIdError: If no matching profile was returned
    """
    if response.status_code != 200:
        raise SteamOpenIdUpstreamError(
            f"Player summary request failed with status {response.status_code}."
        )

    try:
        data = response.json()
    except ValueError as e:
        raise SteamOpenIdUpstreamError("Malformed response from steam.") from e

    payload = data.get("response") if isinstance(data, dict) else None
    players = payload.get("players") if isinstance(payload, dict) else None
    if not isinstance(players, list):
        raise SteamOpenIdUpstreamError("Malformed response from steam.")

    if not players:
        raise SteamOpenIdError(
            "Profile was not found on steam.",
            SteamOpenIdErrorType.INVALID_STEAM_ID,
        )

    player = players[0]
    if not isinstance(player, dict) or player.get("steamid") != steamid:
        raise SteamOpenIdError(
            "Steam returned a profile for a different steamid.",
            SteamOpenIdErrorType.INVALID_STEAM_ID,
        )

    return SteamProfile.from_player(player)


def _outcome_from_error(err: SteamOpenIdError | SteamOpenIdUpstreamError) -> VerificationOutcome:
    return VerificationOutcome(verified=False, error=str(err), error_type=err.code)


class SteamOpenIdClient:
    """
    Verifies Steam OpenID callbacks using direct (dumb mode) verification.

    No signature math happens locally: every assertion is posted back to
    Steam with openid.mode=check_authentication.

    Args:
        config: Strategy configuration
        transport: Synchronous transport. Default: httpx-backed, created lazily
        async_transport: Asynchronous transport. Default: httpx-backed, created lazily

    Example:
        >>> client = SteamOpenIdClient(StrategyConfig(return_url="https://example.com/auth/steam"))
        >>> outcome = await client.verify(dict(request.query_params))
        >>> if outcome.should_redirect:
        ...     return RedirectResponse(client.build_redirect_url())
        >>> if outcome.verified:
        ...     print(f"Signed in as {outcome.user.steamid}")
    """

    def __init__(
        self,
        config: StrategyConfig,
        transport: Transport | None = None,
        async_transport: AsyncTransport | None = None,
    ):
        self.config = config
        self._transport = transport
        self._async_transport = async_transport
        self._owns_transport = transport is None
        self._owns_async_transport = async_transport is None

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            self._transport = HttpxTransport(timeout_s=self.config.timeout_s)
        return self._transport

    @property
    def async_transport(self) -> AsyncTransport:
        if self._async_transport is None:
            self._async_transport = AsyncHttpxTransport(timeout_s=self.config.timeout_s)
        return self._async_transport

    def close(self) -> None:
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            self._transport.close()
            self._transport = None

    async def aclose(self) -> None:
        if self._owns_async_transport and isinstance(self._async_transport, AsyncHttpxTransport):
            await self._async_transport.aclose()
            self._async_transport = None

    def __enter__(self) -> SteamOpenIdClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    async def __aenter__(self) -> SteamOpenIdClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def build_redirect_url(self) -> str:
        """
        Build the URL that sends the browser to Steam to sign in.

        Steam picks the identity (identifier_select) and returns the user
        to the configured return URL.
        """
        params = {
            "openid.mode": "checkid_setup",
            "openid.ns": OPENID_NS,
            "openid.identity": OPENID_ID_SELECT,
            "openid.claimed_id": OPENID_ID_SELECT,
            "openid.return_to": self.config.return_url,
        }
        return f"{STEAM_LOGIN_ENDPOINT}?{urlencode(params)}"

    def _check_query(self, query: Mapping[str, Any]) -> None:
        """Run the local checks, raising on the first failure."""
        if not has_auth_query(query):
            raise SteamOpenIdError(
                "openid.mode is incorrect.",
                SteamOpenIdErrorType.INVALID_MODE,
            )

        if not is_query_valid(query, self.config.return_url):
            logger.warning("Rejected invalid OpenID query")
            raise SteamOpenIdError(
                "Supplied query is invalid.",
                SteamOpenIdErrorType.INVALID_QUERY,
            )

        if has_nonce_expired(query, self.config.max_nonce_age):
            logger.warning("Rejected expired OpenID nonce")
            raise SteamOpenIdError(
                "Response nonce has expired.",
                SteamOpenIdErrorType.NONCE_EXPIRED,
            )

    async def handle_request(self, query: Mapping[str, Any]) -> SteamUser | SteamProfile:
        """
        Verify a callback query asynchronously.

        Args:
            query: Query parameters from the callback request

        Returns:
            SteamUser, or SteamProfile when profile is enabled

        Raises:
            SteamOpenIdError: Authentication failed (mode, query, nonce,
                Steam rejection, unknown steamid)
            SteamOpenIdUpstreamError: Steam broke the player summary contract
        """
        self._check_query(query)

        if not await self.validate_against_steam(query):
            raise SteamOpenIdError(
                "Failed to validate query against steam.",
                SteamOpenIdErrorType.UNAUTHORIZED,
            )

        steamid = get_steam_id(query)
        logger.debug("Steam confirmed assertion for %s", steamid)
        if not self.config.profile:
            return SteamUser(steamid=steamid)
        return await self.fetch_profile(steamid)

    def handle_request_sync(self, query: Mapping[str, Any]) -> SteamUser | SteamProfile:
        """
        Verify a callback query synchronously.

        See handle_request for arguments and raised errors.
        """
        self._check_query(query)

        if not self.validate_against_steam_sync(query):
            raise SteamOpenIdError(
                "Failed to validate query against steam.",
                SteamOpenIdErrorType.UNAUTHORIZED,
            )

        steamid = get_steam_id(query)
        logger.debug("Steam confirmed assertion for %s", steamid)
        if not self.config.profile:
            return SteamUser(steamid=steamid)
        return self.fetch_profile_sync(steamid)

    async def verify(self, query: Mapping[str, Any]) -> VerificationOutcome:
        """Verify a callback query asynchronously and classify the result."""
        try:
            user = await self.handle_request(query)
        except (SteamOpenIdError, SteamOpenIdUpstreamError) as e:
            return _outcome_from_error(e)
        return VerificationOutcome(verified=True, user=user)

    def verify_sync(self, query: Mapping[str, Any]) -> VerificationOutcome:
        """Verify a callback query synchronously and classify the result."""
        try:
            user = self.handle_request_sync(query)
        except (SteamOpenIdError, SteamOpenIdUpstreamError) as e:
            return _outcome_from_error(e)
        return VerificationOutcome(verified=True, user=user)

    async def validate_against_steam(self, query: Mapping[str, str]) -> bool:
        """
        Ask Steam to confirm the assertion.

        Returns:
            True if Steam answered 200 with is_valid:true. Transport errors,
            other status codes and malformed bodies all yield False.
        """
        try:
            response = await self.async_transport.post(
                STEAM_LOGIN_ENDPOINT,
                data=build_verification_body(query),
                headers=FORM_HEADERS,
            )
        except Exception as e:
            logger.warning("check_authentication request failed: %s", e)
            return False

        return self._is_response_valid(response)

    def validate_against_steam_sync(self, query: Mapping[str, str]) -> bool:
        """Synchronous variant of validate_against_steam."""
        try:
            response = self.transport.post(
                STEAM_LOGIN_ENDPOINT,
                data=build_verification_body(query),
                headers=FORM_HEADERS,
            )
        except Exception as e:
            logger.warning("check_authentication request failed: %s", e)
            return False

        return self._is_response_valid(response)

    def _is_response_valid(self, response: TransportResponse) -> bool:
        if response.status_code != 200:
            logger.warning("check_authentication returned status %s", response.status_code)
            return False

        valid = is_steam_response_valid(response.text)
        if not valid:
            logger.warning("Steam did not confirm the assertion")
        return valid

    def _summary_params(self, steamid: str) -> dict[str, str]:
        return {"steamids": steamid, "key": self.config.api_key or ""}

    async def fetch_profile(self, steamid: str) -> SteamProfile:
        """
        Fetch the public player summary for a verified steamid.

        Raises:
            SteamOpenIdError: Profile not found or mismatched steamid
            SteamOpenIdUpstreamError: Transport failure or malformed response
        """
        try:
            response = await self.async_transport.get(
                PLAYER_SUMMARY_URL,
                params=self._summary_params(steamid),
            )
        except Exception as e:
            logger.error("Player summary request failed: %s", e)
            raise SteamOpenIdUpstreamError(f"Player summary request failed: {e}") from e

        return self._profile_from_response(steamid, response)

    def fetch_profile_sync(self, steamid: str) -> SteamProfile:
        """Synchronous variant of fetch_profile."""
        try:
            response = self.transport.get(
                PLAYER_SUMMARY_URL,
                params=self._summary_params(steamid),
            )
        except Exception as e:
            logger.error("Player summary request failed: %s", e)
            raise SteamOpenIdUpstreamError(f"Player summary request failed: {e}") from e

        return self._profile_from_response(steamid, response)

    def _profile_from_response(self, steamid: str, response: TransportResponse) -> SteamProfile:
        try:
            return _parse_player_summary(steamid, response)
        except SteamOpenIdUpstreamError as e:
            logger.error("Unexpected player summary response: %s", e)
            raise
