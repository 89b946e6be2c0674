"""
Error types raised by the verification pipeline.
"""

from enum import Enum


class SteamOpenIdErrorType(str, Enum):
    """
    Classification of verification failures.

    INVALID_MODE is not a security failure: the request is not a callback
    yet and the caller should redirect to Steam. UPSTREAM_ERROR signals that
    Steam broke its documented contract and deserves operational attention.
    """
    INVALID_MODE = "invalid_mode"
    INVALID_QUERY = "invalid_query"
    NONCE_EXPIRED = "nonce_expired"
    UNAUTHORIZED = "unauthorized"
    INVALID_STEAM_ID = "invalid_steam_id"
    UPSTREAM_ERROR = "upstream_error"


class SteamOpenIdError(Exception):
    """
    Expected authentication failure caused by the request or the user.

    Args:
        message: Human readable description
        code: Failure classification
    """

    def __init__(self, message: str, code: SteamOpenIdErrorType):
        super().__init__(message)
        self.code = code


class SteamOpenIdUpstreamError(Exception):
    """Steam returned something outside of its documented contract."""

    code = SteamOpenIdErrorType.UPSTREAM_ERROR


def is_retryable_error(err: BaseException) -> bool:
    """Return True if the flow should be re-initiated with a redirect."""
    return (
        isinstance(err, SteamOpenIdError)
        and err.code == SteamOpenIdErrorType.INVALID_MODE
    )
