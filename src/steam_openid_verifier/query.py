"""
Validation of OpenID 2.0 assertion queries delivered by Steam.

Everything here is pure: no network access, no mutation of the query.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping


OPENID_NS = "http://specs.openid.net/auth/2.0"
OPENID_ID_SELECT = f"{OPENID_NS}/identifier_select"
STEAM_LOGIN_ENDPOINT = "https://steamcommunity.com/openid/login"
STEAM_IDENTITY_ENDPOINT = "https://steamcommunity.com/openid/id/"
PLAYER_SUMMARY_URL = "https://api.steampowered.com/ISteamUser/GetPlayerSummaries/v2/"

# Steam issues this handle for stateless (dumb mode) assertions
STEAM_ASSOC_HANDLE = "1234567890"
STEAM_SIGNED_FIELDS = (
    "signed,op_endpoint,claimed_id,identity,return_to,response_nonce,assoc_handle"
)

# Keys allowed on an assertion query, in the order Steam sends them
OPENID_QUERY_PROPS = (
    "openid.ns",
    "openid.mode",
    "openid.op_endpoint",
    "openid.claimed_id",
    "openid.identity",
    "openid.return_to",
    "openid.response_nonce",
    "openid.assoc_handle",
    "openid.signed",
    "openid.sig",
)

IDENTITY_PATTERN = re.compile(
    r"https://steamcommunity\.com/openid/id/7656119[0-9]{10}/?"
)
STEAM_RESPONSE_PATTERN = re.compile(r"ns:([^\n]+)\nis_valid:([^\n]+)\n")

NONCE_TIMESTAMP_LENGTH = 20
NONCE_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def collect_query(pairs: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """
    Build a query mapping from raw key/value pairs.

    A key that appears more than once keeps every value in a list, so a
    polluted query never passes validation.

    Examples:
        >>> collect_query([("openid.mode", "id_res")])
        {'openid.mode': 'id_res'}
        >>> collect_query([("openid.sig", "a"), ("openid.sig", "b")])
        {'openid.sig': ['a', 'b']}
    """
    query: dict[str, Any] = {}
    for key, value in pairs:
        if key not in query:
            query[key] = value
        elif isinstance(query[key], list):
            query[key].append(value)
        else:
            query[key] = [query[key], value]
    return query


def has_auth_query(query: Mapping[str, Any]) -> bool:
    """Return True if the query is a positive assertion callback."""
    return query.get("openid.mode") == "id_res"


def is_valid_identity(identity: Any) -> bool:
    """
    Check that an identity is a Steam community OpenID URL.

    Only individual-account 64-bit IDs (prefix 7656119) are accepted.

    Examples:
        >>> is_valid_identity("https://steamcommunity.com/openid/id/76561197960435530")
        True
        >>> is_valid_identity("https://steamcommunity.com/openid/id/123")
        False
    """
    return isinstance(identity, str) and IDENTITY_PATTERN.fullmatch(identity) is not None


def is_query_valid(query: Mapping[str, Any], return_url: str) -> bool:
    """
    Validate an assertion query before asking Steam to confirm it.

    Args:
        query: Query parameters from the callback request
        return_url: Configured callback URL, must equal openid.return_to

    Returns:
        True only if every structural and semantic check passes
    """
    for key in OPENID_QUERY_PROPS:
        value = query.get(key)
        if not isinstance(value, str) or not value:
            return False

    if len(query) != len(OPENID_QUERY_PROPS):
        return False

    if query["openid.ns"] != OPENID_NS:
        return False
    if query["openid.op_endpoint"] != STEAM_LOGIN_ENDPOINT:
        return False
    if query["openid.claimed_id"] != query["openid.identity"]:
        return False
    if not is_valid_identity(query["openid.claimed_id"]):
        return False
    if query["openid.assoc_handle"] != STEAM_ASSOC_HANDLE:
        return False
    if query["openid.signed"] != STEAM_SIGNED_FIELDS:
        return False

    return query["openid.return_to"] == return_url


def parse_nonce_timestamp(nonce: str) -> datetime | None:
    """Parse the UTC timestamp that prefixes an OpenID response nonce."""
    try:
        parsed = datetime.strptime(nonce[:NONCE_TIMESTAMP_LENGTH], NONCE_TIMESTAMP_FORMAT)
    except (TypeError, ValueError):
        return None
    return parsed.replace(tzinfo=timezone.utc)


def has_nonce_expired(
    query: Mapping[str, Any],
    max_nonce_age: int | None,
    now: datetime | None = None,
) -> bool:
    """
    Check the response nonce against the freshness window.

    Args:
        query: Validated assertion query
        max_nonce_age: Maximum age in seconds, None disables the check
        now: Current time, defaults to wall-clock UTC

    Returns:
        True if the nonce is older than max_nonce_age or its timestamp
        cannot be parsed
    """
    if max_nonce_age is None:
        return False

    issued = parse_nonce_timestamp(query.get("openid.response_nonce") or "")
    if issued is None:
        return True

    now = now or datetime.now(timezone.utc)
    elapsed = int((now - issued).total_seconds())
    return elapsed > max_nonce_age


def get_steam_id(query: Mapping[str, Any]) -> str:
    """
    Extract the 64-bit Steam ID from openid.claimed_id.

    Examples:
        >>> get_steam_id({"openid.claimed_id": "https://steamcommunity.com/openid/id/76561197960435530/"})
        '76561197960435530'
    """
    claimed_id: str = query["openid.claimed_id"]
    steamid = claimed_id.removeprefix(STEAM_IDENTITY_ENDPOINT)
    return steamid.removesuffix("/")


def is_steam_response_valid(response: Any) -> bool:
    """
    Check a check_authentication response body.

    The body must be exactly "ns:<namespace>\\nis_valid:true\\n".
    """
    if not isinstance(response, str):
        return False

    match = STEAM_RESPONSE_PATTERN.fullmatch(response)
    if not match:
        return False

    if match.group(1) != OPENID_NS:
        return False
    return match.group(2) == "true"
