"""Shared test data."""

from datetime import datetime, timezone

from steam_openid_verifier.query import (
    OPENID_NS,
    STEAM_ASSOC_HANDLE,
    STEAM_LOGIN_ENDPOINT,
    STEAM_SIGNED_FIELDS,
)

RETURN_URL = "https://example.com/auth/steam"
STEAMID = "76561197960435530"
CLAIMED_ID = f"https://steamcommunity.com/openid/id/{STEAMID}"
VALID_RESPONSE = f"ns:{OPENID_NS}\nis_valid:true\n"
INVALID_RESPONSE = f"ns:{OPENID_NS}\nis_valid:false\n"


def iso_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def make_query(**changes: str) -> dict[str, str]:
    """Valid assertion query, with keys given as e.g. openid_mode="..."."""
    query = {
        "openid.ns": OPENID_NS,
        "openid.mode": "id_res",
        "openid.op_endpoint": STEAM_LOGIN_ENDPOINT,
        "openid.claimed_id": CLAIMED_ID,
        "openid.identity": CLAIMED_ID,
        "openid.return_to": RETURN_URL,
        "openid.response_nonce": f"{iso_timestamp(datetime.now(timezone.utc))}8df86bac92ad1addaf3735a5aabdc6e2a7",
        "openid.assoc_handle": STEAM_ASSOC_HANDLE,
        "openid.signed": STEAM_SIGNED_FIELDS,
        "openid.sig": "dc6e2a79de2c6aceac495ad5f4c6b6e0bfe30",
    }
    for key, value in changes.items():
        query[key.replace("openid_", "openid.", 1)] = value
    return query
