"""Resolve a username to TikTok's internal secUid."""

import json
from typing import Any, Dict

import httpx
from bs4 import BeautifulSoup

from tiksnap.core.exceptions import UserLookupError, UserNotFoundError
from tiksnap.utils.config import (
    TIKTOK_BASE_URL,
    USER_AGENT,
    USER_NOT_FOUND_STATUS_CODES,
)
from tiksnap.utils.logging import get_logger

logger = get_logger(__name__)

REHYDRATION_SCRIPT_ID = "__UNIVERSAL_DATA_FOR_REHYDRATION__"


def _get_headers() -> dict:
    return {
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate, br",
        "Upgrade-Insecure-Requests": "1",
    }


def extract_user_detail(html: str) -> Dict[str, Any]:
    """
    Extract the ``webapp.user-detail`` scope from a profile page.

    Raises:
        UserLookupError: If the page carries no parseable rehydration data
    """
    soup = BeautifulSoup(html, "html.parser")
    script = soup.find("script", id=REHYDRATION_SCRIPT_ID)
    if script is None or not script.string:
        raise UserLookupError("Profile page has no rehydration data. TikTok may have served a challenge page.")

    try:
        data = json.loads(script.string)
    except json.JSONDecodeError as e:
        raise UserLookupError(f"Invalid rehydration JSON: {e}")

    detail = (data.get("__DEFAULT_SCOPE__") or {}).get("webapp.user-detail")
    if not isinstance(detail, dict):
        raise UserLookupError("Rehydration data has no user detail")
    return detail


async def lookup_user(client: httpx.AsyncClient, username: str) -> str:
    """
    Look up the secUid of a user from their profile page.

    Args:
        client: HTTP client configured for the session
        username: Username without ``@``

    Returns:
        The user's secUid

    Raises:
        UserNotFoundError: If the profile does not exist
        UserLookupError: If the lookup fails for any other reason
    """
    url = f"{TIKTOK_BASE_URL}/@{username}"
    logger.info(f"Looking up user: @{username}")

    try:
        response = await client.get(url, headers=_get_headers())
    except httpx.HTTPError as e:
        raise UserLookupError(f"HTTP error: {e}")

    if response.status_code in (400, 404):
        raise UserNotFoundError()
    if response.status_code != 200:
        raise UserLookupError(f"HTTP {response.status_code}")

    detail = extract_user_detail(response.text)
    if detail.get("statusCode") in USER_NOT_FOUND_STATUS_CODES:
        raise UserNotFoundError()

    user = (detail.get("userInfo") or {}).get("user") or {}
    sec_uid = user.get("secUid")
    if not sec_uid:
        raise UserNotFoundError()

    logger.debug(f"Resolved @{username} to secUid {sec_uid[:16]}...")
    return sec_uid
