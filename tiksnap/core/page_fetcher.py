"""Signed requests for single pages of a user's post list."""

import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from tiksnap.core.exceptions import (
    EmptyResponseError,
    PostsNotFoundError,
    RateLimitedError,
    TransientFetchError,
)
from tiksnap.core.session import FetchSession
from tiksnap.core.signing import RequestSigner, blank_signer
from tiksnap.utils.config import (
    FINGERPRINT_PARAMS,
    NOT_FOUND_STATUS_CODE,
    SEC_CH_UA,
    TIKTOK_BASE_URL,
    TIKTOK_ITEM_LIST_URL,
    USER_AGENT,
)
from tiksnap.utils.logging import get_logger

logger = get_logger(__name__)

MS_TOKEN_PATTERN = re.compile(r"msToken=([^;]+)")


@dataclass(frozen=True)
class PageResult:
    """One decoded page of the item list."""
    items: List[Dict[str, Any]] = field(default_factory=list)
    has_more: bool = False
    next_cursor: int = 0


def extract_ms_token(cookie_header: str) -> Optional[str]:
    """Return the ``msToken`` value embedded in a cookie header, if any."""
    match = MS_TOKEN_PATTERN.search(cookie_header or "")
    return match.group(1) if match else None


def build_page_params(
    sec_uid: str,
    cursor: int,
    count: int,
    cookie_header: str = "",
    now: Optional[float] = None,
) -> Dict[str, str]:
    """
    Build the query fields for one item list request.

    Args:
        sec_uid: Target user's internal identifier
        cursor: Pagination cursor returned by the previous page (0 for the first)
        count: Number of items requested
        cookie_header: Session cookies, searched for an ``msToken``
        now: Unix timestamp override

    Returns:
        Ordered mapping of query fields
    """
    if now is None:
        now = time.time()

    params: Dict[str, str] = {"WebIdLastTime": str(int(now))}
    params.update(FINGERPRINT_PARAMS)
    params["count"] = str(count)
    params["cursor"] = str(cursor)
    params["secUid"] = sec_uid

    ms_token = extract_ms_token(cookie_header)
    if ms_token:
        params["msToken"] = ms_token

    return params


def build_signed_url(params: Dict[str, str], signer: RequestSigner) -> str:
    """Compose the item list URL and append the signature computed over it."""
    base_url = f"{TIKTOK_ITEM_LIST_URL}?{urlencode(params)}"
    signature = signer(base_url, USER_AGENT)
    return f"{base_url}&X-Bogus={signature}"


def _api_headers(cookie_header: str) -> dict:
    headers = {
        "User-Agent": USER_AGENT,
        "Accept": "*/*",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate, br",
        "Referer": f"{TIKTOK_BASE_URL}/",
        "Sec-Ch-Ua": SEC_CH_UA,
        "Sec-Ch-Ua-Mobile": "?0",
        "Sec-Ch-Ua-Platform": '"Windows"',
        "Sec-Fetch-Dest": "empty",
        "Sec-Fetch-Mode": "cors",
        "Sec-Fetch-Site": "same-origin",
    }
    if cookie_header:
        headers["Cookie"] = cookie_header
    return headers


def _decode_body(response: httpx.Response) -> Optional[Dict[str, Any]]:
    """Decode a JSON object body, returning None for empty or non-JSON bodies."""
    if not response.content or not response.content.strip():
        return None
    try:
        data = response.json()
    except ValueError:
        logger.debug(f"Non-JSON body ({len(response.content)} bytes): {response.text[:200]}")
        return None
    return data if isinstance(data, dict) else None


def parse_page(data: Dict[str, Any]) -> PageResult:
    """
    Convert a decoded item list body into a PageResult.

    ``hasMore`` becomes a strict bool and ``cursor`` a non-negative int,
    reset to 0 when there are no more pages.
    """
    items = data.get("itemList") or []
    if not isinstance(items, list):
        items = []

    has_more = bool(data.get("hasMore"))
    next_cursor = 0
    if has_more:
        try:
            next_cursor = max(0, int(data.get("cursor") or 0))
        except (TypeError, ValueError):
            logger.warning(f"Unexpected cursor value: {data.get('cursor')!r}")
            next_cursor = 0

    return PageResult(items=list(items), has_more=has_more, next_cursor=next_cursor)


class PageFetcher:
    """Fetches single pages of one user's posts within a fetch session."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        session: FetchSession,
        sec_uid: str,
        signer: RequestSigner = blank_signer,
    ):
        """
        Initialize page fetcher.

        Args:
            client: HTTP client configured for the session
            session: Fetch session (cookies and proxy)
            sec_uid: Target user's internal identifier
            signer: Request signer producing the X-Bogus token
        """
        self.client = client
        self.session = session
        self.sec_uid = sec_uid
        self.signer = signer
        self.request_count = 0

    async def fetch(self, cursor: int = 0, count: int = 35) -> PageResult:
        """
        Issue one signed request for a page of posts.

        Args:
            cursor: Pagination cursor
            count: Number of items requested

        Returns:
            PageResult

        Raises:
            PostsNotFoundError: HTTP 400 or a not-found status code in the body
            RateLimitedError: HTTP 429
            EmptyResponseError: Empty or unusable body
            TransientFetchError: Any other network or HTTP failure
        """
        params = build_page_params(self.sec_uid, cursor, count, self.session.cookie_header)
        url = build_signed_url(params, self.signer)

        self.request_count += 1
        logger.debug(f"Requesting page cursor={cursor} count={count} for @{self.session.username}")

        try:
            response = await self.client.get(url, headers=_api_headers(self.session.cookie_header))
        except httpx.HTTPError as e:
            raise TransientFetchError(f"Request failed: {e}")

        if response.status_code == 400:
            raise PostsNotFoundError()
        if response.status_code == 429:
            raise RateLimitedError("Rate limited")

        data = _decode_body(response)
        if data is not None and data.get("statusCode") == NOT_FOUND_STATUS_CODE:
            raise PostsNotFoundError()

        if not 200 <= response.status_code < 300:
            raise TransientFetchError(f"HTTP {response.status_code}", status_code=response.status_code)
        if not data:
            raise EmptyResponseError("Empty response")

        return parse_page(data)
