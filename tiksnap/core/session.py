"""Session context for a single fetch call."""

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import httpx

from tiksnap.core.proxy import ProxyKind
from tiksnap.utils.config import TIKTOK_BASE_URL, USER_AGENT
from tiksnap.utils.logging import get_logger

logger = get_logger(__name__)

CookieInput = Optional[Union[str, Sequence[str]]]


def normalize_username(username: str) -> str:
    """Strip whitespace and the ``@`` prefix from a username."""
    return (username or "").strip().removeprefix("@")


def join_cookies(cookie: CookieInput) -> str:
    """Join a cookie string or list of cookie strings into one header value."""
    if not cookie:
        return ""
    if isinstance(cookie, str):
        return cookie
    return "; ".join(cookie)


@dataclass(frozen=True)
class FetchSession:
    """Immutable per-call context shared by every request of one fetch."""
    username: str
    cookie_header: str = ""
    proxy: Optional[str] = None
    proxy_kind: ProxyKind = ProxyKind.NONE

    @classmethod
    def create(cls, username: str, cookie_header: str = "", proxy: Optional[str] = None) -> "FetchSession":
        return cls(
            username=normalize_username(username),
            cookie_header=cookie_header,
            proxy=proxy,
            proxy_kind=ProxyKind.from_url(proxy),
        )

    def with_cookies(self, cookie_header: str) -> "FetchSession":
        return FetchSession(
            username=self.username,
            cookie_header=cookie_header,
            proxy=self.proxy,
            proxy_kind=self.proxy_kind,
        )


def _profile_headers() -> dict:
    return {
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    }


async def bootstrap_cookies(
    client: httpx.AsyncClient,
    username: str,
    supplied_cookie: CookieInput = None,
) -> str:
    """
    Obtain a cookie header for the fetch.

    A caller-supplied cookie always wins and no request is made. Otherwise
    the profile page is requested once and its ``Set-Cookie`` headers are
    reduced to ``name=value`` pairs.

    Args:
        client: HTTP client (already configured with the session proxy)
        username: Target username, with or without ``@``
        supplied_cookie: Cookie string or list of cookie strings

    Returns:
        Cookie header value, empty when nothing could be obtained
    """
    if supplied_cookie:
        return join_cookies(supplied_cookie)

    url = f"{TIKTOK_BASE_URL}/@{normalize_username(username)}"
    try:
        response = await client.get(url, headers=_profile_headers())
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Could not obtain session cookies from profile page: {e}")
        return ""

    pairs = [
        raw.split(";", 1)[0].strip()
        for raw in response.headers.get_list("set-cookie")
    ]
    cookie_header = "; ".join(pair for pair in pairs if pair)
    logger.debug(f"Bootstrapped {len(pairs)} cookie(s) for @{normalize_username(username)}")
    return cookie_header
