"""Proxy selection for outgoing requests."""

from enum import Enum
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Optional

import httpx

from tiksnap.utils.config import CONNECT_TIMEOUT, READ_TIMEOUT


class ProxyKind(Enum):
    """How requests leave the machine."""
    NONE = "none"
    HTTP = "http"
    SOCKS = "socks"

    @classmethod
    def from_url(cls, url: Optional[str]) -> "ProxyKind":
        """
        Resolve the proxy kind from a proxy URL.

        ``http://`` and ``https://`` select an HTTP(S) tunnelling proxy,
        ``socks*://`` a SOCKS proxy. Anything else means a direct connection.
        """
        if not url:
            return cls.NONE
        lowered = url.strip().lower()
        if lowered.startswith("http"):
            return cls.HTTP
        if lowered.startswith("socks"):
            return cls.SOCKS
        return cls.NONE


def build_client(
    proxy: Optional[str] = None,
    proxy_kind: ProxyKind = ProxyKind.NONE,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the HTTP client used for one fetch call.

    Args:
        proxy: Proxy URL, ignored when ``proxy_kind`` is NONE
        proxy_kind: Resolved proxy kind
        transport: Optional transport override (used by tests)

    Returns:
        Configured httpx.AsyncClient
    """
    kwargs = {
        "timeout": httpx.Timeout(CONNECT_TIMEOUT, read=READ_TIMEOUT),
        "follow_redirects": True,
        # Never store Set-Cookie; the session cookie header is the only Cookie source
        "cookies": CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
    }
    if transport is not None:
        kwargs["transport"] = transport
    elif proxy_kind is not ProxyKind.NONE and proxy:
        # SOCKS URLs need the httpx[socks] extra; httpx picks the proxy
        # implementation from the URL scheme.
        kwargs["proxy"] = proxy.strip()
    return httpx.AsyncClient(**kwargs)
