"""Service layer orchestrating a user-posts fetch."""

from datetime import datetime
from typing import Awaitable, Callable, Optional

import httpx

from tiksnap.core.exceptions import UserLookupError, UserNotFoundError
from tiksnap.core.page_fetcher import PageFetcher, PageResult
from tiksnap.core.paginator import paginate
from tiksnap.core.proxy import build_client
from tiksnap.core.result_mapper import map_posts
from tiksnap.core.retry import DEFAULT_RETRY_POLICY, OnRetryFn, RetryPolicy, SleepFn, with_retry
from tiksnap.core.session import CookieInput, FetchSession, bootstrap_cookies
from tiksnap.core.signing import RequestSigner, blank_signer
from tiksnap.core.user_lookup import lookup_user
from tiksnap.models.data_models import FetchFailure, FetchOutcome, FetchSuccess
from tiksnap.storage.database import get_async_session
from tiksnap.storage.repository import FetchHistoryRepository
from tiksnap.utils.logging import get_logger

logger = get_logger(__name__)

UserLookupFn = Callable[[httpx.AsyncClient, str], Awaitable[str]]


class PostsService:
    """
    Fetches all posts of a TikTok user.

    Each call to ``get_user_posts`` owns its own HTTP client, session,
    cursor and accumulator, so calls for different users may run
    concurrently.
    """

    def __init__(
        self,
        signer: Optional[RequestSigner] = None,
        user_lookup: UserLookupFn = lookup_user,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        sleep: Optional[SleepFn] = None,
        on_retry: Optional[OnRetryFn] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        record_history: bool = False,
    ):
        """
        Initialize service.

        Args:
            signer: X-Bogus signer; without one requests go out with a blank signature
            user_lookup: Coroutine resolving a username to a secUid
            retry_policy: Backoff policy for page requests
            sleep: Awaitable sleep used between retries (default: asyncio.sleep)
            on_retry: Observer called before each retry wait
            transport: httpx transport override, mainly for tests
            record_history: Save each call to the fetch history database
        """
        if signer is None:
            logger.warning("No request signer configured; TikTok will likely return empty pages")
            signer = blank_signer
        self.signer = signer
        self.user_lookup = user_lookup
        self.retry_policy = retry_policy
        self.sleep = sleep
        self.on_retry = on_retry
        self.transport = transport
        self.record_history = record_history

    async def get_user_posts(
        self,
        username: str,
        cookie: CookieInput = None,
        proxy: Optional[str] = None,
        post_limit: Optional[int] = None,
    ) -> FetchOutcome:
        """
        Fetch a user's posts.

        Args:
            username: TikTok username, with or without ``@``
            cookie: Browser cookie string or list of cookie strings (recommended)
            proxy: ``http(s)://`` or ``socks5://`` proxy URL
            post_limit: Maximum number of posts, None or 0 for all

        Returns:
            FetchSuccess with mapped posts, or FetchFailure. Never raises for
            fetch failures.
        """
        started_at = datetime.utcnow()
        session = FetchSession.create(username, proxy=proxy)
        sec_uid: Optional[str] = None

        logger.info(f"Fetching posts for @{session.username} (limit={post_limit or 'all'})")

        try:
            async with build_client(session.proxy, session.proxy_kind, self.transport) as client:
                cookie_header = await bootstrap_cookies(client, session.username, cookie)
                session = session.with_cookies(cookie_header)

                sec_uid = await self.user_lookup(client, session.username)
                outcome = await self._fetch_all(client, session, sec_uid, post_limit)
        except UserNotFoundError as e:
            outcome = FetchFailure(message=str(e))
        except UserLookupError as e:
            logger.error(f"User lookup failed for @{session.username}: {e}")
            outcome = FetchFailure(message=str(e) or "Unknown error")
        except Exception as e:
            logger.exception(f"Unexpected error fetching posts for @{session.username}")
            outcome = FetchFailure(message=str(e) or "Unknown error")

        if isinstance(outcome, FetchSuccess):
            logger.info(f"✓ Fetched {outcome.total} post(s) for @{session.username}")
        else:
            logger.warning(f"Fetch for @{session.username} failed: {outcome.message}")

        if self.record_history:
            await self._save_fetch_history(
                session, sec_uid, outcome, post_limit, bool(cookie), started_at
            )
        return outcome

    async def _fetch_all(
        self,
        client: httpx.AsyncClient,
        session: FetchSession,
        sec_uid: str,
        post_limit: Optional[int],
    ) -> FetchOutcome:
        fetcher = PageFetcher(client, session, sec_uid, self.signer)

        async def fetch_page(cursor: int, count: int) -> PageResult:
            retry_kwargs = {"on_retry": self.on_retry}
            if self.sleep is not None:
                retry_kwargs["sleep"] = self.sleep
            return await with_retry(
                lambda: fetcher.fetch(cursor, count),
                self.retry_policy,
                **retry_kwargs,
            )

        outcome = await paginate(fetch_page, post_limit)
        logger.debug(f"Issued {fetcher.request_count} page request(s) for @{session.username}")

        if isinstance(outcome, FetchSuccess):
            posts = map_posts(outcome.records)
            return FetchSuccess(records=posts, total=len(posts))
        return outcome

    async def _save_fetch_history(
        self,
        session: FetchSession,
        sec_uid: Optional[str],
        outcome: FetchOutcome,
        post_limit: Optional[int],
        supplied_cookie: bool,
        started_at: datetime,
    ) -> None:
        """Save the fetch to the history database. Failures are only logged."""
        try:
            async with get_async_session() as db:
                history_data = {
                    "username": session.username,
                    "sec_uid": sec_uid,
                    "post_limit": post_limit or None,
                    "used_proxy": session.proxy is not None,
                    "supplied_cookie": supplied_cookie,
                    "status": outcome.status,
                    "total_posts": outcome.total if isinstance(outcome, FetchSuccess) else 0,
                    "error_message": outcome.message if isinstance(outcome, FetchFailure) else None,
                    "started_at": started_at,
                    "completed_at": datetime.utcnow(),
                }
                await FetchHistoryRepository.create(db, history_data)
        except Exception as e:
            logger.error(f"Failed to save fetch history: {e}")


async def get_user_posts(
    username: str,
    cookie: CookieInput = None,
    proxy: Optional[str] = None,
    post_limit: Optional[int] = None,
    signer: Optional[RequestSigner] = None,
) -> dict:
    """
    Fetch a user's posts and return the outcome as a plain dictionary.

    Returns:
        ``{"status": "success", "result": [...], "totalPosts": n}`` or
        ``{"status": "error", "message": "..."}``
    """
    service = PostsService(signer=signer)
    outcome = await service.get_user_posts(username, cookie=cookie, proxy=proxy, post_limit=post_limit)
    return outcome.to_dict()
