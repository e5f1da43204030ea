"""Cursor-driven pagination over a user's post list."""

from typing import Any, Awaitable, Callable, Dict, List, Optional

from tiksnap.core.exceptions import FetchError
from tiksnap.core.page_fetcher import PageResult
from tiksnap.models.data_models import FetchFailure, FetchOutcome, FetchSuccess
from tiksnap.utils.config import EMPTY_RESULT_MESSAGE, FIRST_PAGE_COUNT, PAGE_COUNT
from tiksnap.utils.logging import get_logger

logger = get_logger(__name__)

# fetch_fn(cursor, count) -> PageResult, already wrapped in the retry policy
PageFetchFn = Callable[[int, int], Awaitable[PageResult]]


def page_size(page: int) -> int:
    """Items requested for a 1-based page number."""
    return FIRST_PAGE_COUNT if page == 1 else PAGE_COUNT


async def paginate(
    fetch_fn: PageFetchFn,
    post_limit: Optional[int] = None,
) -> FetchOutcome:
    """
    Fetch pages sequentially until the server reports no more posts.

    Records are kept in arrival order without deduplication; the cursor
    returned by each page is the only source of progress. When
    ``post_limit`` is set, no further page is requested once it is reached
    and the result is trimmed to exactly ``post_limit`` records.

    Args:
        fetch_fn: Page fetch coroutine (with retries applied)
        post_limit: Maximum number of records, None or 0 for no limit

    Returns:
        FetchSuccess with the raw records, or FetchFailure. Never raises
        for fetch failures.
    """
    limit = post_limit if post_limit and post_limit > 0 else None

    records: List[Dict[str, Any]] = []
    cursor = 0
    page = 1
    has_more = True

    while has_more:
        count = page_size(page)
        try:
            result = await fetch_fn(cursor, count)
        except FetchError as e:
            logger.error(f"Page {page} failed after retries: {e}")
            return FetchFailure(message=str(e) or "Unable to fetch posts")

        records.extend(result.items)
        has_more = result.has_more
        cursor = result.next_cursor if has_more else 0
        logger.debug(
            f"Page {page}: {len(result.items)} item(s), total {len(records)}, "
            f"has_more={has_more}, cursor={cursor}"
        )
        page += 1

        if limit is not None and len(records) >= limit:
            has_more = False

    if not records:
        return FetchFailure(message=EMPTY_RESULT_MESSAGE)

    if limit is not None:
        records = records[:limit]
    return FetchSuccess(records=records, total=len(records))
