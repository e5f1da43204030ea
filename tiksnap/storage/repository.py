"""Repository layer for database operations."""

from typing import List

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tiksnap.models.schema import FetchHistory
from tiksnap.utils.logging import get_logger

logger = get_logger(__name__)


class FetchHistoryRepository:
    """Repository for FetchHistory operations."""

    @staticmethod
    async def create(session: AsyncSession, history_data: dict) -> FetchHistory:
        """
        Create a new fetch history record.

        Args:
            session: Database session
            history_data: Fetch history data dictionary

        Returns:
            FetchHistory instance
        """
        history = FetchHistory(**history_data)
        session.add(history)
        await session.flush()
        logger.debug(f"Created fetch history record: @{history.username} ({history.status})")
        return history

    @staticmethod
    async def get_recent(session: AsyncSession, limit: int = 50) -> List[FetchHistory]:
        """
        Get recent fetch history records, newest first.

        Args:
            session: Database session
            limit: Maximum number of records to return

        Returns:
            List of FetchHistory instances
        """
        result = await session.execute(
            select(FetchHistory)
            .order_by(desc(FetchHistory.started_at), desc(FetchHistory.id))
            .limit(limit)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_by_username(session: AsyncSession, username: str, limit: int = 50) -> List[FetchHistory]:
        """Get fetch history for one username, newest first."""
        result = await session.execute(
            select(FetchHistory)
            .where(FetchHistory.username == username)
            .order_by(desc(FetchHistory.started_at), desc(FetchHistory.id))
            .limit(limit)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_stats(session: AsyncSession) -> dict:
        """
        Get overall fetch statistics.

        Args:
            session: Database session

        Returns:
            Dictionary with total fetches, failed fetches and posts fetched
        """
        result = await session.execute(
            select(
                func.count(FetchHistory.id).label("total_fetches"),
                func.sum(FetchHistory.total_posts).label("total_posts"),
            )
        )
        stats = result.one()

        failed = await session.execute(
            select(func.count(FetchHistory.id)).where(FetchHistory.status != "success")
        )

        return {
            "total_fetches": stats.total_fetches or 0,
            "total_posts": stats.total_posts or 0,
            "failed_fetches": failed.scalar_one() or 0,
        }
