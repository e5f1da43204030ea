#!/usr/bin/env python3
"""
View TikSnap fetch history
"""

import asyncio
import sys
from datetime import datetime
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from tiksnap.storage.database import close_db, get_async_session, init_db
from tiksnap.storage.repository import FetchHistoryRepository


def format_datetime(dt: datetime) -> str:
    """Format datetime for display."""
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def format_duration(started_at: datetime, completed_at: datetime) -> str:
    """Format duration between two datetimes."""
    seconds = int((completed_at - started_at).total_seconds())

    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    else:
        return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


def print_records(records) -> None:
    for record in records:
        status = "✅" if record.success else "❌"
        duration = format_duration(record.started_at, record.completed_at)

        print(f"{status} @{record.username}")
        print(f"   Time: {format_datetime(record.started_at)} ({duration})")
        print(f"   Posts: {record.total_posts}" + (f" (limit {record.post_limit})" if record.post_limit else ""))
        print(f"   Cookie supplied: {'yes' if record.supplied_cookie else 'no'}, proxy: {'yes' if record.used_proxy else 'no'}")

        if not record.success and record.error_message:
            print(f"   Error: {record.error_message[:100]}")

        print()


async def view_recent_history(limit: int = 50):
    """View recent fetch history."""
    async with get_async_session() as session:
        history = await FetchHistoryRepository.get_recent(session, limit=limit)

    if not history:
        print("📭 No fetch history found")
        return

    print(f"\n📊 Recent fetches (showing {len(history)} records)\n")
    print("=" * 80)
    print_records(history)


async def view_user_history(username: str, limit: int = 50):
    """View fetch history for one username."""
    username = username.replace("@", "")
    async with get_async_session() as session:
        history = await FetchHistoryRepository.get_by_username(session, username, limit=limit)

    if not history:
        print(f"📭 No fetch history for @{username}")
        return

    print(f"\n📊 Fetches for @{username} ({len(history)} records)\n")
    print("=" * 80)
    print_records(history)


async def view_stats():
    """View overall statistics."""
    async with get_async_session() as session:
        stats = await FetchHistoryRepository.get_stats(session)

    print("\n📈 Fetch statistics\n")
    print(f"   Total fetches: {stats['total_fetches']}")
    print(f"   Failed fetches: {stats['failed_fetches']}")
    print(f"   Posts fetched: {stats['total_posts']}")
    print()


async def main():
    init_db()
    try:
        if len(sys.argv) > 1:
            command = sys.argv[1]
            if command == "stats":
                await view_stats()
            elif command == "user" and len(sys.argv) > 2:
                await view_user_history(sys.argv[2])
            else:
                print("Usage: python scripts/view_history.py [stats | user <username>]")
        else:
            await view_recent_history()
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
