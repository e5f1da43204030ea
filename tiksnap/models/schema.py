"""SQLAlchemy ORM models for TikSnap."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class FetchHistory(Base):
    """One call to fetch a user's posts."""

    __tablename__ = "fetch_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Target
    username: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    sec_uid: Mapped[Optional[str]] = mapped_column(String(200))

    # Request options
    post_limit: Mapped[Optional[int]] = mapped_column(Integer)
    used_proxy: Mapped[bool] = mapped_column(Boolean, default=False)
    supplied_cookie: Mapped[bool] = mapped_column(Boolean, default=False)

    # Outcome
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # 'success' or 'error'
    total_posts: Mapped[int] = mapped_column(Integer, default=0)
    error_message: Mapped[Optional[str]] = mapped_column(Text)

    # Timing
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @property
    def success(self) -> bool:
        return self.status == "success"

    def __repr__(self) -> str:
        return f"<FetchHistory(username='{self.username}', status='{self.status}', posts={self.total_posts})>"
