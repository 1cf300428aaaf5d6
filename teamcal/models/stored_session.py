"""
Stored session model - server-side session rows for DatabaseSessionStore.

The browser only holds the signed session id; everything else, OAuth
tokens included, lives in the `data` column.
"""

from sqlalchemy import Float, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from teamcal.db.base import Base


class StoredSession(Base):
    """SQLAlchemy ORM model for the 'sessions' table."""

    __tablename__ = "sessions"

    # sid: opaque session id (the unsigned cookie value)
    sid: Mapped[str] = mapped_column(String(128), primary_key=True)

    # data: SessionData.model_dump() - {"user": {...} | null}
    data: Mapped[dict] = mapped_column(JSON, nullable=False)

    # expires_at: epoch seconds; rows past this are treated as absent
    # Plain float so SQLite and PostgreSQL compare it the same way
    expires_at: Mapped[float] = mapped_column(Float, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<StoredSession(sid='{self.sid[:8]}...', expires_at={self.expires_at})>"
