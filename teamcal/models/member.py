"""
Member model - one team member whose calendar can be queried.
Used only by SqlMemberRepository; the in-memory roster keeps plain schemas.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from teamcal.db.base import Base


class MemberRecord(Base):
    """SQLAlchemy ORM model for the 'members' table."""

    __tablename__ = "members"
    # AUTOINCREMENT on SQLite so ids are never reused
    __table_args__ = {"sqlite_autoincrement": True}

    # ---------------------------------------------------------------------------
    # PRIMARY KEY
    # ---------------------------------------------------------------------------
    # id: auto-incremented, never reused (ids only ever grow)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ---------------------------------------------------------------------------
    # MEMBER INFORMATION
    # ---------------------------------------------------------------------------
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)

    # calendar_id: Google calendar address, usually the member's email
    calendar_id: Mapped[str] = mapped_column(String(320), nullable=False)

    def __repr__(self) -> str:
        return f"<MemberRecord(id={self.id}, email='{self.email}')>"
