"""
Member repositories - the roster of people whose calendars can be queried.

Handlers depend on the MemberRepository interface only; which backend is
used is decided once in the app factory (MEMBER_STORE setting).

Ids are assigned by the repository and only ever grow: a new member's id
is strictly greater than every id handed out before.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from teamcal.core.config import SeedMember
from teamcal.models.member import MemberRecord
from teamcal.schemas.member import Member


logger = logging.getLogger("teamcal.services.member_repository")


class MemberRepository(ABC):
    """List / look up / insert. There is no update or delete path."""

    @abstractmethod
    async def list(self) -> List[Member]:
        ...

    @abstractmethod
    async def get(self, member_id: int) -> Optional[Member]:
        ...

    @abstractmethod
    async def insert(self, name: str, email: str, calendar_id: str) -> Member:
        ...


class InMemoryMemberRepository(MemberRepository):
    """
    Roster held in process memory; lost on restart.

    No awaits happen between reading and bumping the id counter, so two
    concurrent inserts on the event loop cannot get the same id.
    """

    def __init__(self, seed: Iterable[SeedMember] = ()):
        self._members: List[Member] = []
        self._next_id = 1
        for entry in seed:
            self._append(entry.name, entry.email, entry.calendarId)

    def _append(self, name: str, email: str, calendar_id: str) -> Member:
        member = Member(id=self._next_id, name=name, email=email, calendarId=calendar_id)
        self._next_id += 1
        self._members.append(member)
        return member

    async def list(self) -> List[Member]:
        return list(self._members)

    async def get(self, member_id: int) -> Optional[Member]:
        for member in self._members:
            if member.id == member_id:
                return member
        return None

    async def insert(self, name: str, email: str, calendar_id: str) -> Member:
        member = self._append(name, email, calendar_id)
        logger.info(f"Added member {member.id} ({member.email})")
        return member


class SqlMemberRepository(MemberRepository):
    """Roster in the "members" table; ids come from the autoincrement key."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @staticmethod
    def _to_schema(record: MemberRecord) -> Member:
        return Member(id=record.id, name=record.name, email=record.email, calendarId=record.calendar_id)

    def _list_sync(self) -> List[Member]:
        with self._session_factory() as db:
            records = db.scalars(select(MemberRecord).order_by(MemberRecord.id)).all()
            return [self._to_schema(r) for r in records]

    def _get_sync(self, member_id: int) -> Optional[Member]:
        with self._session_factory() as db:
            record = db.get(MemberRecord, member_id)
            return self._to_schema(record) if record else None

    def _insert_sync(self, name: str, email: str, calendar_id: str) -> Member:
        with self._session_factory() as db:
            record = MemberRecord(name=name, email=email, calendar_id=calendar_id)
            db.add(record)
            db.commit()
            db.refresh(record)
            return self._to_schema(record)

    def seed_if_empty(self, seed: Iterable[SeedMember]) -> int:
        """Insert the configured roster into an empty table. Returns rows added."""
        entries = list(seed)
        with self._session_factory() as db:
            if not entries or db.scalars(select(MemberRecord.id).limit(1)).first() is not None:
                return 0
            db.add_all(
                MemberRecord(name=e.name, email=e.email, calendar_id=e.calendarId) for e in entries
            )
            db.commit()
        logger.info(f"Seeded {len(entries)} members")
        return len(entries)

    async def list(self) -> List[Member]:
        return await run_in_threadpool(self._list_sync)

    async def get(self, member_id: int) -> Optional[Member]:
        return await run_in_threadpool(self._get_sync, member_id)

    async def insert(self, name: str, email: str, calendar_id: str) -> Member:
        member = await run_in_threadpool(self._insert_sync, name, email, calendar_id)
        logger.info(f"Added member {member.id} ({member.email})")
        return member
