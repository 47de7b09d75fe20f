"""
Record Store — Persistence for debates and user profiles.

WHAT THIS DOES:
Implements the engine's storage collaborators twice:
- SQL-backed (Postgres via SQLAlchemy) for production
- In-memory for local dev without DATABASE_URL, and for tests

WHY BOTH:
- The debate engine must run with zero infrastructure
- Tests build a fresh in-memory store per test
- Same interface, so the engine can't tell the difference
"""

import logging
from typing import Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from debate_room.models.debate_record import DebateRecord
from debate_room.models.profile import Profile
from debate_room.services.debate.models import (
    DebateSession,
    Role,
    SavedDebate,
    UserProfile,
    Verdict,
)
from debate_room.services.debate.protocols import BaseDebateRecordStore, BaseProfileStore

logger = logging.getLogger(__name__)


def _to_saved(record: DebateRecord) -> SavedDebate:
    return SavedDebate(
        id=record.id,
        idea=record.idea,
        user_id=record.user_id,
        rounds=record.rounds or 0,
        advocate_arguments=list(record.advocate_arguments or []),
        skeptic_arguments=list(record.skeptic_arguments or []),
        verdict=record.verdict,
        winner=record.winner,
    )


# =============================================================================
# SQL STORES
# =============================================================================

class SqlDebateRecordStore(BaseDebateRecordStore):
    """Debate records in the debates table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def create(self, session: DebateSession) -> str:
        async with self.session_factory() as db:
            record = DebateRecord(
                user_id=session.user_id,
                idea=session.idea,
                rounds=session.round_counter,
                advocate_arguments=session.arguments_for(Role.ADVOCATE),
                skeptic_arguments=session.arguments_for(Role.SKEPTIC),
            )
            db.add(record)
            await db.commit()
            logger.info(f"Created debate record {record.id} for debate {session.id}")
            return record.id

    async def save_progress(self, record_id: str, session: DebateSession) -> None:
        async with self.session_factory() as db:
            record = await db.get(DebateRecord, record_id)
            if record is None:
                logger.warning(f"Debate record {record_id} vanished, progress not saved")
                return
            record.rounds = session.round_counter
            record.advocate_arguments = session.arguments_for(Role.ADVOCATE)
            record.skeptic_arguments = session.arguments_for(Role.SKEPTIC)
            await db.commit()

    async def save_verdict(
        self,
        record_id: str,
        session: DebateSession,
        verdict: Verdict,
    ) -> None:
        async with self.session_factory() as db:
            record = await db.get(DebateRecord, record_id)
            if record is None:
                logger.warning(f"Debate record {record_id} vanished, verdict not saved")
                return
            record.rounds = session.round_counter
            record.advocate_arguments = session.arguments_for(Role.ADVOCATE)
            record.skeptic_arguments = session.arguments_for(Role.SKEPTIC)
            record.verdict = verdict.text
            record.winner = verdict.winner.value
            await db.commit()
            logger.info(f"Saved verdict for record {record_id}: {verdict.winner.value}")

    async def get(self, record_id: str) -> Optional[SavedDebate]:
        async with self.session_factory() as db:
            record = await db.get(DebateRecord, record_id)
            return _to_saved(record) if record else None

    async def list_for_user(self, user_id: str, limit: int = 20) -> list[SavedDebate]:
        """Most recent debates first."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(DebateRecord)
                .where(DebateRecord.user_id == user_id)
                .order_by(DebateRecord.created_at.desc())
                .limit(limit)
            )
            return [_to_saved(r) for r in result.scalars().all()]


class SqlProfileStore(BaseProfileStore):
    """User profiles in the profiles table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, user_id: str) -> Optional[UserProfile]:
        async with self.session_factory() as db:
            profile = await db.get(Profile, user_id)
            if profile is None:
                return None
            return UserProfile(
                user_id=profile.id,
                email=profile.email,
                name=profile.name,
                is_premium=profile.is_premium,
            )

    async def upsert(self, profile: UserProfile) -> UserProfile:
        async with self.session_factory() as db:
            row = await db.get(Profile, profile.user_id)
            if row is None:
                row = Profile(id=profile.user_id)
                db.add(row)
            row.email = profile.email
            row.name = profile.name
            row.is_premium = profile.is_premium
            await db.commit()
        return profile

    async def set_premium(self, user_id: str, is_premium: bool) -> None:
        async with self.session_factory() as db:
            row = await db.get(Profile, user_id)
            if row is None:
                row = Profile(id=user_id)
                db.add(row)
            row.is_premium = is_premium
            await db.commit()
        logger.info(f"User {user_id} premium={is_premium}")

    async def delete(self, user_id: str) -> None:
        async with self.session_factory() as db:
            row = await db.get(Profile, user_id)
            if row is not None:
                await db.delete(row)
                await db.commit()


# =============================================================================
# IN-MEMORY STORES
# =============================================================================

class InMemoryDebateRecordStore(BaseDebateRecordStore):
    """Dict-backed debate records."""

    def __init__(self):
        self.records: dict[str, SavedDebate] = {}

    async def create(self, session: DebateSession) -> str:
        record_id = str(uuid4())
        self.records[record_id] = SavedDebate(
            id=record_id,
            idea=session.idea,
            user_id=session.user_id,
            rounds=session.round_counter,
            advocate_arguments=session.arguments_for(Role.ADVOCATE),
            skeptic_arguments=session.arguments_for(Role.SKEPTIC),
        )
        return record_id

    async def save_progress(self, record_id: str, session: DebateSession) -> None:
        record = self.records.get(record_id)
        if record is None:
            return
        record.rounds = session.round_counter
        record.advocate_arguments = session.arguments_for(Role.ADVOCATE)
        record.skeptic_arguments = session.arguments_for(Role.SKEPTIC)

    async def save_verdict(
        self,
        record_id: str,
        session: DebateSession,
        verdict: Verdict,
    ) -> None:
        await self.save_progress(record_id, session)
        record = self.records.get(record_id)
        if record is not None:
            record.verdict = verdict.text
            record.winner = verdict.winner.value

    async def get(self, record_id: str) -> Optional[SavedDebate]:
        return self.records.get(record_id)

    async def list_for_user(self, user_id: str, limit: int = 20) -> list[SavedDebate]:
        # dicts keep insertion (= creation) order
        mine = [r for r in self.records.values() if r.user_id == user_id]
        return list(reversed(mine))[:limit]


class InMemoryProfileStore(BaseProfileStore):
    """Dict-backed profiles."""

    def __init__(self):
        self.profiles: dict[str, UserProfile] = {}

    async def get(self, user_id: str) -> Optional[UserProfile]:
        return self.profiles.get(user_id)

    async def upsert(self, profile: UserProfile) -> UserProfile:
        self.profiles[profile.user_id] = profile
        return profile

    async def set_premium(self, user_id: str, is_premium: bool) -> None:
        profile = self.profiles.setdefault(user_id, UserProfile(user_id=user_id))
        profile.is_premium = is_premium

    async def delete(self, user_id: str) -> None:
        self.profiles.pop(user_id, None)
