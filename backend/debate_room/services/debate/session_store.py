"""
Session Store — In-memory repository of live debates.

WHAT THIS DOES:
Maps a debate id to its DebateSession (idea, attached-file context,
accepted turns, confirmed clarifications, round counter).

RULES:
- history and confirmed_clarifications are append-only
- confirmed_clarifications never holds the same question twice
- appends happen in call order, never reordered
- one mutating request per session at a time: a second one is REJECTED
  with SessionBusy rather than interleaved (see exclusive())

Sessions live until the process exits. The store is a plain object that
gets injected into the TurnEngine, so each test can build a fresh one.

USAGE:
    store = SessionStore()
    session = store.create(idea="AI tutoring platform")
    async with store.exclusive(session.id):
        store.append_turn(session.id, turn)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Optional
from uuid import uuid4

from debate_room.services.debate.errors import SessionBusy, SessionNotFound
from debate_room.services.debate.models import Clarification, DebateSession, Turn

logger = logging.getLogger(__name__)


class SessionStore:
    """Process-local map of debate id → DebateSession."""

    def __init__(self):
        self._sessions: dict[str, DebateSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self,
        idea: str,
        supporting_context: str = "",
        user_id: Optional[str] = None,
        model: Optional[str] = None,
        history: Optional[list[Turn]] = None,
        round_counter: int = 0,
        record_id: Optional[str] = None,
    ) -> DebateSession:
        """
        Create a session and return it.

        history and round_counter are only set when rebuilding a saved debate.
        """
        session = DebateSession(
            id=uuid4().hex,
            idea=idea,
            supporting_context=supporting_context,
            user_id=user_id,
            model=model,
            record_id=record_id,
            history=list(history or []),
            round_counter=round_counter,
        )
        self._sessions[session.id] = session
        self._locks[session.id] = asyncio.Lock()
        logger.info(f"Created debate {session.id} ({len(session.history)} turns preloaded)")
        return session

    def get(self, session_id: str) -> DebateSession:
        """Return the session or raise SessionNotFound."""
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def append_turn(self, session_id: str, turn: Turn) -> None:
        self.get(session_id).history.append(turn)

    def append_clarifications(
        self,
        session_id: str,
        clarifications: Iterable[Clarification],
    ) -> list[Clarification]:
        """
        Add confirmed facts, skipping questions the session already holds.

        Returns:
            The clarifications that were actually added
        """
        session = self.get(session_id)
        known = {c.question for c in session.confirmed_clarifications}
        added = []
        for clarification in clarifications:
            if clarification.question in known:
                continue
            known.add(clarification.question)
            session.confirmed_clarifications.append(clarification)
            added.append(clarification)
        return added

    def decline_questions(self, session_id: str, questions: Iterable[str]) -> None:
        """Remember skipped questions so they are never asked again."""
        self.get(session_id).declined_questions.update(questions)

    def increment_round(self, session_id: str) -> int:
        session = self.get(session_id)
        session.round_counter += 1
        return session.round_counter

    @asynccontextmanager
    async def exclusive(self, session_id: str) -> AsyncIterator[DebateSession]:
        """
        Hold the session for one mutating step.

        Raises:
            SessionNotFound: unknown id
            SessionBusy: another step for this session is in flight
        """
        session = self.get(session_id)
        lock = self._locks[session_id]
        if lock.locked():
            raise SessionBusy(session_id)
        async with lock:
            yield session
