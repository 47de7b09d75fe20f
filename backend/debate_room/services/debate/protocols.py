"""
Debate Protocols — Abstract bases for the engine's external collaborators.

WHAT THIS IS:
The turn engine never touches accounts, payments or the database directly.
It talks to three narrow interfaces:

- BaseRoundPolicy:        "may this session take another round?"
- BaseDebateRecordStore:  append-only history of debates (for "My Debates")
- BaseProfileStore:       {user_id, is_premium}, flipped by the payment flow

WHY ABSTRACT CLASSES:
- Swap SQL persistence for in-memory stores in tests and local dev
- Entitlement rules can change without touching the state machine
- Clean separation between debate logic and account glue

USAGE:
    class MyPolicy(BaseRoundPolicy):
        async def may_continue(self, session, current_round) -> bool:
            return current_round < 5
"""

from abc import ABC, abstractmethod
from typing import Optional

from debate_room.services.debate.models import (
    DebateSession,
    SavedDebate,
    UserProfile,
    Verdict,
)


class BaseRoundPolicy(ABC):
    """
    Decides how far a session may go.

    The default EntitlementRoundPolicy in policy.py implements this on top
    of a profile store.
    """

    @abstractmethod
    async def may_continue(self, session: DebateSession, current_round: int) -> bool:
        """
        Whether another round may start.

        Args:
            session: The debate asking
            current_round: Number of rounds completed so far

        Returns:
            True if the next round may begin
        """
        pass

    @abstractmethod
    async def is_premium(self, user_id: Optional[str]) -> bool:
        """Whether the user has the premium entitlement."""
        pass

    @abstractmethod
    async def max_files(self, user_id: Optional[str]) -> Optional[int]:
        """How many files the user may attach (None = unlimited)."""
        pass


class BaseDebateRecordStore(ABC):
    """
    Persistence for finished and in-progress debates.

    The engine writes after every completed round and after judging. It
    only reads when a user reopens a saved debate.
    """

    @abstractmethod
    async def create(self, session: DebateSession) -> str:
        """Create a record for a new debate. Returns the record id."""
        pass

    @abstractmethod
    async def save_progress(self, record_id: str, session: DebateSession) -> None:
        """Store the arguments and round count so far."""
        pass

    @abstractmethod
    async def save_verdict(
        self,
        record_id: str,
        session: DebateSession,
        verdict: Verdict,
    ) -> None:
        """Store the judge's verdict and winner."""
        pass

    @abstractmethod
    async def get(self, record_id: str) -> Optional[SavedDebate]:
        """Load a saved debate, or None."""
        pass

    @abstractmethod
    async def list_for_user(self, user_id: str, limit: int = 20) -> list[SavedDebate]:
        """A user's saved debates, most recent first."""
        pass


class BaseProfileStore(ABC):
    """CRUD over user entitlement profiles."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserProfile]:
        pass

    @abstractmethod
    async def upsert(self, profile: UserProfile) -> UserProfile:
        pass

    @abstractmethod
    async def set_premium(self, user_id: str, is_premium: bool) -> None:
        """Flip the entitlement flag (called by the payment flow)."""
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> None:
        pass
