"""
Round / Access Policy — Entitlement checks backed by the profile store.

RULES:
- Premium users: unlimited rounds, unlimited files
- Everyone else (including anonymous debates): max_free_rounds completed
  rounds, max_free_files attachments

Both limits come from Settings so deployments can tune them.
"""

import logging
from typing import Optional

from debate_room.config import get_settings
from debate_room.services.debate.models import DebateSession
from debate_room.services.debate.protocols import BaseProfileStore, BaseRoundPolicy

logger = logging.getLogger(__name__)


class EntitlementRoundPolicy(BaseRoundPolicy):
    """Free/premium round and file limits."""

    def __init__(
        self,
        profiles: BaseProfileStore,
        max_free_rounds: Optional[int] = None,
        max_free_files: Optional[int] = None,
    ):
        settings = get_settings()
        self.profiles = profiles
        self.max_free_rounds = (
            max_free_rounds if max_free_rounds is not None else settings.max_free_rounds
        )
        self.max_free_files = (
            max_free_files if max_free_files is not None else settings.max_free_files
        )

    async def is_premium(self, user_id: Optional[str]) -> bool:
        if not user_id:
            return False
        profile = await self.profiles.get(user_id)
        return bool(profile and profile.is_premium)

    async def may_continue(self, session: DebateSession, current_round: int) -> bool:
        if await self.is_premium(session.user_id):
            return True
        allowed = current_round < self.max_free_rounds
        if not allowed:
            logger.info(
                f"Debate {session.id}: free round limit reached "
                f"({current_round}/{self.max_free_rounds})"
            )
        return allowed

    async def max_files(self, user_id: Optional[str]) -> Optional[int]:
        if await self.is_premium(user_id):
            return None
        return self.max_free_files
