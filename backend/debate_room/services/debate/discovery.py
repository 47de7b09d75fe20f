"""
Discovery Stage — Both personas interview the founder before round 1.

WHAT THIS DOES:
Before any argument is made, the Advocate and the Skeptic each ask 2-3
questions whose answers would most change their case. An idea analyzer
runs alongside them and flags ideas too vague to debate at all.

HOW IT WORKS:
1. Three calls run concurrently (asyncio.gather):
   - advocate discovery prompt
   - skeptic discovery prompt
   - idea analyzer
2. If the analyzer says the idea is unclear, ITS question replaces the
   persona questions (e.g. "rubberduck" → "What is the product, and who is it for?")
3. Otherwise persona questions are merged:
   - dedup key: lowercased, punctuation-stripped text
   - first occurrence wins and keeps the role of whoever asked first
   - at most 3 per persona
   - anything already answered or declined is dropped

FAILS SOFT:
The whole stage is bounded by discovery_timeout_seconds. On timeout, or
when a call errors, that part contributes no questions. A debate is
never blocked because discovery misbehaved. A missing API key is the
exception: it surfaces immediately since no turn could run either.

USAGE:
    stage = DiscoveryStage(client)
    questions = await stage.discover(session)
"""

import asyncio
import json
import logging
import re
from typing import Optional

from debate_room.config import Settings, get_settings
from debate_room.services.debate.context import format_idea_block
from debate_room.services.debate.errors import ConfigurationError
from debate_room.services.debate.generation import GenerationClient
from debate_room.services.debate.models import ClarificationRequest, DebateSession, Role
from debate_room.services.debate.prompts import DISCOVER_PROMPTS, IDEA_ANALYZER_PROMPT

logger = logging.getLogger(__name__)

FOUNDER_QUESTION = "Founder Question"
MAX_QUESTIONS_PER_PERSONA = 3

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def question_key(question: str) -> str:
    """Dedup key: lowercased, punctuation stripped, whitespace collapsed."""
    stripped = _PUNCTUATION.sub("", question.lower())
    return _WHITESPACE.sub(" ", stripped).strip()


def _parse_questions(raw: str) -> list[str]:
    """Pull the "questions" list out of a JSON response."""
    data = json.loads(raw)
    if not isinstance(data, dict):
        return []
    questions = data.get("questions") or []
    # A single question sometimes comes back as a bare string
    if isinstance(questions, str):
        questions = [questions]
    if not isinstance(questions, list):
        return []
    return [q.strip() for q in questions if isinstance(q, str) and q.strip()]


class DiscoveryStage:
    """Pre-debate question gathering."""

    def __init__(
        self,
        client: GenerationClient,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.settings = settings or get_settings()

    async def discover(self, session: DebateSession) -> list[ClarificationRequest]:
        """
        Gather the discovery batch for a new debate.

        Args:
            session: The freshly created debate

        Returns:
            Deduplicated, role-tagged questions (possibly empty)

        Raises:
            ConfigurationError: no usable API key
        """
        user_prompt = (
            f"{format_idea_block(session)}\n\n"
            "Return your response as JSON."
        )

        try:
            results = await asyncio.wait_for(
                asyncio.gather(
                    self._analyze_idea(session, user_prompt),
                    self._persona_questions(session, Role.ADVOCATE, user_prompt),
                    self._persona_questions(session, Role.SKEPTIC, user_prompt),
                    return_exceptions=True,
                ),
                timeout=self.settings.discovery_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Debate {session.id}: discovery timed out after "
                f"{self.settings.discovery_timeout_seconds}s, continuing without questions"
            )
            return []

        for result in results:
            if isinstance(result, ConfigurationError):
                raise result

        analyzer, advocate, skeptic = (
            [] if isinstance(r, Exception) else r for r in results
        )
        for name, result in zip(("idea analyzer", "advocate", "skeptic"), results):
            if isinstance(result, Exception):
                logger.warning(f"Debate {session.id}: {name} discovery failed: {result}")

        if analyzer:
            logger.info(f"Debate {session.id}: idea unclear, asking the founder first")
            candidates = analyzer
        else:
            candidates = advocate + skeptic

        questions = self._merge(session, candidates)
        logger.info(f"Debate {session.id}: discovery produced {len(questions)} question(s)")
        return questions

    def _merge(
        self,
        session: DebateSession,
        candidates: list[ClarificationRequest],
    ) -> list[ClarificationRequest]:
        seen = set()
        merged = []
        for request in candidates:
            key = question_key(request.question)
            if not key or key in seen:
                continue
            seen.add(key)
            if session.has_asked(request.question):
                continue
            merged.append(request)
        return merged

    async def _persona_questions(
        self,
        session: DebateSession,
        role: Role,
        user_prompt: str,
    ) -> list[ClarificationRequest]:
        raw = await self.client.complete(
            DISCOVER_PROMPTS[role],
            user_prompt,
            model=session.model,
            json_mode=True,
            temperature=0.5,
        )
        try:
            questions = _parse_questions(raw)
        except ValueError as e:
            logger.warning(f"{role.display_name} returned malformed discovery JSON: {e}")
            return []

        return [
            ClarificationRequest(question=q, source_claim=FOUNDER_QUESTION, role=role)
            for q in questions[:MAX_QUESTIONS_PER_PERSONA]
        ]

    async def _analyze_idea(
        self,
        session: DebateSession,
        user_prompt: str,
    ) -> list[ClarificationRequest]:
        """Empty list when the idea is clear enough to debate."""
        raw = await self.client.complete(
            IDEA_ANALYZER_PROMPT,
            user_prompt,
            model=session.model,
            json_mode=True,
            temperature=0.2,
        )
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Idea analyzer returned malformed JSON: {e}")
            return []

        if not isinstance(data, dict) or data.get("is_clear", True):
            return []

        questions = _parse_questions(raw)
        # One question is enough to make a vague idea debatable
        return [
            ClarificationRequest(question=q, source_claim=FOUNDER_QUESTION)
            for q in questions[:1]
        ]
