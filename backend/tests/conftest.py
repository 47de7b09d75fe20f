"""
Shared fixtures for the debate tests.

Nothing here touches the network: FakeGenerationClient answers every
model call from a script, routed by the system prompt it receives.
"""

import asyncio
import json
from collections import deque
from typing import AsyncIterator, Optional

import pytest

from debate_room.config import Settings
from debate_room.services.debate.engine import TurnEngine
from debate_room.services.debate.generation import GenerationClient
from debate_room.services.debate.models import Role
from debate_room.services.debate.policy import EntitlementRoundPolicy
from debate_room.services.debate.prompts import (
    ARGUE_PROMPTS,
    DISCOVER_PROMPTS,
    FACT_CHECKER_PROMPT,
    IDEA_ANALYZER_PROMPT,
    JUDGE_PROMPT,
)
from debate_room.services.debate.session_store import SessionStore
from debate_room.services.record_store import InMemoryDebateRecordStore, InMemoryProfileStore

NO_QUESTIONS = json.dumps({"questions": []})
CLEAR_IDEA = json.dumps({"is_clear": True, "questions": []})
NO_CLAIMS = json.dumps({"claims": []})

DEFAULT_VERDICT = """<thinking>Both sides had moments.</thinking>
<output>
## The Verdict

**Winner: Skeptic**
The skeptic's unit economics attack was never answered.
</output>"""


def persona_output(text: str, thinking: str = "Counter the last point.") -> str:
    """A well-formed persona response."""
    return f"<thinking>{thinking}</thinking>\n<output>{text}</output>"


def discovery_json(*questions: str) -> str:
    return json.dumps({"questions": list(questions)})


def fact_check_json(*claims: tuple[str, str]) -> str:
    return json.dumps({"claims": [{"claim": c, "question": q} for c, q in claims]})


class FakeGenerationClient(GenerationClient):
    """
    Scripted stand-in for the model.

    Queue entries may be strings (returned) or exceptions (raised).
    Empty turn queues fall back to a generic, fact-free argument.
    """

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.turns = {Role.ADVOCATE: deque(), Role.SKEPTIC: deque()}
        self.discovery = {Role.ADVOCATE: NO_QUESTIONS, Role.SKEPTIC: NO_QUESTIONS}
        self.analyzer = CLEAR_IDEA
        self.fact_checks = deque()
        self.verdict = DEFAULT_VERDICT
        self.image_description = "A dashboard screenshot showing weekly active tutors."
        self.discovery_delay = 0.0
        self.calls: list[tuple[str, str]] = []
        self._turn_counts = {Role.ADVOCATE: 0, Role.SKEPTIC: 0}

    # -- inspection helpers ---------------------------------------------------

    def prompts_for(self, system_prompt: str) -> list[str]:
        """User prompts sent with a given system prompt, oldest first."""
        return [user for system, user in self.calls if system == system_prompt]

    def turn_prompts(self, role: Role) -> list[str]:
        return self.prompts_for(ARGUE_PROMPTS[role])

    # -- scripted answers -----------------------------------------------------

    @staticmethod
    def _unwrap(entry):
        if isinstance(entry, Exception):
            raise entry
        return entry

    async def _answer(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))

        for role, prompt in ARGUE_PROMPTS.items():
            if system_prompt == prompt:
                self._turn_counts[role] += 1
                if self.turns[role]:
                    return self._unwrap(self.turns[role].popleft())
                n = self._turn_counts[role]
                return persona_output(
                    f"{role.display_name} point {n}: the market keeps growing and timing matters."
                )

        for role, prompt in DISCOVER_PROMPTS.items():
            if system_prompt == prompt:
                await asyncio.sleep(self.discovery_delay)
                return self._unwrap(self.discovery[role])

        if system_prompt == IDEA_ANALYZER_PROMPT:
            await asyncio.sleep(self.discovery_delay)
            return self._unwrap(self.analyzer)

        if system_prompt == FACT_CHECKER_PROMPT:
            if self.fact_checks:
                return self._unwrap(self.fact_checks.popleft())
            return NO_CLAIMS

        if system_prompt == JUDGE_PROMPT:
            return self._unwrap(self.verdict)

        raise AssertionError(f"Unexpected system prompt: {system_prompt[:60]}")

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        json_mode: bool = False,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        return await self._answer(system_prompt, user_prompt)

    async def stream(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[str]:
        text = await self._answer(system_prompt, user_prompt)
        for i in range(0, len(text), 7):
            yield text[i:i + 7]

    async def describe_image(self, data_url: str, context: str = "") -> str:
        return self._unwrap(self.image_description)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    """Test settings: never read .env, fake key, short discovery timeout."""
    return Settings(
        _env_file=None,
        openai_api_key="test-key",
        database_url="",
        discovery_timeout_seconds=2.0,
        max_free_rounds=3,
        max_free_files=1,
    )


@pytest.fixture
def fake_client(settings) -> FakeGenerationClient:
    return FakeGenerationClient(settings)


@pytest.fixture
def profiles() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def records() -> InMemoryDebateRecordStore:
    return InMemoryDebateRecordStore()


@pytest.fixture
def make_engine(fake_client, profiles, records, settings):
    """Factory so a test can tweak settings before the engine is built."""

    def _make(**overrides) -> TurnEngine:
        engine_settings = settings.model_copy(update=overrides) if overrides else settings
        fake_client.settings = engine_settings
        policy = EntitlementRoundPolicy(
            profiles,
            max_free_rounds=engine_settings.max_free_rounds,
            max_free_files=engine_settings.max_free_files,
        )
        return TurnEngine(SessionStore(), fake_client, policy, records, engine_settings)

    return _make


@pytest.fixture
def engine(make_engine) -> TurnEngine:
    return make_engine()
