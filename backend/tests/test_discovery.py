"""
Tests for the discovery stage (pre-debate founder questions).
"""

import json

import pytest

from debate_room.services.debate.discovery import (
    FOUNDER_QUESTION,
    DiscoveryStage,
    question_key,
)
from debate_room.services.debate.errors import ConfigurationError, ProviderError
from debate_room.services.debate.models import Clarification, DebateSession, Role

from conftest import discovery_json


def _session(idea: str = "AI tutoring platform for high-school maths") -> DebateSession:
    return DebateSession(id="debate-1", idea=idea)


def test_question_key_ignores_case_and_punctuation():
    assert question_key("Who is your target CUSTOMER?") == question_key("who is your target customer")
    assert question_key("  What's   the price?! ") == "whats the price"


@pytest.mark.asyncio
async def test_both_personas_questions_merged(fake_client, settings):
    fake_client.discovery[Role.ADVOCATE] = discovery_json("Who pays?", "How big is the team?")
    fake_client.discovery[Role.SKEPTIC] = discovery_json("What is your churn?")

    questions = await DiscoveryStage(fake_client, settings).discover(_session())

    assert [q.question for q in questions] == ["Who pays?", "How big is the team?", "What is your churn?"]
    assert [q.role for q in questions] == [Role.ADVOCATE, Role.ADVOCATE, Role.SKEPTIC]
    assert all(q.source_claim == FOUNDER_QUESTION for q in questions)


@pytest.mark.asyncio
async def test_duplicate_questions_keep_first_asker(fake_client, settings):
    """Dedup is case/punctuation-insensitive; the first side to ask keeps it."""
    fake_client.discovery[Role.ADVOCATE] = discovery_json("Who is your target customer?")
    fake_client.discovery[Role.SKEPTIC] = discovery_json("who is your TARGET customer", "What is your CAC?")

    questions = await DiscoveryStage(fake_client, settings).discover(_session())

    assert [q.question for q in questions] == ["Who is your target customer?", "What is your CAC?"]
    assert questions[0].role == Role.ADVOCATE


@pytest.mark.asyncio
async def test_at_most_three_questions_per_persona(fake_client, settings):
    fake_client.discovery[Role.ADVOCATE] = discovery_json("Q1?", "Q2?", "Q3?", "Q4?", "Q5?")

    questions = await DiscoveryStage(fake_client, settings).discover(_session())

    assert len(questions) == 3, f"Expected 3 questions, got {len(questions)}"


@pytest.mark.asyncio
async def test_already_answered_questions_dropped(fake_client, settings):
    session = _session()
    session.confirmed_clarifications.append(Clarification("Who pays?", "Parents"))
    fake_client.discovery[Role.ADVOCATE] = discovery_json("Who pays?", "What is the price?")

    questions = await DiscoveryStage(fake_client, settings).discover(session)

    assert [q.question for q in questions] == ["What is the price?"]


@pytest.mark.asyncio
async def test_unclear_idea_asks_what_the_product_is(fake_client, settings):
    """
    A bare word like "rubberduck" can't be debated.

    The analyzer's single question replaces the persona questions.
    """
    fake_client.analyzer = json.dumps({
        "is_clear": False,
        "questions": ["What is rubberduck, and who is it for?", "Anything else?"],
    })
    fake_client.discovery[Role.ADVOCATE] = discovery_json("Who pays?")

    questions = await DiscoveryStage(fake_client, settings).discover(_session("rubberduck"))

    assert len(questions) == 1, f"Expected exactly one question, got {len(questions)}"
    assert questions[0].question == "What is rubberduck, and who is it for?"
    assert questions[0].source_claim == FOUNDER_QUESTION
    assert questions[0].role is None


@pytest.mark.asyncio
async def test_unclear_idea_with_question_as_plain_string(fake_client, settings):
    """A bare string is one question, not one question per character."""
    fake_client.analyzer = json.dumps({"is_clear": False, "questions": "What is rubberduck?"})

    questions = await DiscoveryStage(fake_client, settings).discover(_session("rubberduck"))

    assert [q.question for q in questions] == ["What is rubberduck?"]


@pytest.mark.asyncio
async def test_questions_of_the_wrong_shape_ignored(fake_client, settings):
    fake_client.discovery[Role.ADVOCATE] = json.dumps({"questions": {"q": "Who pays?"}})
    fake_client.discovery[Role.SKEPTIC] = json.dumps({"questions": "What is your churn?"})

    questions = await DiscoveryStage(fake_client, settings).discover(_session())

    assert [q.question for q in questions] == ["What is your churn?"]


@pytest.mark.asyncio
async def test_one_persona_failing_keeps_the_other(fake_client, settings):
    fake_client.discovery[Role.ADVOCATE] = discovery_json("Who pays?")
    fake_client.discovery[Role.SKEPTIC] = ProviderError("rate limited")

    questions = await DiscoveryStage(fake_client, settings).discover(_session())

    assert [q.question for q in questions] == ["Who pays?"]


@pytest.mark.asyncio
async def test_malformed_json_yields_no_questions(fake_client, settings):
    fake_client.discovery[Role.ADVOCATE] = "not json at all"
    fake_client.discovery[Role.SKEPTIC] = discovery_json("What is your churn?")

    questions = await DiscoveryStage(fake_client, settings).discover(_session())

    assert [q.question for q in questions] == ["What is your churn?"]


@pytest.mark.asyncio
async def test_timeout_fails_soft(fake_client, settings):
    """A slow provider must not block the debate: no questions instead."""
    fake_client.discovery[Role.ADVOCATE] = discovery_json("Who pays?")
    fake_client.discovery_delay = 1.0
    fast = settings.model_copy(update={"discovery_timeout_seconds": 0.05})

    questions = await DiscoveryStage(fake_client, fast).discover(_session())

    assert questions == []


@pytest.mark.asyncio
async def test_missing_api_key_surfaces(fake_client, settings):
    fake_client.discovery[Role.ADVOCATE] = ConfigurationError("OPENAI_API_KEY not set")

    with pytest.raises(ConfigurationError):
        await DiscoveryStage(fake_client, settings).discover(_session())
