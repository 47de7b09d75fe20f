"""
Tests for the fact-check gate.
"""

import pytest

from debate_room.services.debate.errors import GenerationTimeout
from debate_room.services.debate.fact_check import FactCheckGate
from debate_room.services.debate.models import Clarification, DebateSession, Role

from conftest import fact_check_json


DRAFT = "We already have 50,000 paying users and a $2M seed round."


def _session() -> DebateSession:
    return DebateSession(id="debate-1", idea="AI tutoring platform")


@pytest.mark.asyncio
async def test_flags_unconfirmed_startup_claims(fake_client, settings):
    fake_client.fact_checks.append(fact_check_json(
        ("50,000 paying users", "How many paying users do you have?"),
    ))

    questions = await FactCheckGate(fake_client, settings).check(_session(), Role.ADVOCATE, DRAFT)

    assert len(questions) == 1
    assert questions[0].question == "How many paying users do you have?"
    assert questions[0].role == Role.ADVOCATE
    assert "50,000 paying users" in questions[0].source_claim

    # The gate saw the draft
    prompt = fake_client.calls[-1][1]
    assert DRAFT in prompt


@pytest.mark.asyncio
async def test_clean_draft_passes(fake_client, settings):
    questions = await FactCheckGate(fake_client, settings).check(
        _session(), Role.SKEPTIC, "Tutoring marketplaces historically struggle with churn."
    )

    assert questions == []


@pytest.mark.asyncio
async def test_caps_at_three_questions(fake_client, settings):
    fake_client.fact_checks.append(fact_check_json(
        ("a", "Question one?"),
        ("b", "Question two?"),
        ("c", "Question three?"),
        ("d", "Question four?"),
    ))

    questions = await FactCheckGate(fake_client, settings).check(_session(), Role.ADVOCATE, DRAFT)

    assert [q.question for q in questions] == ["Question one?", "Question two?", "Question three?"]


@pytest.mark.asyncio
async def test_never_reasks_confirmed_questions(fake_client, settings):
    session = _session()
    session.confirmed_clarifications.append(
        Clarification("How many paying users do you have?", "About 200")
    )
    fake_client.fact_checks.append(fact_check_json(
        ("50,000 paying users", "How many paying users do you have?"),
        ("$2M seed", "How much funding have you raised?"),
    ))

    questions = await FactCheckGate(fake_client, settings).check(session, Role.ADVOCATE, DRAFT)

    assert [q.question for q in questions] == ["How much funding have you raised?"]


@pytest.mark.asyncio
async def test_confirmed_facts_included_in_prompt(fake_client, settings):
    session = _session()
    session.confirmed_clarifications.append(Clarification("Team size?", "Three engineers"))

    await FactCheckGate(fake_client, settings).check(session, Role.ADVOCATE, DRAFT)

    assert "Q: Team size?\nA: Three engineers" in fake_client.calls[-1][1]


@pytest.mark.asyncio
async def test_provider_failure_means_no_issues(fake_client, settings):
    """Fact-checking is best-effort: a failed check never blocks the debate."""
    fake_client.fact_checks.append(GenerationTimeout("too slow"))

    questions = await FactCheckGate(fake_client, settings).check(_session(), Role.ADVOCATE, DRAFT)

    assert questions == []


@pytest.mark.asyncio
async def test_malformed_response_means_no_issues(fake_client, settings):
    fake_client.fact_checks.append('{"claims": "not a list"}')
    fake_client.fact_checks.append("garbage")
    gate = FactCheckGate(fake_client, settings)

    assert await gate.check(_session(), Role.ADVOCATE, DRAFT) == []
    assert await gate.check(_session(), Role.ADVOCATE, DRAFT) == []
