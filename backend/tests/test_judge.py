"""
Tests for the judge stage.
"""

import pytest

from debate_room.services.debate.errors import DegenerateOutput, InvalidTransition
from debate_room.services.debate.judge import JudgeStage
from debate_room.services.debate.models import DebateSession, Role, Turn, Winner


def _session_with_rounds(n: int) -> DebateSession:
    session = DebateSession(id="debate-1", idea="AI tutoring platform", round_counter=n)
    for i in range(1, n + 1):
        session.history.append(Turn(Role.ADVOCATE, "", f"advocate says {i}", round_number=i))
        session.history.append(Turn(Role.SKEPTIC, "", f"skeptic says {i}", round_number=i))
    return session


def test_prompt_includes_every_round_when_short(settings):
    prompt, shown, total = JudgeStage(None, settings).build_prompt(_session_with_rounds(2))

    assert (shown, total) == (2, 2)
    assert "Total rounds debated: 2" in prompt
    assert "Showing last" not in prompt
    assert "=== ROUND 1 ===" in prompt
    assert "advocate says 1" in prompt and "skeptic says 2" in prompt


def test_prompt_keeps_most_recent_rounds_and_says_so(settings):
    """Older rounds are dropped from the front, and the judge is told."""
    prompt, shown, total = JudgeStage(None, settings).build_prompt(_session_with_rounds(12))

    assert (shown, total) == (10, 12)
    assert "Showing last 10 of 12 rounds" in prompt
    assert "=== ROUND 2 ===" not in prompt
    assert "advocate says 2\n" not in prompt
    assert "=== ROUND 3 ===" in prompt
    assert "=== ROUND 12 ===" in prompt


def test_unfinished_round_not_judged(settings):
    session = _session_with_rounds(1)
    session.history.append(Turn(Role.ADVOCATE, "", "advocate half round", round_number=2))

    prompt, shown, total = JudgeStage(None, settings).build_prompt(session)

    assert total == 1
    assert "advocate half round" not in prompt


@pytest.mark.asyncio
async def test_verdict_and_winner(fake_client, settings):
    verdict = await JudgeStage(fake_client, settings).judge(_session_with_rounds(1))

    assert verdict.winner == Winner.SKEPTIC
    assert "**Winner: Skeptic**" in verdict.text
    assert "<thinking>" not in verdict.text, "Verdict must be the output segment only"
    assert verdict.total_rounds == 1


@pytest.mark.asyncio
async def test_unparseable_winner_is_unknown(fake_client, settings):
    fake_client.verdict = "<output>Both sides argued well.</output>"

    verdict = await JudgeStage(fake_client, settings).judge(_session_with_rounds(1))

    assert verdict.winner == Winner.UNKNOWN


@pytest.mark.asyncio
async def test_no_complete_round_rejected(fake_client, settings):
    with pytest.raises(InvalidTransition):
        await JudgeStage(fake_client, settings).judge(_session_with_rounds(0))

    assert fake_client.calls == [], "Judge must not be called without a round"


@pytest.mark.asyncio
async def test_empty_verdict_is_a_failure(fake_client, settings):
    fake_client.verdict = "<thinking>hmm</thinking><output>   </output>"

    with pytest.raises(DegenerateOutput):
        await JudgeStage(fake_client, settings).judge(_session_with_rounds(1))
