"""
Judge Stage — One-shot verdict over the debate so far.

HOW IT WORKS:
1. Pair up the personas' accepted arguments into rounds
2. Keep only the most recent judge_round_window rounds (default 10);
   when older rounds are dropped, the prompt says so explicitly
   ("Showing last 10 of 14 rounds") so the judge knows what it is missing
3. Generate the verdict (<thinking> + <output>, like the personas)
4. Extract the winner from the verdict text

Never touches history or the round counter. Failures propagate: a
missing verdict must be visible, not silently skipped.

USAGE:
    judge = JudgeStage(client)
    verdict = await judge.judge(session)
    print(verdict.winner)  # Winner.SKEPTIC
"""

import logging
from typing import Optional

from debate_room.config import Settings, get_settings
from debate_room.services.debate.context import format_idea_block
from debate_room.services.debate.errors import DegenerateOutput, InvalidTransition
from debate_room.services.debate.generation import GenerationClient
from debate_room.services.debate.models import DebateSession, Role, Verdict
from debate_room.services.debate.parser import extract_output, extract_winner
from debate_room.services.debate.prompts import JUDGE_PROMPT

logger = logging.getLogger(__name__)


def _paired_rounds(session: DebateSession) -> list[tuple[str, str]]:
    """(advocate, skeptic) arguments for every complete round, oldest first."""
    return list(
        zip(
            session.arguments_for(Role.ADVOCATE),
            session.arguments_for(Role.SKEPTIC),
        )
    )


class JudgeStage:
    """Produces the verdict."""

    def __init__(
        self,
        client: GenerationClient,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.settings = settings or get_settings()

    def build_prompt(self, session: DebateSession) -> tuple[str, int, int]:
        """
        Build the judge's user prompt.

        Returns:
            (prompt, rounds_shown, total_rounds)
        """
        rounds = _paired_rounds(session)
        total = len(rounds)
        window = self.settings.judge_round_window
        shown = rounds[-window:]
        first_number = total - len(shown) + 1

        lines = [format_idea_block(session), "", f"Total rounds debated: {total}"]
        if len(shown) < total:
            lines.append(
                f"(Showing last {len(shown)} of {total} rounds. "
                f"Earlier rounds were omitted for length.)"
            )

        for number, (advocate, skeptic) in enumerate(shown, start=first_number):
            lines.extend([
                "",
                f"=== ROUND {number} ===",
                f"ADVOCATE:\n{advocate}",
                "",
                f"SKEPTIC:\n{skeptic}",
            ])

        lines.extend(["", "Deliver your verdict."])
        return "\n".join(lines), len(shown), total

    async def judge(self, session: DebateSession) -> Verdict:
        """
        Evaluate the debate.

        Raises:
            InvalidTransition: no complete round to judge
            GenerationFailure: the model call failed or returned nothing
            ConfigurationError: no API key
        """
        prompt, shown, total = self.build_prompt(session)
        if total == 0:
            raise InvalidTransition("The judge needs at least one complete round")

        logger.info(f"Debate {session.id}: judging {shown} of {total} rounds")

        raw = await self.client.complete(
            JUDGE_PROMPT,
            prompt,
            model=self.settings.judge_model,
            temperature=0.5,
            max_tokens=self.settings.judge_max_tokens,
        )
        text = extract_output(raw)
        if not text:
            raise DegenerateOutput("The judge returned an empty verdict")

        winner = extract_winner(text)
        logger.info(f"Debate {session.id}: verdict delivered, winner={winner.value}")

        return Verdict(
            text=text,
            winner=winner,
            raw_output=raw,
            rounds_shown=shown,
            total_rounds=total,
        )
