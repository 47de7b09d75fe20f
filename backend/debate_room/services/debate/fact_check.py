"""
Fact-Check Gate — Stops personas from inventing facts about the startup.

WHAT THIS DOES:
After a persona drafts its argument (and BEFORE the turn is accepted),
the gate asks a model to flag claims about THE STARTUP ITSELF that nobody
has confirmed: "we have 50,000 paying users", "the team has two ex-Stripe
engineers", "we closed a $2M seed".

WHAT IT IGNORES:
- Market statistics and industry data
- Facts about competitors
- Opinions and logical argument
- Anything the founder already confirmed

OUTPUT:
Up to 3 ClarificationRequests. The turn engine suspends the turn, asks the
founder, and regenerates the turn with the answers.

BEST-EFFORT:
Fact-checking improves quality; it is not a correctness gate. If the
check itself fails (provider error, bad JSON), the draft is treated as
clean and the debate moves on.

USAGE:
    gate = FactCheckGate(client)
    questions = await gate.check(session, Role.ADVOCATE, draft)
"""

import json
import logging
from typing import Optional

from debate_room.config import Settings, get_settings
from debate_room.services.debate.context import format_idea_block
from debate_room.services.debate.discovery import question_key
from debate_room.services.debate.errors import DebateError
from debate_room.services.debate.generation import GenerationClient
from debate_room.services.debate.models import ClarificationRequest, DebateSession, Role
from debate_room.services.debate.prompts import FACT_CHECKER_PROMPT

logger = logging.getLogger(__name__)

MAX_FLAGGED_CLAIMS = 3


class FactCheckGate:
    """Flags unconfirmed claims about the startup in a persona's draft."""

    def __init__(
        self,
        client: GenerationClient,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.settings = settings or get_settings()

    async def check(
        self,
        session: DebateSession,
        role: Role,
        draft: str,
    ) -> list[ClarificationRequest]:
        """
        Check one draft argument.

        Args:
            session: The debate (idea, context, confirmed facts)
            role: Persona that wrote the draft
            draft: The draft's final argument

        Returns:
            Questions for the founder, most important first (empty = accept the turn)
        """
        user_prompt = f"""{format_idea_block(session)}

DRAFT ARGUMENT FROM THE {role.value.upper()}:
{draft}

Flag unconfirmed claims about the startup itself. Return your response as JSON."""

        try:
            raw = await self.client.complete(
                FACT_CHECKER_PROMPT,
                user_prompt,
                model=self.settings.fact_check_model,
                json_mode=True,
                temperature=0.1,
            )
            data = json.loads(raw)
        except (DebateError, ValueError) as e:
            logger.warning(f"Debate {session.id}: fact-check skipped ({e})")
            return []

        claims = data.get("claims") if isinstance(data, dict) else None
        if not isinstance(claims, list):
            return []

        questions = []
        seen = set()
        for item in claims:
            if not isinstance(item, dict):
                continue
            question = str(item.get("question") or "").strip()
            claim = str(item.get("claim") or "").strip()
            key = question_key(question)
            if not key or key in seen or session.has_asked(question):
                continue
            seen.add(key)
            questions.append(
                ClarificationRequest(
                    question=question,
                    source_claim=f'{role.display_name}: "{claim}"' if claim else role.display_name,
                    role=role,
                )
            )
            if len(questions) == MAX_FLAGGED_CLAIMS:
                break

        if questions:
            logger.info(
                f"Debate {session.id}: fact-check flagged {len(questions)} "
                f"claim(s) in {role.value} draft"
            )
        return questions
