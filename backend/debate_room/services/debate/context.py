"""
Prompt Context — Formats session data into the user-prompt blocks every
debate call shares (idea, attached files, confirmed founder facts).
"""

from debate_room.services.debate.models import Clarification, DebateSession


def excerpt(text: str, limit: int) -> str:
    """Cut text to limit characters, marking the cut."""
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def format_confirmed_facts(clarifications: list[Clarification]) -> str:
    """
    Confirmed facts as Q/A pairs.

    Example:
        Q: How many paying users do you have?
        A: About 200, all on the monthly plan.
    """
    return "\n\n".join(f"Q: {c.question}\nA: {c.answer}" for c in clarifications)


def format_idea_block(session: DebateSession, include_facts: bool = True) -> str:
    """Idea, supporting context and (optionally) confirmed facts."""
    sections = [f"STARTUP IDEA: {session.idea}"]

    if session.supporting_context:
        sections.append(
            f"SUPPORTING CONTEXT (from attached files):\n{session.supporting_context}"
        )

    if include_facts and session.confirmed_clarifications:
        sections.append(
            "CONFIRMED FACTS FROM THE FOUNDER (treat as true):\n"
            + format_confirmed_facts(session.confirmed_clarifications)
        )

    if include_facts and session.declined_questions:
        declined = "\n".join(f"- {q}" for q in sorted(session.declined_questions))
        sections.append(
            "THE FOUNDER DECLINED TO ANSWER (argue without these facts, do not ask again):\n"
            + declined
        )

    return "\n\n".join(sections)
