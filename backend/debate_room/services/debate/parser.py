"""
Response Parser — Splits persona output into scratchpad and final argument.

PRECEDENCE (final argument):
1. <output>...</output> present      → text between the tags
2. <output> present, no </output>    → everything after the opening tag
3. no <output> tag at all            → the whole response, minus any
                                        <thinking> block and tags

Streaming makes (2) common: a response cut off by max_tokens still has a
usable argument. (3) covers models that ignore the format entirely.

Also extracts <clarification> questions and the judge's winner.
"""

import re
from dataclasses import dataclass, field

from debate_room.services.debate.models import Winner

OUTPUT_OPEN = "<output>"
OUTPUT_CLOSE = "</output>"

THINKING_PATTERN = re.compile(r"<thinking>([\s\S]*?)(?:</thinking>|$)", re.IGNORECASE)
CLARIFICATION_PATTERN = re.compile(r"<clarification>([\s\S]*?)</clarification>", re.IGNORECASE)
TAG_PATTERN = re.compile(r"</?(?:thinking|output|clarification)>", re.IGNORECASE)

# Checked in order; the first matching group wins
WINNER_PATTERNS = [
    (Winner.ADVOCATE, re.compile(r"winner:?\**\s*\**\s*advocate", re.IGNORECASE)),
    (Winner.SKEPTIC, re.compile(r"winner:?\**\s*\**\s*skeptic", re.IGNORECASE)),
    (Winner.DRAW, re.compile(r"winner:?\**\s*\**\s*(?:draw|tie)", re.IGNORECASE)),
    (Winner.ADVOCATE, re.compile(r"advocate (?:wins|is the winner)", re.IGNORECASE)),
    (Winner.SKEPTIC, re.compile(r"skeptic (?:wins|is the winner)", re.IGNORECASE)),
    (Winner.DRAW, re.compile(r"\b(?:draw|tie)\b", re.IGNORECASE)),
]


@dataclass
class ParsedResponse:
    """A persona response split into its parts."""

    thinking: str
    output: str
    clarifications: list[str] = field(default_factory=list)


def extract_output(raw: str) -> str:
    """Final-answer segment of a response, following the precedence above."""
    lowered = raw.lower()
    start = lowered.find(OUTPUT_OPEN)

    if start == -1:
        without_thinking = THINKING_PATTERN.sub("", raw)
        without_clarifications = CLARIFICATION_PATTERN.sub("", without_thinking)
        return TAG_PATTERN.sub("", without_clarifications).strip()

    body_start = start + len(OUTPUT_OPEN)
    end = lowered.find(OUTPUT_CLOSE, body_start)
    body = raw[body_start:] if end == -1 else raw[body_start:end]

    # A persona may tuck its clarification request inside the output
    body = CLARIFICATION_PATTERN.sub("", body)
    return body.strip()


def extract_thinking(raw: str) -> str:
    match = THINKING_PATTERN.search(raw)
    if not match:
        return ""
    thinking = match.group(1)
    # Unclosed <thinking> runs into <output>; cut it there
    cut = thinking.lower().find(OUTPUT_OPEN)
    if cut != -1:
        thinking = thinking[:cut]
    return thinking.strip()


def extract_clarifications(raw: str) -> list[str]:
    """Questions a persona raised with <clarification> tags, in order."""
    questions = []
    for match in CLARIFICATION_PATTERN.finditer(raw):
        question = match.group(1).strip()
        if question and question not in questions:
            questions.append(question)
    return questions


def parse_response(raw: str) -> ParsedResponse:
    return ParsedResponse(
        thinking=extract_thinking(raw),
        output=extract_output(raw),
        clarifications=extract_clarifications(raw),
    )


def extract_winner(verdict: str) -> Winner:
    """
    Map a verdict to the winner vocabulary.

    Example:
        extract_winner("## The Verdict\\n**Winner: Skeptic**")  # Winner.SKEPTIC
        extract_winner("Both sides argued well.")              # Winner.UNKNOWN
    """
    for winner, pattern in WINNER_PATTERNS:
        if pattern.search(verdict):
            return winner
    return Winner.UNKNOWN
