"""
Debate Models — Data structures for the advocate/skeptic debate.

These dataclasses define the contract between debate components:
- DebateSession: What the session store keeps per debate
- Turn: One persona's accepted contribution
- TurnEngineState: Where the state machine currently is
- EngineResult / DebateSnapshot: What the engine hands back to callers
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class Role(str, Enum):
    """The two fixed adversarial personas."""

    ADVOCATE = "advocate"
    SKEPTIC = "skeptic"

    @property
    def opponent(self) -> "Role":
        return _OPPONENTS[self]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


_OPPONENTS = {
    Role.ADVOCATE: Role.SKEPTIC,
    Role.SKEPTIC: Role.ADVOCATE,
}


class Phase(str, Enum):
    """States of the turn engine."""

    IDLE = "idle"
    DISCOVERY_PENDING = "discovery_pending"
    AWAITING_CLARIFICATION = "awaiting_clarification"
    ADVOCATE_TURN_PENDING = "advocate_turn_pending"
    SKEPTIC_TURN_PENDING = "skeptic_turn_pending"
    ROUND_COMPLETE = "round_complete"
    ROUND_LIMIT_REACHED = "round_limit_reached"
    JUDGING_IN_PROGRESS = "judging_in_progress"
    JUDGED = "judged"


TURN_PHASES = {
    Role.ADVOCATE: Phase.ADVOCATE_TURN_PENDING,
    Role.SKEPTIC: Phase.SKEPTIC_TURN_PENDING,
}


class Winner(str, Enum):
    """Winner vocabulary extracted from the judge's verdict."""

    ADVOCATE = "advocate"
    SKEPTIC = "skeptic"
    DRAW = "draw"
    UNKNOWN = "unknown"


class InterruptSource(str, Enum):
    """What raised the pending clarification batch."""

    DISCOVERY = "discovery"
    FACT_CHECK = "fact_check"
    PERSONA = "persona"


@dataclass
class Turn:
    """
    One persona's accepted contribution to the debate.

    Only turns that cleared the fact-check gate (or whose clarifications
    were answered and then regenerated) ever become a Turn.
    """

    role: Role
    """Which persona spoke"""

    raw_output: str
    """Full generation, including the <thinking> scratchpad"""

    final_argument: str
    """The <output> segment only; what the opponent and the judge see"""

    round_number: int
    """1-indexed round this turn belongs to"""

    thinking: str = ""
    """Scratch reasoning, kept for rendering the thinking sidebar"""

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Clarification:
    """A confirmed fact supplied by the user."""

    question: str
    answer: str


@dataclass
class ClarificationRequest:
    """
    A question waiting for the user.

    Raised by discovery (before round 1), by the fact-check gate, or by a
    persona that explicitly asked for context in its output.
    """

    question: str
    """Text posed to the user"""

    source_claim: str
    """What triggered it: a persona's assertion, or "Founder Question" during discovery"""

    role: Optional[Role] = None
    """Persona that raised it, if any"""


@dataclass
class Attachment:
    """A file attached to the idea. PDF/text arrive already extracted."""

    type: str
    """One of: image, pdf, text"""

    name: str
    content: str
    """Extracted text, an image data URL, or a ready-made image description"""


@dataclass
class DebateSession:
    """
    Everything the session store keeps about one debate.

    idea and supporting_context are fixed at creation. history and
    confirmed_clarifications only ever grow.
    """

    id: str
    idea: str
    supporting_context: str = ""
    user_id: Optional[str] = None
    model: Optional[str] = None
    record_id: Optional[str] = None
    history: list[Turn] = field(default_factory=list)
    confirmed_clarifications: list[Clarification] = field(default_factory=list)
    declined_questions: set[str] = field(default_factory=set)
    round_counter: int = 0
    """Number of fully completed rounds"""

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def current_round(self) -> int:
        """The round currently being argued (1-indexed)."""
        return self.round_counter + 1

    def arguments_for(self, role: Role) -> list[str]:
        """All accepted final arguments for a role, oldest first."""
        return [turn.final_argument for turn in self.history if turn.role == role]

    def last_argument(self, role: Role) -> str:
        arguments = self.arguments_for(role)
        return arguments[-1] if arguments else ""

    def has_asked(self, question: str) -> bool:
        """True if this exact question was already answered or declined."""
        if question in self.declined_questions:
            return True
        return any(c.question == question for c in self.confirmed_clarifications)

    @property
    def completed_pairs(self) -> int:
        """Rounds for which both personas have an accepted argument."""
        return min(
            len(self.arguments_for(Role.ADVOCATE)),
            len(self.arguments_for(Role.SKEPTIC)),
        )


@dataclass
class Verdict:
    """The judge's evaluation of the debate."""

    text: str
    """Final-answer segment of the judge output"""

    winner: Winner
    raw_output: str
    rounds_shown: int
    total_rounds: int


@dataclass
class TurnEngineState:
    """
    Per-session state of the turn engine.

    Owned by the engine only. Not persisted: after a restart a saved
    debate is rebuilt from its record instead.
    """

    phase: Phase = Phase.IDLE
    pending_role: Optional[Role] = None
    pending_previous_argument: str = ""
    pending_questions: list[ClarificationRequest] = field(default_factory=list)
    interrupt_source: Optional[InterruptSource] = None
    paused: bool = False
    halted: bool = False
    """Paused because the consecutive failure budget ran out"""

    consecutive_failures: int = 0
    last_error: Optional[str] = None
    last_error_fatal: bool = False
    """last_error cannot be fixed by retrying (e.g. missing API key)"""

    resume_phase: Optional[Phase] = None
    """Phase to return to after a verdict"""

    verdict: Optional[Verdict] = None

    def snapshot(self) -> "TurnEngineState":
        """Detached copy safe to hand to callers."""
        return replace(self, pending_questions=list(self.pending_questions))


@dataclass
class EngineResult:
    """What every mutating engine call returns: the new state plus any delta."""

    session_id: str
    state: TurnEngineState
    round_counter: int
    turn: Optional[Turn] = None
    questions: list[ClarificationRequest] = field(default_factory=list)
    verdict: Optional[Verdict] = None
    round_completed: bool = False
    clarifications_added: list[Clarification] = field(default_factory=list)


@dataclass
class DebateSnapshot:
    """Read-only view of a debate for rendering."""

    session_id: str
    idea: str
    supporting_context: str
    round_counter: int
    history: list[Turn]
    clarifications: list[Clarification]
    state: TurnEngineState


@dataclass
class DebateEvent:
    """
    One frame of a streamed turn or of the self-driving loop.

    type is one of: token, turn, clarification, round_complete,
    round_limit, error, state
    """

    type: str
    content: str = ""
    result: Optional[EngineResult] = None
    error: Optional[str] = None


@dataclass
class UserProfile:
    """Entitlement view of a user. is_premium is flipped by the payment flow."""

    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    is_premium: bool = False


@dataclass
class SavedDebate:
    """A debate as persisted by the record store."""

    id: str
    idea: str
    user_id: Optional[str] = None
    rounds: int = 0
    advocate_arguments: list[str] = field(default_factory=list)
    skeptic_arguments: list[str] = field(default_factory=list)
    verdict: Optional[str] = None
    winner: Optional[str] = None
