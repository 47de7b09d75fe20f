"""
Debate Errors — The failure taxonomy of the debate engine.

HOW THEY ARE HANDLED:
- SessionNotFound      → user must restart the debate (404)
- SessionBusy          → a step is already running for this session (409)
- InvalidTransition    → operation not legal in the current state (409)
    - RoundLimitExceeded → free rounds used up until the user upgrades (403)
- IncompleteAnswers    → a clarification batch has an empty answer (422)
- GenerationFailure    → transient; retried by the turn loop, then pauses (502)
    - ProviderError, GenerationTimeout, DegenerateOutput
- ConfigurationError   → missing credential; never retried (503)

ClarificationRequired is NOT a failure. It is how a turn tells the engine
to suspend and ask the user something. It never counts against the
failure budget.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from debate_room.services.debate.models import ClarificationRequest, InterruptSource


class DebateError(Exception):
    """Base class for all debate engine errors."""


class SessionNotFound(DebateError):
    """Unknown or expired debate id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Debate {session_id} not found. Please restart the debate.")


class SessionBusy(DebateError):
    """Another mutating request for this session is still in flight."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Debate {session_id} is busy with another request")


class InvalidTransition(DebateError):
    """The requested operation is not allowed from the current state."""


class IncompleteAnswers(DebateError):
    """A clarification batch was submitted with missing answers."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"{len(missing)} question(s) still need an answer")


class AttachmentLimitExceeded(DebateError):
    """Too many or too large files attached for this user's plan."""


class ConfigurationError(DebateError):
    """A required external credential is missing."""


class GenerationFailure(DebateError):
    """The language model call failed or produced nothing usable."""


class ProviderError(GenerationFailure):
    """The provider returned an error (HTTP, rate limit, network)."""


class GenerationTimeout(GenerationFailure):
    """The provider did not answer in time."""


class DegenerateOutput(GenerationFailure):
    """Generation succeeded but the final argument is empty or too short."""


class RoundLimitExceeded(InvalidTransition):
    """The round policy denies another round (free plan exhausted)."""


class ClarificationRequired(Exception):
    """Control-flow signal: the turn cannot be accepted until the user answers."""

    def __init__(
        self,
        questions: list["ClarificationRequest"],
        source: Optional["InterruptSource"] = None,
    ):
        self.questions = questions
        self.source = source
        super().__init__(f"{len(questions)} clarification(s) required")
