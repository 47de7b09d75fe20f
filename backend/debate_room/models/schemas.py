"""
Pydantic schemas for API request/response validation.

These define the shape of data that goes in and out of the API. Response
schemas are built straight from the engine's dataclasses
(from_attributes), so the engine never imports anything from here.

FLOW OVERVIEW:
==============
1. Client sends StartDebateRequest to POST /api/debates
2. Engine runs discovery → EngineResultOut with the question batch
3. Client answers via AnswersRequest → round 1 opens
4. Each step returns EngineResultOut (new state + turn or questions)
5. Streaming endpoints send DebateEventOut frames over SSE
6. POST /api/debates/{id}/judge → EngineResultOut with the verdict
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from debate_room.services.debate.models import InterruptSource, Phase, Role, Winner


# =============================================================================
# DEBATE CONTENT SCHEMAS
# =============================================================================
#
# WHEN USED:
# - TurnOut: every accepted persona turn (history, step results)
# - QuestionOut: pending discovery / fact-check questions
# - ClarificationOut: confirmed founder facts
# - VerdictOut: the judge's result
#

class TurnOut(BaseModel):
    """One accepted persona turn."""
    model_config = ConfigDict(from_attributes=True)

    role: Role
    final_argument: str
    thinking: str = Field(default="", description="Scratch reasoning for the sidebar")
    round_number: int
    created_at: datetime


class QuestionOut(BaseModel):
    """A question waiting for the founder."""
    model_config = ConfigDict(from_attributes=True)

    question: str
    source_claim: str = Field(description="What triggered it, e.g. 'Founder Question'")
    role: Optional[Role] = None


class ClarificationOut(BaseModel):
    """A confirmed founder fact."""
    model_config = ConfigDict(from_attributes=True)

    question: str
    answer: str


class VerdictOut(BaseModel):
    """
    The judge's evaluation.

    USED BY: POST /api/debates/{id}/judge, and state once judged
    """
    model_config = ConfigDict(from_attributes=True)

    text: str
    winner: Winner
    rounds_shown: int
    total_rounds: int


# =============================================================================
# ENGINE STATE SCHEMAS
# =============================================================================

class EngineStateOut(BaseModel):
    """Where the state machine is, and what it is waiting for."""
    model_config = ConfigDict(from_attributes=True)

    phase: Phase
    pending_role: Optional[Role] = None
    pending_questions: list[QuestionOut] = Field(default_factory=list)
    interrupt_source: Optional[InterruptSource] = None
    paused: bool = False
    halted: bool = Field(default=False, description="Paused after repeated failures")
    consecutive_failures: int = 0
    last_error: Optional[str] = None
    verdict: Optional[VerdictOut] = None


class EngineResultOut(BaseModel):
    """
    Result of every mutating debate call.

    The client renders the delta: a new turn, a question batch, a verdict.
    """
    model_config = ConfigDict(from_attributes=True)

    session_id: str
    state: EngineStateOut
    round_counter: int = Field(description="Completed rounds")
    turn: Optional[TurnOut] = None
    questions: list[QuestionOut] = Field(default_factory=list)
    verdict: Optional[VerdictOut] = None
    round_completed: bool = False
    clarifications_added: list[ClarificationOut] = Field(default_factory=list)


class DebateStateOut(BaseModel):
    """
    Full read-only view of a debate.

    USED BY: GET /api/debates/{id}
    """
    model_config = ConfigDict(from_attributes=True)

    session_id: str
    idea: str
    supporting_context: str
    round_counter: int
    history: list[TurnOut]
    clarifications: list[ClarificationOut]
    state: EngineStateOut


class DebateEventOut(BaseModel):
    """One SSE frame from /turn/stream or /run."""
    model_config = ConfigDict(from_attributes=True)

    type: Literal[
        "token", "turn", "clarification", "round_complete", "round_limit", "error", "state"
    ]
    content: str = ""
    error: Optional[str] = None
    result: Optional[EngineResultOut] = None


class SavedDebateOut(BaseModel):
    """A debate from the record store ("My Debates")."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    idea: str
    user_id: Optional[str] = None
    rounds: int
    advocate_arguments: list[str]
    skeptic_arguments: list[str]
    verdict: Optional[str] = None
    winner: Optional[str] = None


# =============================================================================
# API REQUEST SCHEMAS
# =============================================================================
#
# WHEN USED:
# - StartDebateRequest: founder submits an idea (+ files)
# - AnswersRequest: answers to discovery or fact-check questions
# - RestoreRequest: reopen a saved debate
# - EntitlementRequest: payment flow flips premium on/off
#

class AttachmentIn(BaseModel):
    """
    A file attached to the idea.

    PDF/text content must already be extracted to text by the client.
    Images are sent as a base64 data URL.
    """
    type: Literal["image", "pdf", "text"]
    name: str = Field(min_length=1)
    content: str


class StartDebateRequest(BaseModel):
    """
    Request body for POST /api/debates.

    Example:
        {"idea": "AI tutoring platform for high-school maths", "user_id": "u_123"}
    """
    idea: str = Field(min_length=1, description="The startup idea to debate")
    attachments: list[AttachmentIn] = Field(default_factory=list)
    user_id: Optional[str] = None
    model: Optional[str] = Field(
        default=None,
        description="Model to debate with (premium users only)",
    )


class AnswersRequest(BaseModel):
    """
    Request body for the discovery and clarification endpoints.

    Example:
        {"answers": {"How many paying users do you have?": "About 200"}}
        {"skip": true}
    """
    answers: dict[str, str] = Field(
        default_factory=dict,
        description="Question text → answer",
    )
    skip: bool = False


class RestoreRequest(BaseModel):
    """Request body for POST /api/debates/restore."""
    record_id: str
    user_id: Optional[str] = None


class EntitlementRequest(BaseModel):
    """Request body for PUT /api/users/{user_id}/premium."""
    is_premium: bool
