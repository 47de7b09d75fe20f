"""
API Routes — The HTTP surface of the debate engine.

ENDPOINTS:
- POST /api/debates                        → Start a debate (runs discovery)
- POST /api/debates/restore                → Reopen a saved debate (paused)
- GET  /api/debates/{id}                   → Current state for rendering
- POST /api/debates/{id}/discovery         → Answer or skip discovery questions
- POST /api/debates/{id}/turn              → One buffered turn
- POST /api/debates/{id}/turn/stream       → One streamed turn (SSE)
- POST /api/debates/{id}/run               → Self-driving loop (SSE)
- POST /api/debates/{id}/clarifications    → Answer or skip a mid-round interrupt
- POST /api/debates/{id}/judge             → Verdict
- POST /api/debates/{id}/pause | /resume
- GET  /api/users/{user_id}/debates        → "My Debates"
- PUT  /api/users/{user_id}/premium        → Entitlement flip (payment flow)

FLOW:
1. POST /api/debates with the idea → questions from both personas
2. POST .../discovery with answers (or {"skip": true})
3. POST .../run and read events until a clarification, pause or round limit
4. POST .../judge for the verdict

SSE FRAMES:
    data: {"type": "token", "content": "The", ...}\\n\\n
"""

import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import StreamingResponse

from debate_room.models.schemas import (
    AnswersRequest,
    DebateEventOut,
    DebateStateOut,
    EngineResultOut,
    EntitlementRequest,
    RestoreRequest,
    SavedDebateOut,
    StartDebateRequest,
)
from debate_room.services.debate.engine import TurnEngine
from debate_room.services.debate.errors import (
    AttachmentLimitExceeded,
    ConfigurationError,
    DebateError,
    GenerationFailure,
    IncompleteAnswers,
    InvalidTransition,
    RoundLimitExceeded,
    SessionBusy,
    SessionNotFound,
)
from debate_room.services.debate.models import Attachment, DebateEvent
from debate_room.services.debate.protocols import BaseDebateRecordStore, BaseProfileStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


# =============================================================================
# DEPENDENCIES
# =============================================================================
#
# Built once in main.lifespan and stored on app.state.
# Tests swap them with app.dependency_overrides.
#

def get_turn_engine(request: Request) -> TurnEngine:
    return request.app.state.turn_engine


def get_profile_store(request: Request) -> BaseProfileStore:
    return request.app.state.profiles


def get_record_store(request: Request) -> Optional[BaseDebateRecordStore]:
    return request.app.state.records


# =============================================================================
# ERROR MAPPING
# =============================================================================

# Checked in order: subclasses before their parents
_STATUS_CODES = [
    (SessionNotFound, 404),
    (RoundLimitExceeded, 403),
    (SessionBusy, 409),
    (InvalidTransition, 409),
    (IncompleteAnswers, 422),
    (AttachmentLimitExceeded, 422),
    (GenerationFailure, 502),
    (ConfigurationError, 503),
]


def _http_error(error: DebateError) -> HTTPException:
    """Map an engine error onto an HTTP status."""
    status_code = next(
        (code for error_type, code in _STATUS_CODES if isinstance(error, error_type)),
        500,
    )
    detail = {"message": str(error)}
    if isinstance(error, IncompleteAnswers):
        detail["missing"] = error.missing
    if status_code >= 500:
        logger.error(f"Request failed ({status_code}): {error}")
    return HTTPException(status_code=status_code, detail=detail)


def _sse_frame(event: DebateEvent) -> str:
    return f"data: {DebateEventOut.model_validate(event).model_dump_json()}\n\n"


async def _event_stream(events: AsyncIterator[DebateEvent]) -> StreamingResponse:
    """
    Turn engine events into an SSE response.

    The first event is pulled before the response starts so that errors
    raised up front (unknown debate, busy, paused, round limit) still get
    a proper HTTP status instead of a half-open stream.
    """
    try:
        first = await events.__anext__()
    except StopAsyncIteration:
        first = None
    except DebateError as e:
        raise _http_error(e) from e

    async def frames():
        try:
            if first is not None:
                yield _sse_frame(first)
            async for event in events:
                yield _sse_frame(event)
        finally:
            await events.aclose()

    return StreamingResponse(
        frames(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


# =============================================================================
# DEBATE LIFECYCLE
# =============================================================================

@router.post("/debates", response_model=EngineResultOut)
async def start_debate(
    request: StartDebateRequest,
    engine: TurnEngine = Depends(get_turn_engine),
) -> EngineResultOut:
    """
    Start a debate over an idea.

    Runs discovery: the response carries the founder questions (possibly
    none). Answer them via /discovery to open round 1.

    Example:
        POST /api/debates
        {"idea": "AI tutoring platform", "attachments": []}
    """
    logger.info(f"Starting debate: '{request.idea[:80]}'")
    attachments = [
        Attachment(type=a.type, name=a.name, content=a.content)
        for a in request.attachments
    ]
    try:
        result = await engine.start_session(
            request.idea,
            attachments=attachments,
            user_id=request.user_id,
            model=request.model,
        )
    except DebateError as e:
        raise _http_error(e) from e
    return EngineResultOut.model_validate(result)


@router.post("/debates/restore", response_model=EngineResultOut)
async def restore_debate(
    request: RestoreRequest,
    engine: TurnEngine = Depends(get_turn_engine),
) -> EngineResultOut:
    """Reopen a saved debate. It comes back paused; call /resume to continue."""
    try:
        result = await engine.resume_from_record(request.record_id, user_id=request.user_id)
    except DebateError as e:
        raise _http_error(e) from e
    return EngineResultOut.model_validate(result)


@router.get("/debates/{session_id}", response_model=DebateStateOut)
async def get_debate(
    session_id: str,
    engine: TurnEngine = Depends(get_turn_engine),
) -> DebateStateOut:
    """Current state, full history and confirmed facts."""
    try:
        snapshot = engine.get_state(session_id)
    except DebateError as e:
        raise _http_error(e) from e
    return DebateStateOut.model_validate(snapshot)


@router.post("/debates/{session_id}/discovery", response_model=EngineResultOut)
async def submit_discovery(
    session_id: str,
    request: AnswersRequest,
    engine: TurnEngine = Depends(get_turn_engine),
) -> EngineResultOut:
    """
    Answer (or skip) the discovery batch.

    Example:
        POST /api/debates/abc123/discovery
        {"answers": {"Who is your target customer?": "Parents of teens"}}
    """
    try:
        result = await engine.submit_discovery_answers(
            session_id, answers=request.answers, skip=request.skip
        )
    except DebateError as e:
        raise _http_error(e) from e
    return EngineResultOut.model_validate(result)


# =============================================================================
# TURNS
# =============================================================================

@router.post("/debates/{session_id}/turn", response_model=EngineResultOut)
async def take_turn(
    session_id: str,
    engine: TurnEngine = Depends(get_turn_engine),
) -> EngineResultOut:
    """One buffered turn. Returns the accepted turn or the questions that stopped it."""
    try:
        result = await engine.next_turn(session_id)
    except DebateError as e:
        raise _http_error(e) from e
    return EngineResultOut.model_validate(result)


@router.post("/debates/{session_id}/turn/stream")
async def stream_turn(
    session_id: str,
    engine: TurnEngine = Depends(get_turn_engine),
) -> StreamingResponse:
    """One streamed turn: token frames, then the outcome."""
    return await _event_stream(engine.stream_turn(session_id))


@router.post("/debates/{session_id}/run")
async def run_debate(
    session_id: str,
    rounds: Optional[int] = Query(default=None, ge=1, description="Stop after N rounds"),
    engine: TurnEngine = Depends(get_turn_engine),
) -> StreamingResponse:
    """
    Let the debate drive itself.

    Streams until a clarification is needed, the user pauses, the round
    limit is hit, or `rounds` rounds are done. Always ends with a state frame.
    """
    return await _event_stream(engine.run(session_id, max_rounds=rounds))


@router.post("/debates/{session_id}/clarifications", response_model=EngineResultOut)
async def submit_clarifications(
    session_id: str,
    request: AnswersRequest,
    engine: TurnEngine = Depends(get_turn_engine),
) -> EngineResultOut:
    """Answer (or skip) a mid-round interrupt. The interrupted turn is regenerated next."""
    try:
        result = await engine.submit_clarifications(
            session_id, answers=request.answers, skip=request.skip
        )
    except DebateError as e:
        raise _http_error(e) from e
    return EngineResultOut.model_validate(result)


# =============================================================================
# JUDGING AND FLOW CONTROL
# =============================================================================

@router.post("/debates/{session_id}/judge", response_model=EngineResultOut)
async def judge_debate(
    session_id: str,
    engine: TurnEngine = Depends(get_turn_engine),
) -> EngineResultOut:
    """Ask the judge for a verdict (needs at least one complete round)."""
    try:
        result = await engine.request_judgment(session_id)
    except DebateError as e:
        raise _http_error(e) from e
    return EngineResultOut.model_validate(result)


@router.post("/debates/{session_id}/pause", response_model=EngineResultOut)
async def pause_debate(
    session_id: str,
    engine: TurnEngine = Depends(get_turn_engine),
) -> EngineResultOut:
    """Pause after the current step finishes."""
    try:
        result = engine.pause(session_id)
    except DebateError as e:
        raise _http_error(e) from e
    return EngineResultOut.model_validate(result)


@router.post("/debates/{session_id}/resume", response_model=EngineResultOut)
async def resume_debate(
    session_id: str,
    engine: TurnEngine = Depends(get_turn_engine),
) -> EngineResultOut:
    """Clear a pause or a failure halt (also continues a judged debate)."""
    try:
        result = engine.resume(session_id)
    except DebateError as e:
        raise _http_error(e) from e
    return EngineResultOut.model_validate(result)


# =============================================================================
# USERS
# =============================================================================

@router.get("/users/{user_id}/debates", response_model=list[SavedDebateOut])
async def list_user_debates(
    user_id: str,
    limit: int = Query(default=20, ge=1, le=100),
    records: Optional[BaseDebateRecordStore] = Depends(get_record_store),
) -> list[SavedDebateOut]:
    """A user's saved debates, most recent first."""
    if records is None:
        return []
    saved = await records.list_for_user(user_id, limit=limit)
    return [SavedDebateOut.model_validate(s) for s in saved]


@router.put("/users/{user_id}/premium")
async def set_premium(
    user_id: str,
    request: EntitlementRequest,
    profiles: BaseProfileStore = Depends(get_profile_store),
) -> dict:
    """
    Flip a user's premium entitlement.

    Called by the payment flow once a payment is captured. Round limits
    lift on the user's next turn.
    """
    await profiles.set_premium(user_id, request.is_premium)
    return {"user_id": user_id, "is_premium": request.is_premium}
