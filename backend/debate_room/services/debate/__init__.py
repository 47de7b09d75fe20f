"""
Debate Module — Advocate vs. Skeptic debate over a startup idea.

Two fixed personas argue in alternating turns. Before a turn is accepted,
a fact-check gate looks for invented claims about the startup; when it
finds one the debate pauses and asks the founder. A judge scores the
debate on request.

COMPONENTS:
- TurnEngine: The state machine, main entry point
- SessionStore: Live debates, keyed by id
- DiscoveryStage: Pre-debate questions from both personas
- FactCheckGate: Flags unconfirmed claims in drafts
- JudgeStage: Verdict + winner
- EntitlementRoundPolicy: Free vs. premium limits

USAGE:
    from debate_room.services.debate import SessionStore, TurnEngine

    engine = TurnEngine(SessionStore(), client, policy)
    result = await engine.start_session("AI tutoring platform")
    await engine.submit_discovery_answers(result.session_id, skip=True)
    turn = await engine.next_turn(result.session_id)
"""

# Main entry points
from debate_room.services.debate.engine import TurnEngine
from debate_room.services.debate.session_store import SessionStore

# Data models
from debate_room.services.debate.models import (
    Attachment,
    Clarification,
    ClarificationRequest,
    DebateEvent,
    DebateSession,
    DebateSnapshot,
    EngineResult,
    Phase,
    Role,
    Turn,
    TurnEngineState,
    Verdict,
    Winner,
)

# Stages (for advanced usage)
from debate_room.services.debate.discovery import DiscoveryStage
from debate_room.services.debate.fact_check import FactCheckGate
from debate_room.services.debate.judge import JudgeStage

# Collaborator protocols
from debate_room.services.debate.policy import EntitlementRoundPolicy
from debate_room.services.debate.protocols import (
    BaseDebateRecordStore,
    BaseProfileStore,
    BaseRoundPolicy,
)

__all__ = [
    # Main entry points
    "TurnEngine",
    "SessionStore",
    # Data models
    "Attachment",
    "Clarification",
    "ClarificationRequest",
    "DebateEvent",
    "DebateSession",
    "DebateSnapshot",
    "EngineResult",
    "Phase",
    "Role",
    "Turn",
    "TurnEngineState",
    "Verdict",
    "Winner",
    # Stages
    "DiscoveryStage",
    "FactCheckGate",
    "JudgeStage",
    # Protocols
    "EntitlementRoundPolicy",
    "BaseDebateRecordStore",
    "BaseProfileStore",
    "BaseRoundPolicy",
]
