# Database models and API schemas
from debate_room.models.debate_record import DebateRecord
from debate_room.models.profile import Profile
from debate_room.models.schemas import (
    DebateStateOut,
    EngineResultOut,
    StartDebateRequest,
)

__all__ = [
    "DebateRecord",
    "Profile",
    "DebateStateOut",
    "EngineResultOut",
    "StartDebateRequest",
]
