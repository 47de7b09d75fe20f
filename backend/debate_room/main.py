import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from debate_room.api.routes import get_turn_engine, router
from debate_room.config import get_settings
from debate_room.database import Base, async_session, engine as db_engine

# Import models so SQLAlchemy knows about them when creating tables
# Without this import, Base.metadata.create_all() wouldn't know about the debates table
from debate_room.models.debate_record import DebateRecord  # noqa: F401
from debate_room.models.profile import Profile  # noqa: F401
from debate_room.services.debate.engine import TurnEngine
from debate_room.services.debate.generation import GenerationClient
from debate_room.services.debate.policy import EntitlementRoundPolicy
from debate_room.services.debate.session_store import SessionStore
from debate_room.services.record_store import (
    InMemoryDebateRecordStore,
    InMemoryProfileStore,
    SqlDebateRecordStore,
    SqlProfileStore,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# LIFESPAN: Startup and Shutdown Logic
# =============================================================================
#
# Everything BEFORE 'yield' runs once on startup, everything AFTER on shutdown.
#
# Startup wires the debate engine together:
# - Postgres-backed records/profiles when DATABASE_URL is set
# - in-memory stores otherwise (debates still work, just not saved)
# - one SessionStore + TurnEngine for the whole process
#
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""

    # === STARTUP ===
    if db_engine is not None:
        async with db_engine.begin() as conn:
            # If tables already exist, this does nothing (safe to run repeatedly)
            await conn.run_sync(Base.metadata.create_all)
        records = SqlDebateRecordStore(async_session)
        profiles = SqlProfileStore(async_session)
    else:
        logger.warning("DATABASE_URL not set: debates and profiles are kept in memory")
        records = InMemoryDebateRecordStore()
        profiles = InMemoryProfileStore()

    client = GenerationClient(settings)
    if not client.has_api_key:
        logger.warning("OPENAI_API_KEY not set: debates will fail until it is configured")

    app.state.records = records
    app.state.profiles = profiles
    app.state.turn_engine = TurnEngine(
        store=SessionStore(),
        client=client,
        policy=EntitlementRoundPolicy(profiles),
        records=records,
        settings=settings,
    )

    # === YIELD (server is now running and handling requests) ===
    yield

    # === SHUTDOWN ===
    # Close all database connections in the pool
    if db_engine is not None:
        await db_engine.dispose()


app = FastAPI(
    title="Debate Room",
    description="Advocate vs. Skeptic debates over startup ideas, with fact-checked turns",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health_check(engine: TurnEngine = Depends(get_turn_engine)):
    """Health check endpoint."""
    return {"status": "healthy", "has_api_key": engine.client.has_api_key}
