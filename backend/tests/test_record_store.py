"""
Tests for the in-memory profile and debate record stores.
"""

import pytest

from debate_room.services.debate.models import DebateSession, Role, Turn, UserProfile
from debate_room.services.record_store import InMemoryDebateRecordStore, InMemoryProfileStore


# =============================================================================
# PROFILES
# =============================================================================

@pytest.mark.asyncio
async def test_profile_upsert_get_delete():
    store = InMemoryProfileStore()

    await store.upsert(UserProfile(user_id="u1", email="founder@example.com", name="Sam"))
    profile = await store.get("u1")
    assert profile.email == "founder@example.com"
    assert profile.is_premium is False

    await store.upsert(UserProfile(user_id="u1", email="new@example.com", is_premium=True))
    assert (await store.get("u1")).email == "new@example.com", "Upsert replaces the profile"

    await store.delete("u1")
    assert await store.get("u1") is None

    # Deleting twice is harmless
    await store.delete("u1")


@pytest.mark.asyncio
async def test_set_premium_creates_missing_profile():
    store = InMemoryProfileStore()

    await store.set_premium("u2", True)

    assert (await store.get("u2")).is_premium is True


# =============================================================================
# DEBATE RECORDS
# =============================================================================

@pytest.mark.asyncio
async def test_records_listed_newest_first_per_user():
    store = InMemoryDebateRecordStore()
    first = await store.create(DebateSession(id="a", idea="Meal kits for dogs", user_id="u1"))
    await store.create(DebateSession(id="b", idea="Other founder's idea", user_id="u2"))
    second = await store.create(DebateSession(id="c", idea="AI tutoring platform", user_id="u1"))

    mine = await store.list_for_user("u1")

    assert [r.id for r in mine] == [second, first]
    assert [r.id for r in await store.list_for_user("u1", limit=1)] == [second]


@pytest.mark.asyncio
async def test_progress_overwrites_arguments():
    store = InMemoryDebateRecordStore()
    session = DebateSession(id="a", idea="AI tutoring platform")
    record_id = await store.create(session)

    session.history += [
        Turn(Role.ADVOCATE, "", "adv", round_number=1),
        Turn(Role.SKEPTIC, "", "skep", round_number=1),
    ]
    session.round_counter = 1
    await store.save_progress(record_id, session)

    saved = await store.get(record_id)
    assert saved.rounds == 1
    assert saved.advocate_arguments == ["adv"]
    assert saved.skeptic_arguments == ["skep"]
