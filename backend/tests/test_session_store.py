"""
Tests for the in-memory session store.
"""

import pytest

from debate_room.services.debate.errors import SessionBusy, SessionNotFound
from debate_room.services.debate.models import Clarification, Role, Turn
from debate_room.services.debate.session_store import SessionStore


def test_create_and_get():
    store = SessionStore()

    session = store.create(idea="AI tutoring platform", supporting_context="deck summary")

    assert session.id in store
    assert len(store) == 1
    fetched = store.get(session.id)
    assert fetched is session
    assert fetched.round_counter == 0
    assert fetched.current_round == 1
    assert fetched.history == []


def test_unknown_id_raises_not_found():
    store = SessionStore()

    with pytest.raises(SessionNotFound) as exc_info:
        store.get("does-not-exist")

    assert "restart" in str(exc_info.value).lower(), "User must be told to restart"


def test_ids_are_unique():
    store = SessionStore()

    ids = {store.create(idea=f"idea {i}").id for i in range(50)}

    assert len(ids) == 50


def test_turns_keep_call_order():
    store = SessionStore()
    session = store.create(idea="Meal kits for dogs")

    for n in range(3):
        store.append_turn(session.id, Turn(Role.ADVOCATE, f"raw {n}", f"arg {n}", round_number=n + 1))
        store.append_turn(session.id, Turn(Role.SKEPTIC, f"raw {n}", f"counter {n}", round_number=n + 1))

    assert session.arguments_for(Role.ADVOCATE) == ["arg 0", "arg 1", "arg 2"]
    assert session.last_argument(Role.SKEPTIC) == "counter 2"
    assert session.completed_pairs == 3


def test_clarifications_deduplicated_by_question():
    """The same question can never be confirmed twice, whoever raises it."""
    store = SessionStore()
    session = store.create(idea="AI tutoring platform")

    first = store.append_clarifications(
        session.id,
        [Clarification("How many paying users?", "200"), Clarification("Price?", "$30/month")],
    )
    second = store.append_clarifications(
        session.id,
        [Clarification("How many paying users?", "50,000"), Clarification("Team size?", "3")],
    )

    questions = [c.question for c in session.confirmed_clarifications]
    assert questions == ["How many paying users?", "Price?", "Team size?"]
    assert len(first) == 2
    assert [c.question for c in second] == ["Team size?"]
    assert session.confirmed_clarifications[0].answer == "200", "First answer must win"


def test_declined_questions_count_as_asked():
    store = SessionStore()
    session = store.create(idea="AI tutoring platform")

    store.decline_questions(session.id, ["What is your CAC?"])

    assert session.has_asked("What is your CAC?")
    assert not session.has_asked("What is your LTV?")


def test_increment_round():
    store = SessionStore()
    session = store.create(idea="x")

    assert store.increment_round(session.id) == 1
    assert session.current_round == 2


@pytest.mark.asyncio
async def test_exclusive_rejects_second_request():
    """A second mutating request for a busy session is rejected, not interleaved."""
    store = SessionStore()
    session = store.create(idea="AI tutoring platform")

    async with store.exclusive(session.id) as held:
        assert held is session
        with pytest.raises(SessionBusy):
            async with store.exclusive(session.id):
                pass

    # Released again afterwards
    async with store.exclusive(session.id):
        pass


@pytest.mark.asyncio
async def test_exclusive_on_different_sessions_is_independent():
    store = SessionStore()
    a = store.create(idea="a")
    b = store.create(idea="b")

    async with store.exclusive(a.id):
        async with store.exclusive(b.id) as held:
            assert held is b


@pytest.mark.asyncio
async def test_exclusive_unknown_session():
    store = SessionStore()

    with pytest.raises(SessionNotFound):
        async with store.exclusive("nope"):
            pass
