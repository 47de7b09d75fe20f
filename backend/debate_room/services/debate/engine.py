"""
Turn Engine — The state machine that drives a debate.

WHAT THIS DOES:
Runs alternating Advocate/Skeptic turns over a startup idea, suspends a
turn whenever a fact only the founder knows is missing, resumes exactly
that turn once answered, and hands the finished debate to the judge.

STATES:
    Idle → DiscoveryPending → AdvocateTurnPending → SkepticTurnPending
         → RoundComplete → AdvocateTurnPending (next round)
                         ↘ RoundLimitReached (policy says stop)

    AwaitingClarification(role): entered from either turn state when the
    fact-check gate flags a claim or the persona asks a <clarification>.
    Answering returns to the SAME role's turn, which is regenerated from
    scratch with the new facts. The rejected draft is discarded.

    JudgingInProgress → Judged: reachable from anywhere once one round is
    complete. resume() from Judged returns to the interrupted phase.

ONE TURN, STEP BY STEP:
1. Build the prompt: idea + files + confirmed Q/A facts + own last 8
   arguments (excerpted) + the opponent's last argument
2. Generate (buffered or streamed)
3. Parse <thinking>/<output>/<clarification>
4. Persona asked for clarification?      → suspend
5. Final argument too short?             → DegenerateOutput (a failure)
6. Fact-check gate flags claims?         → suspend
7. Append the turn, advance the state

FAILURES:
Generation failures never advance the state; the same step is retried.
After more than max_consecutive_failures in a row the session is halted
(paused) until the user resumes it. Clarification interrupts are not
failures and reset the counter.

CONCURRENCY:
One step per session at a time (SessionStore.exclusive). Pause is a flag
read only between steps, never inside a generation call.

USAGE:
    engine = TurnEngine(store, client, policy, records)
    result = await engine.start_session("AI tutoring platform")
    await engine.submit_discovery_answers(result.session_id, answers={...})
    async for event in engine.run(result.session_id):
        print(event.type)
"""

import logging
from typing import AsyncIterator, Optional

from debate_room.config import Settings, get_settings
from debate_room.services.debate.attachments import AttachmentSummarizer, check_attachment_limits
from debate_room.services.debate.context import excerpt, format_idea_block
from debate_room.services.debate.discovery import DiscoveryStage
from debate_room.services.debate.errors import (
    ClarificationRequired,
    ConfigurationError,
    DegenerateOutput,
    GenerationFailure,
    IncompleteAnswers,
    InvalidTransition,
    RoundLimitExceeded,
    SessionNotFound,
)
from debate_room.services.debate.fact_check import FactCheckGate
from debate_room.services.debate.generation import GenerationClient
from debate_room.services.debate.judge import JudgeStage
from debate_room.services.debate.models import (
    TURN_PHASES,
    Attachment,
    Clarification,
    ClarificationRequest,
    DebateEvent,
    DebateSession,
    DebateSnapshot,
    EngineResult,
    InterruptSource,
    Phase,
    Role,
    Turn,
    TurnEngineState,
    Verdict,
    Winner,
)
from debate_room.services.debate.parser import parse_response
from debate_room.services.debate.prompts import ARGUE_PROMPTS
from debate_room.services.debate.protocols import BaseDebateRecordStore, BaseRoundPolicy
from debate_room.services.debate.session_store import SessionStore

logger = logging.getLogger(__name__)

# Most questions a persona may raise in one <clarification> interrupt
MAX_PERSONA_QUESTIONS = 3


class TurnEngine:
    """
    Drives every debate in the process.

    One instance per process. Session data lives in the injected
    SessionStore; the per-session TurnEngineState lives here.
    """

    def __init__(
        self,
        store: SessionStore,
        client: GenerationClient,
        policy: BaseRoundPolicy,
        records: Optional[BaseDebateRecordStore] = None,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.client = client
        self.policy = policy
        self.records = records
        self.settings = settings or get_settings()

        self.discovery = DiscoveryStage(client, self.settings)
        self.fact_check = FactCheckGate(client, self.settings)
        self.judge = JudgeStage(client, self.settings)
        self.summarizer = AttachmentSummarizer(client)

        self._states: dict[str, TurnEngineState] = {}

    # =========================================================================
    # SESSION LIFECYCLE
    # =========================================================================

    async def start_session(
        self,
        idea: str,
        attachments: Optional[list[Attachment]] = None,
        user_id: Optional[str] = None,
        model: Optional[str] = None,
    ) -> EngineResult:
        """
        Create a debate and run discovery.

        Args:
            idea: The startup idea
            attachments: Files whose summaries become supporting context
            user_id: Owner (drives entitlements and "My Debates")
            model: Requested model (honored for premium users only)

        Returns:
            EngineResult in DiscoveryPending with the discovery batch

        Raises:
            InvalidTransition: empty idea
            AttachmentLimitExceeded: too many / too large files
            ConfigurationError: no API key
        """
        idea = idea.strip()
        if not idea:
            raise InvalidTransition("Describe your idea before starting a debate")

        attachments = attachments or []
        check_attachment_limits(
            attachments,
            max_files=await self.policy.max_files(user_id),
            max_file_size_mb=self.settings.max_file_size_mb,
        )

        premium = await self.policy.is_premium(user_id)
        supporting_context = await self.summarizer.build_context(attachments, idea)

        session = self.store.create(
            idea=idea,
            supporting_context=supporting_context,
            user_id=user_id,
            model=self.client.resolve_model(model, premium),
        )
        state = TurnEngineState()
        self._states[session.id] = state
        session.record_id = await self._create_record(session)

        self._transition(session, state, Phase.DISCOVERY_PENDING)
        async with self.store.exclusive(session.id):
            questions = await self.discovery.discover(session)

        state.pending_questions = questions
        state.interrupt_source = InterruptSource.DISCOVERY if questions else None
        return self._result(session, state, questions=questions)

    async def resume_from_record(
        self,
        record_id: str,
        user_id: Optional[str] = None,
    ) -> EngineResult:
        """
        Rebuild a saved debate as a new live session.

        The session comes back paused, at the next advocate turn (or at the
        round limit if the policy denies another round).

        Raises:
            SessionNotFound: unknown record (or no record store configured)
        """
        saved = await self.records.get(record_id) if self.records else None
        if saved is None:
            raise SessionNotFound(record_id)

        history = []
        for index, argument in enumerate(saved.advocate_arguments):
            history.append(Turn(Role.ADVOCATE, argument, argument, round_number=index + 1))
            if index < len(saved.skeptic_arguments):
                skeptic = saved.skeptic_arguments[index]
                history.append(Turn(Role.SKEPTIC, skeptic, skeptic, round_number=index + 1))

        owner = saved.user_id or user_id
        premium = await self.policy.is_premium(owner)
        session = self.store.create(
            idea=saved.idea,
            user_id=owner,
            model=self.client.resolve_model(None, premium),
            history=history,
            round_counter=saved.rounds,
            record_id=record_id,
        )

        state = TurnEngineState(paused=True)
        self._states[session.id] = state

        if saved.verdict:
            try:
                winner = Winner(saved.winner or Winner.UNKNOWN.value)
            except ValueError:
                winner = Winner.UNKNOWN
            state.verdict = Verdict(
                text=saved.verdict,
                winner=winner,
                raw_output=saved.verdict,
                rounds_shown=min(saved.rounds, self.settings.judge_round_window),
                total_rounds=saved.rounds,
            )

        unfinished_round = len(saved.advocate_arguments) > len(saved.skeptic_arguments)
        if unfinished_round:
            self._set_turn(session, state, Role.SKEPTIC)
        elif await self.policy.may_continue(session, session.round_counter):
            self._set_turn(session, state, Role.ADVOCATE)
        else:
            self._transition(session, state, Phase.ROUND_LIMIT_REACHED)

        logger.info(
            f"Debate {session.id} restored from record {record_id} "
            f"({saved.rounds} rounds, {len(history)} turns)"
        )
        return self._result(session, state)

    def get_state(self, session_id: str) -> DebateSnapshot:
        """Read-only view for rendering. Calling it never changes anything."""
        session = self.store.get(session_id)
        state = self._state(session_id)
        return DebateSnapshot(
            session_id=session.id,
            idea=session.idea,
            supporting_context=session.supporting_context,
            round_counter=session.round_counter,
            history=list(session.history),
            clarifications=list(session.confirmed_clarifications),
            state=state.snapshot(),
        )

    # =========================================================================
    # CLARIFICATIONS
    # =========================================================================

    async def submit_discovery_answers(
        self,
        session_id: str,
        answers: Optional[dict[str, str]] = None,
        skip: bool = False,
    ) -> EngineResult:
        """
        Answer (or skip) the discovery batch and open round 1.

        Args:
            answers: question text → answer
            skip: Decline every pending question instead of answering

        Raises:
            InvalidTransition: discovery already finished
            IncompleteAnswers: a question was left blank
        """
        async with self.store.exclusive(session_id) as session:
            state = self._state(session_id)
            if state.phase != Phase.DISCOVERY_PENDING:
                raise InvalidTransition("Discovery questions were already answered")

            added = self._resolve_batch(session, state, answers, skip)
            self._set_turn(session, state, Role.ADVOCATE)
            return self._result(session, state, clarifications_added=added)

    async def submit_clarifications(
        self,
        session_id: str,
        answers: Optional[dict[str, str]] = None,
        skip: bool = False,
    ) -> EngineResult:
        """
        Answer (or skip) an in-round interrupt.

        The suspended role's turn becomes pending again. Its rejected draft
        is gone; the next step regenerates it with the new facts.

        Raises:
            InvalidTransition: nothing is waiting for an answer
            IncompleteAnswers: a question was left blank
        """
        async with self.store.exclusive(session_id) as session:
            state = self._state(session_id)
            if state.phase == Phase.DISCOVERY_PENDING:
                raise InvalidTransition("Answer the discovery questions first")
            if state.phase != Phase.AWAITING_CLARIFICATION or state.pending_role is None:
                raise InvalidTransition("No clarification is pending")

            added = self._resolve_batch(session, state, answers, skip)
            self._set_turn(session, state, state.pending_role)
            return self._result(session, state, clarifications_added=added)

    def _resolve_batch(
        self,
        session: DebateSession,
        state: TurnEngineState,
        answers: Optional[dict[str, str]],
        skip: bool,
    ) -> list[Clarification]:
        """Validate the answers, fold them into the session, clear the batch."""
        pending = state.pending_questions
        answers = answers or {}

        if skip:
            self.store.decline_questions(session.id, [q.question for q in pending])
            added = []
            logger.info(f"Debate {session.id}: {len(pending)} question(s) skipped")
        else:
            missing = [
                q.question for q in pending
                if not (answers.get(q.question) or "").strip()
            ]
            if missing:
                raise IncompleteAnswers(missing)
            added = self.store.append_clarifications(
                session.id,
                [Clarification(q.question, answers[q.question].strip()) for q in pending],
            )
            logger.info(f"Debate {session.id}: {len(added)} fact(s) confirmed")

        state.pending_questions = []
        state.interrupt_source = None
        return added

    # =========================================================================
    # TURNS
    # =========================================================================

    async def next_turn(self, session_id: str) -> EngineResult:
        """
        Take one buffered step: generate the pending role's turn.

        Returns:
            EngineResult with either the accepted turn or the questions
            that suspended it

        Raises:
            InvalidTransition: paused, awaiting answers, or judged
            RoundLimitExceeded: the policy denies another round
            GenerationFailure: the turn failed (state unchanged, retry allowed)
            ConfigurationError: no API key
        """
        async with self.store.exclusive(session_id) as session:
            state = self._state(session_id)
            role = await self._ready_role(session, state)
            system_prompt, user_prompt = self.build_turn_prompt(session, role)

            try:
                raw = await self.client.complete(
                    system_prompt,
                    user_prompt,
                    model=session.model,
                    max_tokens=self.settings.turn_max_tokens,
                )
                return await self._accept(session, state, role, raw)
            except GenerationFailure as e:
                self._register_failure(session, state, role, e)
                raise

    async def stream_turn(self, session_id: str) -> AsyncIterator[DebateEvent]:
        """
        Take one streamed step.

        Yields "token" events while the persona writes, then the outcome:
        "turn" (plus "round_complete" / "round_limit"), "clarification",
        or "error". Errors raised before the first event (busy, paused,
        round limit) propagate to the caller.
        """
        async with self.store.exclusive(session_id) as session:
            state = self._state(session_id)
            role = await self._ready_role(session, state)
            async for event in self._stream_step(session, state, role):
                yield event

    async def run(
        self,
        session_id: str,
        max_rounds: Optional[int] = None,
    ) -> AsyncIterator[DebateEvent]:
        """
        Self-driving loop: stream turns until something needs the user.

        Stops on: pause, a clarification, the round limit, a halt after
        repeated failures, a configuration error, or max_rounds completed
        rounds in this run. Always ends with a "state" event.
        """
        async with self.store.exclusive(session_id) as session:
            state = self._state(session_id)
            rounds_done = 0

            while True:
                # Cooperative pause: only checked between steps
                if state.paused:
                    break
                if state.phase == Phase.DISCOVERY_PENDING and state.pending_questions:
                    break
                if state.phase == Phase.AWAITING_CLARIFICATION:
                    break
                if state.phase in (Phase.IDLE, Phase.JUDGING_IN_PROGRESS, Phase.JUDGED):
                    break
                if max_rounds is not None and rounds_done >= max_rounds:
                    break

                try:
                    role = await self._ready_role(session, state)
                except RoundLimitExceeded as e:
                    yield DebateEvent(type="round_limit", content=str(e))
                    break

                stop = False
                async for event in self._stream_step(session, state, role):
                    if event.type == "round_complete":
                        rounds_done += 1
                    if event.type == "round_limit":
                        stop = True
                    if event.type == "error" and state.last_error_fatal:
                        stop = True
                    yield event
                if stop:
                    break

            yield DebateEvent(type="state", result=self._result(session, state))

    async def _stream_step(
        self,
        session: DebateSession,
        state: TurnEngineState,
        role: Role,
    ) -> AsyncIterator[DebateEvent]:
        system_prompt, user_prompt = self.build_turn_prompt(session, role)
        chunks = []
        try:
            async for token in self.client.stream(
                system_prompt,
                user_prompt,
                model=session.model,
                max_tokens=self.settings.turn_max_tokens,
            ):
                chunks.append(token)
                yield DebateEvent(type="token", content=token)
            result = await self._accept(session, state, role, "".join(chunks))
        except GenerationFailure as e:
            self._register_failure(session, state, role, e)
            yield DebateEvent(type="error", error=str(e), result=self._result(session, state))
            return
        except ConfigurationError as e:
            state.last_error = str(e)
            state.last_error_fatal = True
            logger.error(f"Debate {session.id}: {e}")
            yield DebateEvent(type="error", error=str(e), result=self._result(session, state))
            return

        for event in self._outcome_events(result):
            yield event

    def _outcome_events(self, result: EngineResult) -> list[DebateEvent]:
        if result.questions:
            return [DebateEvent(type="clarification", result=result)]

        events = [
            DebateEvent(
                type="turn",
                content=result.turn.final_argument if result.turn else "",
                result=result,
            )
        ]
        if result.round_completed:
            events.append(
                DebateEvent(type="round_complete", content=str(result.round_counter), result=result)
            )
        if result.state.phase == Phase.ROUND_LIMIT_REACHED:
            events.append(
                DebateEvent(type="round_limit", content=self._limit_message(), result=result)
            )
        return events

    async def _ready_role(self, session: DebateSession, state: TurnEngineState) -> Role:
        """Which role may speak now, or why nobody may."""
        if state.paused:
            reason = "halted after repeated failures" if state.halted else "paused"
            raise InvalidTransition(f"Debate is {reason}. Resume it first.")

        if state.phase == Phase.DISCOVERY_PENDING:
            if state.pending_questions:
                raise InvalidTransition("Answer the discovery questions first")
            # An empty discovery batch needs no acknowledgement
            self._set_turn(session, state, Role.ADVOCATE)

        if state.phase in (Phase.ROUND_COMPLETE, Phase.ROUND_LIMIT_REACHED):
            if not await self.policy.may_continue(session, session.round_counter):
                raise RoundLimitExceeded(self._limit_message())
            logger.info(f"Debate {session.id}: opening round {session.current_round}")
            self._set_turn(session, state, Role.ADVOCATE)

        if state.phase == Phase.AWAITING_CLARIFICATION:
            raise InvalidTransition("Answer the pending questions first")
        if state.phase == Phase.ADVOCATE_TURN_PENDING:
            return Role.ADVOCATE
        if state.phase == Phase.SKEPTIC_TURN_PENDING:
            return Role.SKEPTIC
        raise InvalidTransition(f"No turn can be taken while {state.phase.value}")

    def build_turn_prompt(self, session: DebateSession, role: Role) -> tuple[str, str]:
        """
        System and user prompt for one persona turn.

        The user prompt carries the idea, attached files, confirmed facts,
        the persona's own recent arguments and the opponent's last one.
        """
        sections = [format_idea_block(session)]

        own = session.arguments_for(role)[-self.settings.history_window:]
        if own:
            numbered = "\n".join(
                f"{i}. {excerpt(argument, self.settings.argument_excerpt_chars)}"
                for i, argument in enumerate(own, 1)
            )
            sections.append(f"YOUR PREVIOUS ARGUMENTS (do NOT repeat these):\n{numbered}")

        opponent_argument = session.last_argument(role.opponent)
        round_number = session.current_round
        if opponent_argument:
            sections.append(
                f"THE {role.opponent.value.upper()} JUST SAID:\n\"{opponent_argument}\"\n\n"
                f"Round {round_number}. Counter their points directly and add ONE new angle."
            )
        else:
            sections.append(
                f"Round {round_number}. Make your opening argument for why this "
                f"startup will {'succeed' if role == Role.ADVOCATE else 'fail'}."
            )

        return ARGUE_PROMPTS[role], "\n\n".join(sections)

    async def _accept(
        self,
        session: DebateSession,
        state: TurnEngineState,
        role: Role,
        raw: str,
    ) -> EngineResult:
        """Screen a finished generation and either commit it or suspend."""
        try:
            turn = await self._screen(session, role, raw)
        except ClarificationRequired as interrupt:
            return self._suspend(session, state, role, interrupt)
        return await self._commit(session, state, turn)

    async def _screen(self, session: DebateSession, role: Role, raw: str) -> Turn:
        """
        Turn a raw generation into an acceptable Turn.

        Raises:
            ClarificationRequired: persona asked, or fact-check flagged claims
            DegenerateOutput: final argument missing or too short
        """
        parsed = parse_response(raw)

        asked = [q for q in parsed.clarifications if not session.has_asked(q)]
        if asked:
            raise ClarificationRequired(
                [
                    ClarificationRequest(
                        question=q,
                        source_claim=f"{role.display_name} asked",
                        role=role,
                    )
                    for q in asked[:MAX_PERSONA_QUESTIONS]
                ],
                source=InterruptSource.PERSONA,
            )

        if len(parsed.output) < self.settings.min_argument_length:
            raise DegenerateOutput(
                f"The {role.value} produced no usable argument "
                f"({len(parsed.output)} characters)"
            )

        if self.settings.fact_check_enabled:
            flagged = await self.fact_check.check(session, role, parsed.output)
            if flagged:
                raise ClarificationRequired(flagged, source=InterruptSource.FACT_CHECK)

        return Turn(
            role=role,
            raw_output=raw,
            final_argument=parsed.output,
            round_number=session.current_round,
            thinking=parsed.thinking,
        )

    def _suspend(
        self,
        session: DebateSession,
        state: TurnEngineState,
        role: Role,
        interrupt: ClarificationRequired,
    ) -> EngineResult:
        state.pending_role = role
        state.pending_previous_argument = session.last_argument(role.opponent)
        state.pending_questions = list(interrupt.questions)
        state.interrupt_source = interrupt.source
        self._clear_failures(state)
        self._transition(session, state, Phase.AWAITING_CLARIFICATION)
        logger.info(
            f"Debate {session.id}: {role.value} turn suspended, "
            f"{len(interrupt.questions)} question(s) for the founder"
        )
        return self._result(session, state, questions=list(interrupt.questions))

    async def _commit(
        self,
        session: DebateSession,
        state: TurnEngineState,
        turn: Turn,
    ) -> EngineResult:
        self.store.append_turn(session.id, turn)
        self._clear_failures(state)
        logger.info(
            f"Debate {session.id}: {turn.role.value} turn accepted "
            f"(round {turn.round_number}, {len(turn.final_argument)} chars)"
        )

        if turn.role == Role.ADVOCATE:
            self._set_turn(session, state, Role.SKEPTIC)
            return self._result(session, state, turn=turn)

        self._transition(session, state, Phase.ROUND_COMPLETE)
        self.store.increment_round(session.id)
        await self._save_progress(session)

        policy_error = None
        try:
            may_continue = await self.policy.may_continue(session, session.round_counter)
        except Exception as e:
            # Entitlement unknown: park at the limit, the next step asks again
            logger.error(f"Debate {session.id}: round policy check failed: {e}")
            may_continue = False
            policy_error = e

        if may_continue:
            self._set_turn(session, state, Role.ADVOCATE)
        else:
            state.pending_role = None
            self._transition(session, state, Phase.ROUND_LIMIT_REACHED)
            if policy_error is not None:
                state.last_error = f"Could not check the round limit: {policy_error}"

        return self._result(session, state, turn=turn, round_completed=True)

    def _register_failure(
        self,
        session: DebateSession,
        state: TurnEngineState,
        role: Role,
        error: GenerationFailure,
    ) -> None:
        state.consecutive_failures += 1
        state.last_error = str(error)
        state.last_error_fatal = False
        logger.error(
            f"Debate {session.id}: {role.value} turn failed "
            f"({state.consecutive_failures} in a row): {error}"
        )
        if state.consecutive_failures > self.settings.max_consecutive_failures:
            state.paused = True
            state.halted = True
            logger.error(f"Debate {session.id}: halted, waiting for the user to resume")

    # =========================================================================
    # JUDGING, PAUSE, RESUME
    # =========================================================================

    async def request_judgment(self, session_id: str) -> EngineResult:
        """
        Ask the judge for a verdict.

        Allowed from any phase once a full round exists. History and the
        round counter are untouched; resume() returns to the interrupted
        phase.

        Raises:
            InvalidTransition: no complete round yet
            GenerationFailure: judge call failed (phase restored)
        """
        async with self.store.exclusive(session_id) as session:
            state = self._state(session_id)
            if session.completed_pairs < 1:
                raise InvalidTransition("Finish at least one round before asking for a verdict")

            if state.phase != Phase.JUDGED:
                state.resume_phase = state.phase
            previous = state.phase
            self._transition(session, state, Phase.JUDGING_IN_PROGRESS)

            try:
                verdict = await self.judge.judge(session)
            except Exception:
                self._transition(session, state, previous)
                raise

            state.verdict = verdict
            self._transition(session, state, Phase.JUDGED)
            await self._save_verdict(session, verdict)
            return self._result(session, state, verdict=verdict)

    def pause(self, session_id: str) -> EngineResult:
        """Request a pause. Takes effect at the next step boundary."""
        session = self.store.get(session_id)
        state = self._state(session_id)
        state.paused = True
        logger.info(f"Debate {session.id}: paused")
        return self._result(session, state)

    def resume(self, session_id: str) -> EngineResult:
        """
        Clear a pause or a failure halt. From Judged, return to the phase
        the verdict interrupted so the debate can go on.
        """
        session = self.store.get(session_id)
        state = self._state(session_id)
        state.paused = False
        state.halted = False
        self._clear_failures(state)

        if state.phase == Phase.JUDGED:
            if state.resume_phase is None:
                self._set_turn(session, state, Role.ADVOCATE)
            else:
                self._transition(session, state, state.resume_phase)
            state.resume_phase = None

        logger.info(f"Debate {session.id}: resumed at {state.phase.value}")
        return self._result(session, state)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _state(self, session_id: str) -> TurnEngineState:
        self.store.get(session_id)
        return self._states.setdefault(session_id, TurnEngineState())

    def _transition(self, session: DebateSession, state: TurnEngineState, phase: Phase) -> None:
        if state.phase != phase:
            logger.info(f"Debate {session.id}: {state.phase.value} → {phase.value}")
        state.phase = phase

    def _set_turn(self, session: DebateSession, state: TurnEngineState, role: Role) -> None:
        state.pending_role = role
        state.pending_previous_argument = session.last_argument(role.opponent)
        self._transition(session, state, TURN_PHASES[role])

    @staticmethod
    def _clear_failures(state: TurnEngineState) -> None:
        state.consecutive_failures = 0
        state.last_error = None
        state.last_error_fatal = False

    def _limit_message(self) -> str:
        return (
            f"Free debates are limited to {self.settings.max_free_rounds} rounds. "
            "Upgrade to premium to keep going."
        )

    def _result(
        self,
        session: DebateSession,
        state: TurnEngineState,
        turn: Optional[Turn] = None,
        questions: Optional[list[ClarificationRequest]] = None,
        verdict: Optional[Verdict] = None,
        round_completed: bool = False,
        clarifications_added: Optional[list[Clarification]] = None,
    ) -> EngineResult:
        return EngineResult(
            session_id=session.id,
            state=state.snapshot(),
            round_counter=session.round_counter,
            turn=turn,
            questions=questions or [],
            verdict=verdict,
            round_completed=round_completed,
            clarifications_added=clarifications_added or [],
        )

    # Record store writes never break a debate

    async def _create_record(self, session: DebateSession) -> Optional[str]:
        if self.records is None:
            return None
        try:
            return await self.records.create(session)
        except Exception as e:
            logger.error(f"Debate {session.id}: could not create record: {e}")
            return None

    async def _save_progress(self, session: DebateSession) -> None:
        if self.records is None or session.record_id is None:
            return
        try:
            await self.records.save_progress(session.record_id, session)
        except Exception as e:
            logger.error(f"Debate {session.id}: could not save progress: {e}")

    async def _save_verdict(self, session: DebateSession, verdict: Verdict) -> None:
        if self.records is None or session.record_id is None:
            return
        try:
            await self.records.save_verdict(session.record_id, session, verdict)
        except Exception as e:
            logger.error(f"Debate {session.id}: could not save verdict: {e}")
