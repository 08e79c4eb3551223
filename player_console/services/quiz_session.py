"""
Quiz Session Engine

State machine for taking a quiz on behalf of the selected player:

    IDLE -> STARTING -> IN_PROGRESS -> SUBMITTING -> COMPLETED -> IDLE
                 \\-> IDLE (start failed)       \\-> IN_PROGRESS (submit failed)

Forward navigation is gated on the current question being answered;
backward navigation is free. Submission is validated locally and never
reaches the network with an unanswered question.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from player_console.clients.gamelayer_client import GameLayerClient
from player_console.errors import ConsoleError, IncompleteAnswers, InvalidQuizState
from player_console.logging import ConsoleLogger, get_logger
from player_console.models import (
    Credentials,
    QuizOutcome,
    QuizQuestion,
    questions_from_api,
    text_value,
)
from player_console.notifications import ERROR, INFO, SUCCESS, WARNING, LoggingNotifier, Notifier

COMPLETED_NOTICE = "Quiz completed!"


class QuizState(Enum):
    IDLE = "idle"
    STARTING = "starting"
    IN_PROGRESS = "in_progress"
    SUBMITTING = "submitting"
    COMPLETED = "completed"


@dataclass
class QuizSession:
    """
    Local state of one quiz attempt.

    Attributes:
        quiz_id: Quiz being taken
        player_ref: Player the quiz was started for; answers are submitted for them
        questions: Questions in display order
        current_index: Index of the displayed question
        answers: question id -> chosen choice id, only for answered questions
    """
    quiz_id: str
    player_ref: str
    questions: List[QuizQuestion]
    current_index: int = 0
    answers: Dict[str, str] = field(default_factory=dict)

    @property
    def current_question(self) -> QuizQuestion:
        return self.questions[self.current_index]

    @property
    def is_first(self) -> bool:
        return self.current_index == 0

    @property
    def is_last(self) -> bool:
        return self.current_index == len(self.questions) - 1

    def is_answered(self, question_id: str) -> bool:
        return bool(self.answers.get(question_id))

    def missing_answers(self) -> List[str]:
        return [q.id for q in self.questions if not self.is_answered(q.id)]

    def answer_payload(self) -> List[Dict[str, Any]]:
        """One entry per question with its single chosen answer."""
        return [
            {"questionId": q.id, "answerIds": [self.answers[q.id]]}
            for q in self.questions
        ]


def interpret_feedback(payload: Any) -> QuizOutcome:
    """
    Pick the one message to surface after a submission.

    Precedence: failMessage, passMessage, message/result, generic notice.
    Each key is looked up at the top level first, then in a nested `quiz`.
    """
    sources = []
    if isinstance(payload, dict):
        sources.append(payload)
        if isinstance(payload.get("quiz"), dict):
            sources.append(payload["quiz"])

    def lookup(key: str) -> str:
        for source in sources:
            value = text_value(source.get(key))
            if value:
                return value
        return ''

    fail_message = lookup("failMessage")
    if fail_message:
        return QuizOutcome(passed=False, message=fail_message, kind=WARNING)
    pass_message = lookup("passMessage")
    if pass_message:
        return QuizOutcome(passed=True, message=pass_message, kind=SUCCESS)
    generic = lookup("message") or lookup("result")
    if generic:
        return QuizOutcome(message=generic, kind=INFO)
    return QuizOutcome(message=COMPLETED_NOTICE, kind=SUCCESS)


class QuizSessionEngine:
    """
    Drives one quiz session at a time.

    Usage:
        engine = QuizSessionEngine(client, on_complete=console.refresh)
        await engine.start(credentials, "quiz-1", "p1")
        engine.answer("q1", "a")
        engine.next()
        ...
        outcome = await engine.submit(credentials)

    reset() abandons whatever attempt is active; a start still in flight
    resolves to None and leaves the engine idle.
    """

    def __init__(
        self,
        client: GameLayerClient,
        notifier: Optional[Notifier] = None,
        on_complete: Optional[Callable[[], Awaitable[None]]] = None,
        logger: Optional[ConsoleLogger] = None,
    ):
        self.client = client
        self.logger = logger or get_logger()
        self.notifier = notifier or LoggingNotifier(self.logger)
        self.on_complete = on_complete
        self.state = QuizState.IDLE
        self.session: Optional[QuizSession] = None
        self.last_outcome: Optional[QuizOutcome] = None
        # Bumped by reset(); a start dispatched under an older attempt is dropped
        self._attempt = 0

    def _transition(self, new_state: QuizState) -> None:
        quiz_id = self.session.quiz_id if self.session else None
        self.logger.quiz_transition(quiz_id, self.state.value, new_state.value)
        self.state = new_state

    def _require(self, *states: QuizState) -> None:
        if self.state not in states:
            raise InvalidQuizState(f"Quiz is {self.state.value}; expected {', '.join(s.value for s in states)}")

    def _require_session(self) -> QuizSession:
        self._require(QuizState.IN_PROGRESS)
        if self.session is None:
            raise InvalidQuizState("No quiz session is active")
        return self.session

    # =========================================================================
    # Starting
    # =========================================================================

    async def start(self, credentials: Credentials, quiz_id: str, player_ref: str) -> Optional[QuizSession]:
        """
        Start a quiz for a player.

        Returns:
            The new session, or None if the start failed (already notified)
            or was abandoned by reset() while in flight (silently)

        Raises:
            InvalidQuizState: If a session is already active
        """
        self._require(QuizState.IDLE)
        attempt = self._attempt
        self._transition(QuizState.STARTING)
        try:
            payload = await self.client.start_quiz(credentials, quiz_id, player_ref)
            questions = questions_from_api(payload)
            if not questions and attempt == self._attempt:
                questions = questions_from_api(await self.client.get_quiz(credentials, quiz_id))
            if not questions:
                raise ConsoleError("This quiz has no questions")
        except ConsoleError as e:
            if attempt != self._attempt:
                self.logger.stale_response(f"quiz {quiz_id} start", player_ref, None)
                return None
            self._transition(QuizState.IDLE)
            self.notifier.notify(ERROR, e.message)
            return None

        if attempt != self._attempt:
            self.logger.stale_response(f"quiz {quiz_id} start", player_ref, None)
            return None

        self.session = QuizSession(quiz_id=quiz_id, player_ref=player_ref, questions=questions)
        self._transition(QuizState.IN_PROGRESS)
        return self.session

    # =========================================================================
    # Answering & navigation
    # =========================================================================

    def answer(self, question_id: str, choice_id: str) -> None:
        """Record (or overwrite) the answer to a question. The current index is unchanged."""
        session = self._require_session()
        question = next((q for q in session.questions if q.id == question_id), None)
        if question is None:
            raise InvalidQuizState(f"Unknown question '{question_id}'")
        if question.choices and choice_id not in {c.id for c in question.choices}:
            raise InvalidQuizState(f"Unknown choice '{choice_id}' for question '{question_id}'")
        session.answers[question_id] = choice_id

    def next(self) -> bool:
        """
        Move to the next question.

        Returns:
            False (state unchanged) if the current question is unanswered or already last
        """
        session = self._require_session()
        if not session.is_answered(session.current_question.id) or session.is_last:
            return False
        session.current_index += 1
        return True

    def previous(self) -> bool:
        """Move to the previous question. Returns False at the first question."""
        session = self._require_session()
        if session.is_first:
            return False
        session.current_index -= 1
        return True

    def cancel(self) -> None:
        """Abandon the in-progress session."""
        self._require(QuizState.IN_PROGRESS)
        self.session = None
        self._transition(QuizState.IDLE)

    def reset(self) -> None:
        """Abandon a starting or in-progress attempt. A submission in flight is left to finish."""
        if self.state not in (QuizState.STARTING, QuizState.IN_PROGRESS):
            return
        self._attempt += 1
        self.session = None
        self._transition(QuizState.IDLE)

    # =========================================================================
    # Submitting
    # =========================================================================

    async def submit(self, credentials: Credentials) -> Optional[QuizOutcome]:
        """
        Validate and submit the answers for the player the quiz was started for.

        Returns:
            The surfaced outcome, or None if the submit call failed (answers kept)

        Raises:
            InvalidQuizState: If no session is in progress
            IncompleteAnswers: If any question is unanswered (no network call)
        """
        session = self._require_session()
        missing = session.missing_answers()
        if missing:
            raise IncompleteAnswers(missing)

        self._transition(QuizState.SUBMITTING)
        try:
            payload = await self.client.complete_quiz(
                credentials, session.quiz_id, session.player_ref, session.answer_payload()
            )
        except ConsoleError as e:
            self._transition(QuizState.IN_PROGRESS)
            self.notifier.notify(ERROR, e.message)
            return None

        outcome = interpret_feedback(payload)
        self.last_outcome = outcome
        self._transition(QuizState.COMPLETED)
        self.notifier.notify(outcome.kind, outcome.message)

        try:
            if self.on_complete is not None:
                await self.on_complete()
        finally:
            self.session = None
            self._transition(QuizState.IDLE)
        return outcome
