"""
Conversation turn controller: the state machine that drives one interview.

AWAITING_FIRST_QUESTION -> AWAITING_ANSWER -> PROCESSING_ANSWER -> AWAITING_ANSWER | COMPLETE
"""
import time
import logging
from typing import Optional, List

from .schemas import ControllerState, NextQuestion, TurnOutcome, QuestionCategory
from .models import Turn, CandidateProfile, ConfidenceMetrics, InterviewResult
from .session import InterviewSession
from .events import (
    InterviewEventBus, InterviewStartedEvent, QuestionAskedEvent,
    TurnRecordedEvent, InterviewCompletedEvent, ErrorOccurredEvent
)
from .errors import (
    SessionCompleteError, ControllerStateError,
    QuestionGenerationError, QuestionTimeoutError
)
from .prompts import InterviewPrompts
from .decision_engine import plan_question_count
from ..config import MAX_TURNS

logger = logging.getLogger("controller")


class ConversationController:
    """
    Drives one interview session through its turns.

    Answers are held as pending until the next question has been generated, so a
    failed generation leaves the session exactly as it was and the same answer
    can be retried.
    """

    def __init__(self,
                 question_generator,
                 max_turns: int = MAX_TURNS,
                 event_bus: Optional[InterviewEventBus] = None,
                 session: Optional[InterviewSession] = None,
                 planned_questions: Optional[int] = None):
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.question_generator = question_generator
        self.max_turns = max_turns
        self.event_bus = event_bus or InterviewEventBus()
        self.session = session or InterviewSession()
        self.profile = CandidateProfile()
        self.planned_questions = planned_questions

        self._state = ControllerState.AWAITING_FIRST_QUESTION
        self._current_question: Optional[NextQuestion] = None
        self._pending_answer: Optional[str] = None
        self._pending_metrics: Optional[ConfidenceMetrics] = None
        self._last_outcome: Optional[TurnOutcome] = None
        self._closing_message = ""
        self._ended_early = False
        self._fallbacks = InterviewPrompts.fallback_messages()

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def current_question(self) -> Optional[str]:
        return self._current_question.text if self._current_question else None

    @property
    def pending_answer(self) -> Optional[str]:
        return self._pending_answer

    @property
    def turns(self) -> List[Turn]:
        return self.session.turns

    def start(self, profile: Optional[CandidateProfile] = None) -> str:
        """
        Ask the opening question.

        Args:
            profile: Candidate profile used for question generation

        Returns:
            The opening question text

        Raises:
            ControllerStateError: If the interview has already started
            QuestionGenerationError: If the first question cannot be generated
        """
        if self._state != ControllerState.AWAITING_FIRST_QUESTION:
            raise ControllerStateError("start", self._state)

        self.profile = profile or CandidateProfile()
        if self.planned_questions is None:
            self.planned_questions = plan_question_count(self.profile)

        self._emit(InterviewStartedEvent(
            self.session.session_id, time.time(), self.max_turns, self.planned_questions
        ))
        logger.info(f"Starting interview {self.session.session_id} "
                    f"(planned={self.planned_questions}, max_turns={self.max_turns})")

        used_fallback = False
        try:
            question = self._request_question([])
        except QuestionTimeoutError as e:
            logger.warning(f"Opening question timed out ({e}), using generic opening")
            self._emit_error(e)
            question = self._generic_opening()
            used_fallback = True
        except QuestionGenerationError as e:
            self._emit_error(e)
            raise

        if not question.should_continue:
            logger.warning("Generator declined to open the interview, using generic opening")
            question = self._generic_opening()
            used_fallback = True

        self._ask(question, used_fallback)
        return question.text

    def submit_answer(self, transcript: str,
                      confidence_metrics: Optional[ConfidenceMetrics] = None,
                      turn_index: Optional[int] = None) -> TurnOutcome:
        """
        Record the candidate's answer to the current question and move on.

        Args:
            transcript: Finalized answer transcript
            confidence_metrics: Speech metrics for this answer
            turn_index: Turn the answer belongs to, captured when the answer was captured.
                An index that was already recorded is a resubmission. Without an index
                the answer is always recorded as new.

        Returns:
            TurnOutcome for the recorded turn. A resubmission returns the earlier outcome.

        Raises:
            ValueError: If the transcript is blank
            SessionCompleteError: If the interview is over
            ControllerStateError: If no question is awaiting an answer
            QuestionGenerationError: If the next question cannot be generated; nothing is
                recorded and the answer stays pending for retry()
        """
        if self._state == ControllerState.COMPLETE:
            raise SessionCompleteError(f"Session {self.session.session_id} is complete")
        if self._is_resubmission(turn_index):
            logger.info(f"Ignoring resubmitted answer for turn {turn_index}")
            return self._last_outcome
        if self._state != ControllerState.AWAITING_ANSWER:
            raise ControllerStateError("submit an answer", self._state)
        if not transcript or not transcript.strip():
            raise ValueError("Answer transcript is empty")
        if turn_index is not None and turn_index != self.session.current_turn_index():
            raise ControllerStateError(f"submit an answer for turn {turn_index}", self._state)

        answer = transcript.strip()
        self._pending_answer = answer
        self._pending_metrics = confidence_metrics
        self._state = ControllerState.PROCESSING_ANSWER
        question = self._current_question

        if self.session.current_turn_index() + 1 >= self.max_turns:
            logger.info(f"Maximum of {self.max_turns} turns reached")
            turn = self._record(question, answer, confidence_metrics)
            closing = self._fallbacks["closings"][0]
            return self._complete(turn, closing, reason="max_turns")

        draft = self.session.draft_turn(
            question.text, answer, question.is_follow_up, question.topic, confidence_metrics
        )
        used_fallback = False
        try:
            next_question = self._request_question(self.session.turns + [draft])
        except QuestionTimeoutError as e:
            logger.warning(f"Next question timed out ({e}), using generic question")
            self._emit_error(e)
            next_question = self._generic_question(draft.index + 1)
            used_fallback = True
        except QuestionGenerationError as e:
            logger.error(f"Question generation failed for turn {draft.index}: {e}")
            self._state = ControllerState.AWAITING_ANSWER
            self._emit_error(e)
            raise

        turn = self._record(question, answer, confidence_metrics)

        if not next_question.should_continue:
            closing = next_question.acknowledgement or self._fallbacks["closings"][0]
            return self._complete(turn, closing, reason="generator_finished")

        self._ask(next_question, used_fallback)
        self._last_outcome = TurnOutcome(
            turn=turn,
            next_question=next_question.text,
            acknowledgement=next_question.acknowledgement,
            is_follow_up=next_question.is_follow_up,
            is_complete=False,
            topic=next_question.topic,
        )
        return self._last_outcome

    def retry(self) -> TurnOutcome:
        """
        Resubmit the pending answer after a failed question generation.

        Raises:
            ControllerStateError: If there is no pending answer to retry
        """
        if self._pending_answer is None or self._state != ControllerState.AWAITING_ANSWER:
            raise ControllerStateError("retry", self._state)
        logger.info(f"Retrying answer for turn {self.session.current_turn_index()}")
        return self.submit_answer(self._pending_answer, self._pending_metrics,
                                  turn_index=self.session.current_turn_index())

    def finish(self) -> InterviewResult:
        """End the interview now. Calling it on a finished interview returns the same result."""
        if self._state != ControllerState.COMPLETE:
            self._ended_early = True
            self._closing_message = self._fallbacks["closings"][0]
            self._pending_answer = None
            self._pending_metrics = None
            self._state = ControllerState.COMPLETE
            self.session.mark_complete()
            self._emit_completed("ended_early")
        return self.result()

    def result(self) -> InterviewResult:
        """Current interview results."""
        return InterviewResult(
            session_id=self.session.session_id,
            turns=self.session.turns,
            topics_covered=sorted(self.session.topics_covered),
            average_confidence=self.session.average_confidence(),
            closing_message=self._closing_message,
            duration_seconds=self.session.duration_seconds,
            ended_early=self._ended_early,
        )

    # -------------------------------------------------------------------------

    def _is_resubmission(self, turn_index: Optional[int]) -> bool:
        if turn_index is None or self._last_outcome is None:
            return False
        return turn_index == self._last_outcome.turn.index

    def _request_question(self, history: List[Turn]) -> NextQuestion:
        try:
            question = self.question_generator.generate(history, self.profile, self.planned_questions)
        except QuestionGenerationError:
            raise
        except Exception as e:
            raise QuestionGenerationError(f"Question generator failed: {e}") from e

        if question is None or not question.validate():
            raise QuestionGenerationError(f"Question generator returned an unusable question: {question}")
        return question

    def _record(self, question: NextQuestion, answer: str,
                metrics: Optional[ConfidenceMetrics]) -> Turn:
        turn = self.session.append_turn(
            question.text, answer, question.is_follow_up, question.topic, metrics
        )
        self._pending_answer = None
        self._pending_metrics = None
        self._emit(TurnRecordedEvent(
            self.session.session_id, time.time(), turn.index, answer,
            metrics.overall_score if metrics else None
        ))
        return turn

    def _ask(self, question: NextQuestion, used_fallback: bool) -> None:
        self._current_question = question
        self._state = ControllerState.AWAITING_ANSWER
        self._emit(QuestionAskedEvent(
            self.session.session_id, time.time(), self.session.current_turn_index(),
            question.text, question.is_follow_up, question.topic, used_fallback
        ))

    def _complete(self, turn: Turn, closing: str, reason: str) -> TurnOutcome:
        self._closing_message = closing
        self._current_question = None
        self._state = ControllerState.COMPLETE
        self.session.mark_complete()
        self._emit_completed(reason)
        self._last_outcome = TurnOutcome(
            turn=turn,
            next_question=None,
            acknowledgement=closing,
            is_follow_up=False,
            is_complete=True,
        )
        return self._last_outcome

    def _generic_opening(self) -> NextQuestion:
        return NextQuestion(
            text=InterviewPrompts.template_question(
                QuestionCategory.INTRODUCTION.value, self.profile.domain,
                self.profile.skills, self.profile.projects
            ),
            topic=QuestionCategory.INTRODUCTION.value,
        )

    def _generic_question(self, turn_index: int) -> NextQuestion:
        questions = self._fallbacks["generic_questions"]
        return NextQuestion(text=questions[turn_index % len(questions)], topic="general")

    def _emit_completed(self, reason: str) -> None:
        self._emit(InterviewCompletedEvent(
            self.session.session_id, time.time(), len(self.session.turns),
            reason, self.session.average_confidence()
        ))

    def _emit_error(self, error: Exception) -> None:
        self._emit(ErrorOccurredEvent(
            self.session.session_id, time.time(), type(error).__name__, str(error), "question_generation"
        ))

    def _emit(self, event) -> None:
        self.event_bus.emit(event)
