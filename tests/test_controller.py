import pytest

from hiresight.interview.schemas import ControllerState, NextQuestion
from hiresight.interview.events import EventType
from hiresight.interview.errors import (
    SessionCompleteError, ControllerStateError,
    QuestionGenerationError, QuestionTimeoutError
)
from hiresight.interview.controller import ConversationController
from hiresight.interview.prompts import InterviewPrompts
from hiresight.interview.analysis import analyze_transcript_words
from hiresight.interview.testing import MockQuestionGenerator, make_words

FALLBACKS = InterviewPrompts.fallback_messages()


def event_types(bus):
    return [e.event_type for e in bus.received]


def test_start_asks_first_question(make_controller, event_bus, profile):
    controller, generator = make_controller([NextQuestion(text="Tell me about yourself.", topic="introduction")])

    assert controller.start(profile) == "Tell me about yourself."
    assert controller.state == ControllerState.AWAITING_ANSWER
    assert controller.current_question == "Tell me about yourself."
    assert generator.calls[0]["history"] == []
    assert event_types(event_bus) == [EventType.INTERVIEW_STARTED, EventType.QUESTION_ASKED]


def test_start_twice_is_rejected(make_controller):
    controller, _ = make_controller()
    controller.start()
    with pytest.raises(ControllerStateError):
        controller.start()


def test_start_failure_leaves_controller_unstarted(make_controller):
    controller, _ = make_controller([QuestionGenerationError("model unavailable")])

    with pytest.raises(QuestionGenerationError):
        controller.start()
    assert controller.state == ControllerState.AWAITING_FIRST_QUESTION
    assert controller.current_question is None


def test_start_timeout_uses_generic_opening(make_controller, event_bus, profile):
    controller, _ = make_controller([QuestionTimeoutError("too slow")])

    text = controller.start(profile)
    assert text == "Could you tell me a bit about yourself and what interests you about Backend Engineering?"
    asked = [e for e in event_bus.received if e.event_type == EventType.QUESTION_ASKED]
    assert asked[0].data["used_fallback"] is True
    assert EventType.ERROR_OCCURRED in event_types(event_bus)


def test_submit_records_turn_and_returns_next_question(make_controller):
    controller, generator = make_controller([
        NextQuestion(text="Q1", topic="introduction"),
        NextQuestion(text="Q2", acknowledgement="That's great.", topic="technical"),
    ])
    controller.start()
    metrics = analyze_transcript_words(make_words("i enjoy building reliable backend systems"))

    outcome = controller.submit_answer("  I enjoy building reliable backend systems  ", metrics)

    assert outcome.turn.index == 0
    assert outcome.turn.question_text == "Q1"
    assert outcome.turn.answer_text == "I enjoy building reliable backend systems"
    assert outcome.turn.confidence_metrics is metrics
    assert outcome.next_question == "Q2"
    assert outcome.prompt_text == "That's great. Q2"
    assert not outcome.is_complete
    assert controller.current_question == "Q2"
    assert controller.pending_answer is None
    # The generator sees the answer being processed
    assert [t.answer_text for t in generator.calls[1]["history"]] == ["I enjoy building reliable backend systems"]


def test_resubmitted_answer_returns_same_outcome(make_controller):
    controller, generator = make_controller()
    controller.start()

    first = controller.submit_answer("My answer", turn_index=0)
    again = controller.submit_answer("My answer", turn_index=0)
    by_index = controller.submit_answer("different text", turn_index=0)

    assert again is first
    assert by_index is first
    assert len(controller.turns) == 1
    assert len(generator.calls) == 2


def test_identical_answers_on_consecutive_turns_are_both_recorded(make_controller):
    controller, _ = make_controller()
    controller.start()

    first = controller.submit_answer("I am not sure.")
    second = controller.submit_answer("I am not sure.")

    assert second is not first
    assert [t.answer_text for t in controller.turns] == ["I am not sure.", "I am not sure."]
    assert [t.index for t in controller.turns] == [0, 1]


def test_mismatched_turn_index_is_rejected(make_controller):
    controller, _ = make_controller()
    controller.start()
    with pytest.raises(ControllerStateError):
        controller.submit_answer("My answer", turn_index=3)
    assert controller.turns == []


def test_blank_answer_is_rejected(make_controller):
    controller, _ = make_controller()
    controller.start()
    with pytest.raises(ValueError):
        controller.submit_answer("   ")
    assert controller.state == ControllerState.AWAITING_ANSWER


def test_submit_before_start_is_rejected(make_controller):
    controller, _ = make_controller()
    with pytest.raises(ControllerStateError):
        controller.submit_answer("hello")


def test_generation_failure_keeps_answer_pending(make_controller, event_bus):
    controller, _ = make_controller([
        NextQuestion(text="Q1"),
        QuestionGenerationError("model unavailable"),
        NextQuestion(text="Q2"),
    ])
    controller.start()

    with pytest.raises(QuestionGenerationError):
        controller.submit_answer("My answer")

    assert controller.state == ControllerState.AWAITING_ANSWER
    assert controller.turns == []
    assert controller.pending_answer == "My answer"
    assert controller.current_question == "Q1"

    outcome = controller.retry()
    assert outcome.turn.answer_text == "My answer"
    assert outcome.next_question == "Q2"
    assert len(controller.turns) == 1
    assert controller.pending_answer is None
    assert event_types(event_bus).count(EventType.ERROR_OCCURRED) == 1


def test_unexpected_generator_error_is_wrapped(make_controller):
    controller, _ = make_controller([NextQuestion(text="Q1"), RuntimeError("boom")])
    controller.start()
    with pytest.raises(QuestionGenerationError):
        controller.submit_answer("My answer")
    assert controller.turns == []


def test_empty_question_counts_as_failure(make_controller):
    controller, _ = make_controller([NextQuestion(text="Q1"), NextQuestion(text="  ")])
    controller.start()
    with pytest.raises(QuestionGenerationError):
        controller.submit_answer("My answer")
    assert controller.state == ControllerState.AWAITING_ANSWER


def test_retry_without_pending_answer_is_rejected(make_controller):
    controller, _ = make_controller()
    controller.start()
    with pytest.raises(ControllerStateError):
        controller.retry()


def test_timeout_falls_back_to_generic_question(make_controller, event_bus):
    controller, _ = make_controller([NextQuestion(text="Q1"), QuestionTimeoutError("too slow")])
    controller.start()

    outcome = controller.submit_answer("My answer")

    assert outcome.next_question == FALLBACKS["generic_questions"][1]
    assert outcome.topic == "general"
    assert len(controller.turns) == 1
    assert EventType.ERROR_OCCURRED in event_types(event_bus)


def test_max_turns_completes_without_asking_generator(make_controller, event_bus):
    controller, generator = make_controller(
        [NextQuestion(text="Q1"), NextQuestion(text="Q2"), NextQuestion(text="Q3")],
        max_turns=2,
    )
    controller.start()
    controller.submit_answer("first answer")
    outcome = controller.submit_answer("second answer")

    assert outcome.is_complete
    assert outcome.next_question is None
    assert outcome.acknowledgement == FALLBACKS["closings"][0]
    assert controller.state == ControllerState.COMPLETE
    assert len(controller.turns) == 2
    assert len(generator.calls) == 2
    completed = [e for e in event_bus.received if e.event_type == EventType.INTERVIEW_COMPLETED]
    assert completed[0].data["reason"] == "max_turns"


def test_generator_can_end_interview(make_controller):
    controller, _ = make_controller([
        NextQuestion(text="Q1"),
        NextQuestion(text=None, should_continue=False, acknowledgement="Thanks, that's all."),
    ])
    controller.start()

    outcome = controller.submit_answer("My answer")

    assert outcome.is_complete
    assert controller.result().closing_message == "Thanks, that's all."
    assert controller.session.is_complete


def test_answer_after_completion_is_rejected(make_controller):
    controller, _ = make_controller(max_turns=1)
    controller.start()
    controller.submit_answer("only answer")

    with pytest.raises(SessionCompleteError):
        controller.submit_answer("another answer")
    with pytest.raises(SessionCompleteError):
        controller.submit_answer("only answer")
    with pytest.raises(SessionCompleteError):
        controller.submit_answer("only answer", turn_index=0)


def test_finish_ends_early_once(make_controller, event_bus):
    controller, _ = make_controller()
    controller.start()
    controller.submit_answer("My answer")

    result = controller.finish()
    again = controller.finish()

    assert result.ended_early and again.ended_early
    assert len(result.turns) == 1
    assert result.closing_message == FALLBACKS["closings"][0]
    assert controller.state == ControllerState.COMPLETE
    assert event_types(event_bus).count(EventType.INTERVIEW_COMPLETED) == 1


def test_max_turns_must_be_positive():
    with pytest.raises(ValueError):
        ConversationController(MockQuestionGenerator(), max_turns=0)
