import pytest

from hiresight.interview.session import InterviewSession
from hiresight.interview.errors import SessionCompleteError
from hiresight.interview.analysis import analyze_transcript_words
from hiresight.interview.testing import make_words


def test_turns_are_indexed_in_order():
    session = InterviewSession()
    first = session.append_turn("Q1", "A1", False, topic="introduction")
    second = session.append_turn("Q2", "A2", True, topic="follow-up")

    assert [t.index for t in session.turns] == [0, 1]
    assert first.index == 0 and second.is_follow_up
    assert session.current_turn_index() == 2
    assert session.topics_covered == {"introduction", "follow-up"}


def test_turns_property_is_a_copy():
    session = InterviewSession()
    session.append_turn("Q1", "A1", False)
    session.turns.clear()
    assert len(session.turns) == 1


def test_draft_turn_does_not_record():
    session = InterviewSession()
    draft = session.draft_turn("Q1", "A1", False)
    assert draft.index == 0
    assert session.turns == []


def test_complete_session_rejects_turns():
    session = InterviewSession()
    session.append_turn("Q1", "A1", False)
    session.mark_complete()
    completed_at = session.completed_at
    session.mark_complete()

    assert session.is_complete
    assert session.completed_at == completed_at
    with pytest.raises(SessionCompleteError):
        session.append_turn("Q2", "A2", False)


def test_stats_and_average_confidence():
    session = InterviewSession()
    metrics = analyze_transcript_words(make_words("one two three four five six"))
    session.append_turn("Q1", "abcd", False, topic="technical", confidence_metrics=metrics)
    session.append_turn("Q2", "ab", True)

    stats = session.stats()
    assert stats["total_turns"] == 2
    assert stats["follow_up_count"] == 1
    assert stats["average_answer_length"] == 3
    assert stats["topics_covered"] == ["technical"]
    assert stats["average_confidence"] == metrics.overall_score


def test_average_confidence_without_metrics_is_none():
    session = InterviewSession()
    session.append_turn("Q1", "A1", False)
    assert session.average_confidence() is None


def test_session_survives_serialization():
    session = InterviewSession(session_id="s-1", started_at=100.0)
    metrics = analyze_transcript_words(make_words("um so we shipped it", gaps={1: 1.2}))
    session.append_turn("Q1", "um so we shipped it", False, topic="project-specific",
                        confidence_metrics=metrics)
    session.mark_complete()

    restored = InterviewSession.from_dict(session.to_dict())
    assert restored.session_id == "s-1"
    assert restored.is_complete
    assert restored.turns == session.turns
    assert restored.topics_covered == {"project-specific"}
