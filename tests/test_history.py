import json

import pytest

from hiresight.infrastructure.data import (
    HistoryEntry, InMemoryHistoryRepository, JsonFileHistoryRepository,
    interview_entry, aptitude_entry
)
from hiresight.interview.models import InterviewResult, Turn
from hiresight.aptitude import AnswerRecord, AptitudeCategory, score_answers


def make_result(average_confidence=82.4, ended_early=False):
    turns = [
        Turn(index=0, question_text="Q1", answer_text="A1", is_follow_up=False, timestamp=0.0, topic="introduction"),
        Turn(index=1, question_text="Q2", answer_text="A2", is_follow_up=True, timestamp=1.0, topic="follow-up"),
    ]
    return InterviewResult(
        session_id="s-1", turns=turns, topics_covered=["follow-up", "introduction"],
        average_confidence=average_confidence, duration_seconds=125.0, ended_early=ended_early,
    )


def test_interview_entry_uses_average_confidence():
    entry = interview_entry(make_result(), user_id="u1", domain="Backend")

    assert entry.kind == "interview"
    assert entry.score == 82
    assert entry.status == "completed"
    assert entry.duration_label == "2:05"
    assert entry.details["questions"] == ["Q1", "Q2"]
    assert entry.details["responses"] == ["A1", "A2"]
    assert entry.details["domain"] == "Backend"


def test_interview_entry_without_metrics_scores_zero():
    entry = interview_entry(make_result(average_confidence=None, ended_early=True))
    assert entry.score == 0
    assert entry.status == "ended_early"


def test_aptitude_entry_uses_overall_score():
    answers = [
        AnswerRecord("q1", AptitudeCategory.VERBAL_ABILITY, 1, is_correct=True),
        AnswerRecord("q2", AptitudeCategory.VERBAL_ABILITY, 0, is_correct=False),
    ]
    entry = aptitude_entry(score_answers(answers, time_taken_seconds=60.0), user_id="u1")

    assert entry.kind == "aptitude"
    assert entry.score == 50
    assert entry.details["kind"] == "formal"
    assert entry.duration_seconds == 60.0


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        HistoryEntry(kind="quiz", score=10)


def test_in_memory_repository_latest_and_aptitude_gate():
    repo = InMemoryHistoryRepository()
    assert not repo.has_completed_aptitude("u1")

    first = HistoryEntry(kind="interview", score=70, user_id="u1")
    second = HistoryEntry(kind="interview", score=90, user_id="u1")
    repo.save(first)
    repo.save(second)
    repo.save(HistoryEntry(kind="aptitude", score=60, user_id="u1"))

    assert repo.latest("u1", "interview").score == 90
    assert repo.get("u1", first.entry_id) == first
    assert repo.has_completed_aptitude("u1")
    assert repo.load("u2") == []


def test_json_repository_persists_entries(tmp_path):
    repo = JsonFileHistoryRepository(str(tmp_path))
    entry = interview_entry(make_result(), user_id="u1")
    repo.save(entry)

    reloaded = JsonFileHistoryRepository(str(tmp_path)).load("u1")
    assert reloaded == [entry]


def test_json_repository_skips_malformed_entries(tmp_path):
    repo = JsonFileHistoryRepository(str(tmp_path))
    repo.save(HistoryEntry(kind="aptitude", score=75, user_id="u1"))
    path = repo._get_history_path("u1")
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    data.append({"kind": "quiz", "score": 1})
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)

    entries = repo.load("u1")
    assert len(entries) == 1
    assert entries[0].score == 75
