"""
Aptitude scoring: per-category percentages and the overall score.
"""
import logging
from typing import Dict, List, Optional

from .models import (
    AptitudeCategory, AptitudeQuestion, AnswerRecord,
    PracticeResult, FormalResult, AptitudeResult
)

logger = logging.getLogger("aptitude_scoring")


def _percentage(correct: int, total: int) -> float:
    return (correct / total) * 100 if total > 0 else 0.0


def category_scores(answers: List[AnswerRecord]) -> Dict[AptitudeCategory, float]:
    """Percentage correct per category. Categories without answers score 0."""
    stats = {category: [0, 0] for category in AptitudeCategory}
    for answer in answers:
        if not answer.answered:
            continue
        stats[answer.category][1] += 1
        if answer.is_correct:
            stats[answer.category][0] += 1
    return {category: _percentage(c, t) for category, (c, t) in stats.items()}


def grade_answers(questions: List[AptitudeQuestion],
                  selected: Dict[str, Optional[int]]) -> List[AnswerRecord]:
    """
    Check selections against the answer key of practice questions.

    Args:
        questions: Questions with correct_option set
        selected: question_id -> chosen option index (None or missing when unanswered)

    Returns:
        One AnswerRecord per question, in question order
    """
    records = []
    for q in questions:
        choice = selected.get(q.question_id)
        records.append(AnswerRecord(
            question_id=q.question_id,
            category=q.category,
            selected_option=choice,
            is_correct=choice is not None and choice == q.correct_option,
            correct_option=q.correct_option,
        ))
    return records


def score_answers(answers: List[AnswerRecord],
                  total_questions: Optional[int] = None,
                  practice: bool = False,
                  time_taken_seconds: float = 0.0,
                  explanations: Optional[Dict[str, str]] = None) -> AptitudeResult:
    """
    Score a set of answers the way the test backend does: overall percentage of
    answered questions that are correct.

    Returns:
        PracticeResult when practice is True, otherwise FormalResult
    """
    answered = [a for a in answers if a.answered]
    correct = sum(1 for a in answered if a.is_correct)
    total = total_questions if total_questions is not None else len(answers)
    common = dict(
        overall_score=_percentage(correct, len(answered)),
        category_scores=category_scores(answers),
        correct=correct,
        answered=len(answered),
        total_questions=total,
        time_taken_seconds=time_taken_seconds,
    )
    if practice:
        return PracticeResult(explanations=dict(explanations or {}), **common)
    return FormalResult(**common)


def best_effort_score(answers: List[AnswerRecord], total_questions: int,
                      time_taken_seconds: float = 0.0,
                      test_id: Optional[str] = None) -> FormalResult:
    """
    Local estimate used when the backend score is unavailable.
    Correct answers over all questions; unanswered questions count as wrong.
    """
    answered = [a for a in answers if a.answered]
    correct = sum(1 for a in answered if a.is_correct)
    logger.info(f"Using local score estimate: {correct}/{total_questions} correct")
    return FormalResult(
        overall_score=_percentage(correct, total_questions),
        category_scores=category_scores(answers),
        correct=correct,
        answered=len(answered),
        total_questions=total_questions,
        time_taken_seconds=time_taken_seconds,
        is_estimate=True,
        test_id=test_id,
    )
