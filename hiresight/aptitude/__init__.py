"""Aptitude tests: question bank client, scoring and result models."""

from .models import (
    AptitudeCategory, AptitudeQuestion, AnswerRecord, AptitudeSession,
    PracticeResult, FormalResult, AptitudeResult
)
from .scoring import score_answers, best_effort_score, grade_answers, category_scores
from .client import AptitudeApiClient, AptitudeApiError

__all__ = [
    "AptitudeCategory", "AptitudeQuestion", "AnswerRecord", "AptitudeSession",
    "PracticeResult", "FormalResult", "AptitudeResult",
    "score_answers", "best_effort_score", "grade_answers", "category_scores",
    "AptitudeApiClient", "AptitudeApiError",
]
