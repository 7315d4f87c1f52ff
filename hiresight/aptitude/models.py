"""
Data models for aptitude tests.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List, Union


class AptitudeCategory(str, Enum):
    """Question categories; each gets its own score."""
    DOMAIN_KNOWLEDGE = "DOMAIN_KNOWLEDGE"
    QUANTITATIVE_APTITUDE = "QUANTITATIVE_APTITUDE"
    LOGICAL_REASONING = "LOGICAL_REASONING"
    VERBAL_ABILITY = "VERBAL_ABILITY"


# Keys the backend uses for category scores in completion responses
CATEGORY_SCORE_KEYS = {
    "domainKnowledge": AptitudeCategory.DOMAIN_KNOWLEDGE,
    "quantitative": AptitudeCategory.QUANTITATIVE_APTITUDE,
    "logicalReasoning": AptitudeCategory.LOGICAL_REASONING,
    "verbalAbility": AptitudeCategory.VERBAL_ABILITY,
}


@dataclass
class AptitudeQuestion:
    """A multiple-choice question. Practice questions carry the answer key."""
    question_id: str
    question_text: str
    options: List[str]
    category: AptitudeCategory
    difficulty: str = "medium"
    correct_option: Optional[int] = None
    explanation: Optional[str] = None

    @property
    def is_practice(self) -> bool:
        return self.correct_option is not None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'AptitudeQuestion':
        correct = data.get("correctOption")
        return cls(
            question_id=str(data["id"]),
            question_text=data["questionText"],
            options=list(data.get("options") or []),
            category=AptitudeCategory(data["category"]),
            difficulty=data.get("difficulty") or "medium",
            correct_option=int(correct) if correct is not None else None,
            explanation=data.get("explanation"),
        )


@dataclass
class AnswerRecord:
    """The candidate's answer to one question."""
    question_id: str
    category: AptitudeCategory
    selected_option: Optional[int]
    is_correct: bool = False
    correct_option: Optional[int] = None
    explanation: Optional[str] = None

    @property
    def answered(self) -> bool:
        return self.selected_option is not None


@dataclass
class AptitudeSession:
    """A started test as reported by the backend."""
    test_id: str
    position: str
    is_practice: bool
    total_questions: int
    time_limit_seconds: int
    started_at: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'AptitudeSession':
        return cls(
            test_id=str(data["testId"]),
            position=data.get("position", ""),
            is_practice=bool(data.get("isPractice", False)),
            total_questions=int(data.get("totalQuestions", 0)),
            time_limit_seconds=int(data.get("timeLimit", 0)),
            started_at=data.get("startedAt"),
        )


@dataclass
class _ResultBase:
    overall_score: float
    category_scores: Dict[AptitudeCategory, float]
    correct: int
    answered: int
    total_questions: int
    time_taken_seconds: float = 0.0
    is_estimate: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "overall_score": self.overall_score,
            "category_scores": {c.value: s for c, s in self.category_scores.items()},
            "correct": self.correct,
            "answered": self.answered,
            "total_questions": self.total_questions,
            "time_taken_seconds": self.time_taken_seconds,
            "is_estimate": self.is_estimate,
        }


@dataclass
class PracticeResult(_ResultBase):
    """Practice run: answers and explanations are shown, nothing is recorded."""
    kind: str = field(default="practice", init=False)
    explanations: Dict[str, str] = field(default_factory=dict)


@dataclass
class FormalResult(_ResultBase):
    """Formal test: scored by the backend and saved to history."""
    kind: str = field(default="formal", init=False)
    test_id: Optional[str] = None
    completed_at: Optional[str] = None


AptitudeResult = Union[PracticeResult, FormalResult]
