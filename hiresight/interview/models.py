"""
Data models for the interview core.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, List, Any


PAUSE_TYPES = ("short", "medium", "long", "excessive")


@dataclass(frozen=True)
class WordTimestamp:
    """A recognized word with its timing in seconds."""
    word: str
    start: float
    end: float
    confidence: float = 1.0
    punctuated_word: Optional[str] = None


@dataclass(frozen=True)
class PauseAnalysis:
    """A gap between two consecutive words."""
    duration: float
    position: int  # index of the word before the gap
    type: str  # short | medium | long | excessive


@dataclass(frozen=True)
class FillerWordAnalysis:
    """Occurrences of one filler word or phrase."""
    word: str
    count: int
    positions: List[int]
    percentage: float  # of total words


@dataclass(frozen=True)
class SpeechBreakdown:
    """Raw measurements behind the confidence scores."""
    total_words: int = 0
    filler_words: List[FillerWordAnalysis] = field(default_factory=list)
    pauses: List[PauseAnalysis] = field(default_factory=list)
    average_pause_duration: float = 0.0
    speech_rate: float = 0.0  # words per minute
    total_speech_time: float = 0.0
    total_pause_time: float = 0.0

    @property
    def filler_count(self) -> int:
        return sum(f.count for f in self.filler_words)


@dataclass(frozen=True)
class ConfidenceMetrics:
    """Speech-quality scores for one answer, all on a 0-100 scale."""
    overall_score: float
    filler_word_score: float
    pause_score: float
    fluency_score: float
    breakdown: SpeechBreakdown = field(default_factory=SpeechBreakdown)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConfidenceMetrics':
        raw = dict(data.get("breakdown") or {})
        breakdown = SpeechBreakdown(
            total_words=int(raw.get("total_words", 0)),
            filler_words=[FillerWordAnalysis(**f) for f in raw.get("filler_words", [])],
            pauses=[PauseAnalysis(**p) for p in raw.get("pauses", [])],
            average_pause_duration=float(raw.get("average_pause_duration", 0.0)),
            speech_rate=float(raw.get("speech_rate", 0.0)),
            total_speech_time=float(raw.get("total_speech_time", 0.0)),
            total_pause_time=float(raw.get("total_pause_time", 0.0)),
        )
        return cls(
            overall_score=float(data.get("overall_score", 0.0)),
            filler_word_score=float(data.get("filler_word_score", 0.0)),
            pause_score=float(data.get("pause_score", 0.0)),
            fluency_score=float(data.get("fluency_score", 0.0)),
            breakdown=breakdown,
        )


@dataclass(frozen=True)
class Turn:
    """One question/answer exchange. Created by the session, never modified."""
    index: int
    question_text: str
    answer_text: str
    is_follow_up: bool
    timestamp: float
    topic: Optional[str] = None
    confidence_metrics: Optional[ConfidenceMetrics] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["confidence_metrics"] = self.confidence_metrics.to_dict() if self.confidence_metrics else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Turn':
        metrics = data.get("confidence_metrics")
        return cls(
            index=int(data["index"]),
            question_text=data["question_text"],
            answer_text=data["answer_text"],
            is_follow_up=bool(data.get("is_follow_up", False)),
            timestamp=float(data["timestamp"]),
            topic=data.get("topic"),
            confidence_metrics=ConfidenceMetrics.from_dict(metrics) if metrics else None,
        )


@dataclass
class CandidateProfile:
    """Resume-derived candidate information passed to question generation."""
    skills: List[str] = field(default_factory=list)
    experience: str = "Not specified"
    domain: str = "General"
    projects: List[str] = field(default_factory=list)
    work_experience: List[Any] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'CandidateProfile':
        data = data or {}
        return cls(
            skills=list(data.get("skills") or []),
            experience=data.get("experience") or "Not specified",
            domain=data.get("domain") or "General",
            projects=list(data.get("projects") or []),
            work_experience=list(data.get("work_experience") or data.get("workExperience") or []),
        )


@dataclass
class InterviewResult:
    """Final interview results."""
    session_id: str
    turns: List[Turn] = field(default_factory=list)
    topics_covered: List[str] = field(default_factory=list)
    average_confidence: Optional[float] = None
    closing_message: str = ""
    duration_seconds: float = 0.0
    ended_early: bool = False


@dataclass
class TranscriptionResult:
    """Recognized transcript with per-word timing."""
    transcript: str
    confidence: float = 0.0
    words: List[WordTimestamp] = field(default_factory=list)
