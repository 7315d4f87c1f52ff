"""
Interview session state: the ordered list of turns and the topics covered so far.
"""
import time
import uuid
import logging
from typing import Optional, Dict, Any, List, Set

from .models import Turn, ConfidenceMetrics
from .errors import SessionCompleteError

logger = logging.getLogger("session")


class InterviewSession:
    """
    Holds the turns of one interview.

    Turns are only created here, are appended in order and never modified.
    Once the session is complete it stays complete.
    """

    def __init__(self, session_id: Optional[str] = None, started_at: Optional[float] = None):
        self.session_id = session_id or str(uuid.uuid4())
        self.started_at = started_at if started_at is not None else time.time()
        self.completed_at: Optional[float] = None
        self._turns: List[Turn] = []
        self._topics: Set[str] = set()
        self._is_complete = False

    @property
    def turns(self) -> List[Turn]:
        return list(self._turns)

    @property
    def topics_covered(self) -> Set[str]:
        return set(self._topics)

    @property
    def is_complete(self) -> bool:
        return self._is_complete

    def current_turn_index(self) -> int:
        """Index the next appended turn will get."""
        return len(self._turns)

    def draft_turn(self, question: str, answer: str, is_follow_up: bool,
                   topic: Optional[str] = None,
                   confidence_metrics: Optional[ConfidenceMetrics] = None) -> Turn:
        """Build the turn that append_turn would record, without recording it."""
        return Turn(
            index=len(self._turns),
            question_text=question,
            answer_text=answer,
            is_follow_up=is_follow_up,
            timestamp=time.time(),
            topic=topic,
            confidence_metrics=confidence_metrics,
        )

    def append_turn(self, question: str, answer: str, is_follow_up: bool,
                    topic: Optional[str] = None,
                    confidence_metrics: Optional[ConfidenceMetrics] = None) -> Turn:
        """
        Record a question/answer exchange.

        Args:
            question: Question text that was asked
            answer: Finalized answer transcript
            is_follow_up: Whether the question followed up on the previous answer
            topic: Topic label for the question, if known
            confidence_metrics: Speech metrics for this answer only

        Returns:
            The new Turn

        Raises:
            SessionCompleteError: If the session is already complete
        """
        if self._is_complete:
            raise SessionCompleteError(f"Session {self.session_id} is complete")

        turn = self.draft_turn(question, answer, is_follow_up, topic, confidence_metrics)
        self._turns.append(turn)
        if topic:
            self._topics.add(topic)
        logger.debug(f"Session {self.session_id}: recorded turn {turn.index} (topic={topic})")
        return turn

    def mark_complete(self) -> None:
        """Mark the session complete. Calling it again has no effect."""
        if self._is_complete:
            return
        self._is_complete = True
        self.completed_at = time.time()
        logger.info(f"Session {self.session_id} complete after {len(self._turns)} turns")

    @property
    def duration_seconds(self) -> float:
        end = self.completed_at if self.completed_at is not None else time.time()
        return max(0.0, end - self.started_at)

    def average_confidence(self) -> Optional[float]:
        """Mean overall confidence over turns that have metrics."""
        scores = [t.confidence_metrics.overall_score for t in self._turns if t.confidence_metrics]
        if not scores:
            return None
        return sum(scores) / len(scores)

    def stats(self) -> Dict[str, Any]:
        """Summary statistics for the conversation so far."""
        answers = [t.answer_text for t in self._turns]
        return {
            "total_turns": len(self._turns),
            "follow_up_count": sum(1 for t in self._turns if t.is_follow_up),
            "average_answer_length": (sum(len(a) for a in answers) / len(answers)) if answers else 0.0,
            "topics_covered": sorted(self._topics),
            "average_confidence": self.average_confidence(),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "is_complete": self._is_complete,
            "topics_covered": sorted(self._topics),
            "turns": [t.to_dict() for t in self._turns],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InterviewSession':
        session = cls(session_id=data["session_id"], started_at=data.get("started_at"))
        session._turns = [Turn.from_dict(t) for t in data.get("turns", [])]
        session._topics = set(data.get("topics_covered", []))
        session._topics.update(t.topic for t in session._turns if t.topic)
        session._is_complete = bool(data.get("is_complete", False))
        session.completed_at = data.get("completed_at")
        return session
