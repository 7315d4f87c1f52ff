"""
Event-driven architecture for the interview system.
"""
import logging
from abc import ABC
from collections import Counter
from typing import Dict, Any, List, Callable, Optional
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of interview events."""
    INTERVIEW_STARTED = "interview_started"
    QUESTION_ASKED = "question_asked"
    TURN_RECORDED = "turn_recorded"
    INTERVIEW_COMPLETED = "interview_completed"
    ERROR_OCCURRED = "error_occurred"


@dataclass
class InterviewEvent(ABC):
    """Base class for all interview events."""
    event_type: EventType
    session_id: str
    timestamp: float
    data: Dict[str, Any]


@dataclass
class InterviewStartedEvent(InterviewEvent):
    """Event fired when the interview begins."""
    def __init__(self, session_id: str, timestamp: float, max_turns: int, planned_questions: int):
        super().__init__(
            event_type=EventType.INTERVIEW_STARTED,
            session_id=session_id,
            timestamp=timestamp,
            data={"max_turns": max_turns, "planned_questions": planned_questions}
        )


@dataclass
class QuestionAskedEvent(InterviewEvent):
    """Event fired when the interviewer asks a question."""
    def __init__(self, session_id: str, timestamp: float, turn_index: int, question: str,
                 is_follow_up: bool, topic: Optional[str], used_fallback: bool = False):
        super().__init__(
            event_type=EventType.QUESTION_ASKED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "turn_index": turn_index,
                "question": question,
                "is_follow_up": is_follow_up,
                "topic": topic,
                "used_fallback": used_fallback
            }
        )


@dataclass
class TurnRecordedEvent(InterviewEvent):
    """Event fired when an answer is recorded as a turn."""
    def __init__(self, session_id: str, timestamp: float, turn_index: int,
                 answer: str, overall_confidence: Optional[float]):
        super().__init__(
            event_type=EventType.TURN_RECORDED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "turn_index": turn_index,
                "answer": answer,
                "overall_confidence": overall_confidence
            }
        )


@dataclass
class InterviewCompletedEvent(InterviewEvent):
    """Event fired when the interview ends."""
    def __init__(self, session_id: str, timestamp: float, turn_count: int, reason: str,
                 average_confidence: Optional[float]):
        super().__init__(
            event_type=EventType.INTERVIEW_COMPLETED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "turn_count": turn_count,
                "reason": reason,
                "average_confidence": average_confidence
            }
        )


@dataclass
class ErrorOccurredEvent(InterviewEvent):
    """Event fired when an error occurs."""
    def __init__(self, session_id: str, timestamp: float, error_type: str,
                 error_message: str, component: str):
        super().__init__(
            event_type=EventType.ERROR_OCCURRED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "error_type": error_type,
                "error_message": error_message,
                "component": component
            }
        )


EventHandler = Callable[[InterviewEvent], None]


class InterviewEventBus:
    """
    Synchronous publish/subscribe for interview events.

    Handlers registered without an event type receive every event, after the
    type-specific handlers. A failing handler is logged and skipped.
    """

    def __init__(self):
        self._handlers: Dict[Optional[EventType], List[EventHandler]] = {}

    def subscribe(self, event_type: Optional[EventType], handler: EventHandler) -> None:
        """
        Subscribe to one event type, or to all events when event_type is None.

        Args:
            event_type: Type of event to listen for
            handler: Function called with each matching event
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to {event_type.value if event_type else 'all events'}")

    def subscribe_all(self, handler: EventHandler) -> None:
        self.subscribe(None, handler)

    def unsubscribe(self, event_type: Optional[EventType], handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
        else:
            logger.warning(f"Handler not subscribed to {event_type}")

    def handler_count(self, event_type: Optional[EventType] = None) -> int:
        return len(self._handlers.get(event_type, []))

    def emit(self, event: InterviewEvent) -> None:
        """Deliver an event to its subscribers, in subscription order."""
        logger.debug(f"Emitting {event.event_type.value} for session {event.session_id}")
        handlers = self._handlers.get(event.event_type, []) + self._handlers.get(None, [])
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler {getattr(handler, '__name__', handler)} failed "
                             f"on {event.event_type.value}: {e}")

    def clear_handlers(self) -> None:
        self._handlers.clear()
        logger.debug("Cleared all event handlers")


class EventLogger:
    """Mirrors events into the log file."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("event_logger")
        self.log_level = log_level

    def handle_event(self, event: InterviewEvent) -> None:
        level = logging.WARNING if event.event_type == EventType.ERROR_OCCURRED else self.log_level
        self.logger.log(level, f"Event: {event.event_type.value} | Session: {event.session_id} | Data: {event.data}")


class InterviewMetrics:
    """Counts interview events for the end-of-session summary."""

    COUNTERS = (
        "interviews_started", "interviews_completed", "questions_asked", "follow_ups_asked",
        "fallback_questions", "total_turns", "answers_scored", "errors_occurred",
    )

    def __init__(self):
        self._counts: Counter = Counter()

    def handle_event(self, event: InterviewEvent) -> None:
        """Update counters from one event."""
        kind = event.event_type
        if kind == EventType.INTERVIEW_STARTED:
            self._counts["interviews_started"] += 1
        elif kind == EventType.INTERVIEW_COMPLETED:
            self._counts["interviews_completed"] += 1
        elif kind == EventType.QUESTION_ASKED:
            self._counts["questions_asked"] += 1
            self._counts["follow_ups_asked"] += int(bool(event.data.get("is_follow_up")))
            self._counts["fallback_questions"] += int(bool(event.data.get("used_fallback")))
        elif kind == EventType.TURN_RECORDED:
            self._counts["total_turns"] += 1
            self._counts["answers_scored"] += int(event.data.get("overall_confidence") is not None)
        elif kind == EventType.ERROR_OCCURRED:
            self._counts["errors_occurred"] += 1

    def get_metrics(self) -> Dict[str, int]:
        """Current counter snapshot."""
        return {name: self._counts[name] for name in self.COUNTERS}

    def reset(self) -> None:
        self._counts.clear()
