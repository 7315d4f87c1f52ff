"""Interview system components.

This module contains the business logic for conducting adaptive interviews,
including the conversation controller, question generation, speech scoring
and interview-specific services.
"""

# Core orchestrator and controller
from .orchestrator import InterviewOrchestrator
from .controller import ConversationController
from .session import InterviewSession

# Data models
from .models import (
    WordTimestamp, PauseAnalysis, FillerWordAnalysis, SpeechBreakdown,
    ConfidenceMetrics, Turn, CandidateProfile, InterviewResult, TranscriptionResult
)

# Structured schemas and state management
from .schemas import (
    ControllerState, QuestionCategory, QuestionFocus, NextQuestion,
    TurnOutcome, parse_llm_question, parse_follow_up
)

# Speech analysis
from .analysis import SpeechAnalyzer, analyze_transcript_words, score_speech

# Service classes
from .services import (
    AnswerTranscriptionService, SpeechSynthesisService,
    ConversationManager, CapturedAnswer
)

# Decision engine
from .decision_engine import ContextualQuestionGenerator, PromptEngine

# Errors
from .errors import (
    InterviewError, SessionCompleteError, ControllerStateError,
    QuestionGenerationError, QuestionTimeoutError,
    TranscriptionError, NoSpeechDetectedError
)

# Event system
from .events import (
    InterviewEventBus, EventLogger, InterviewMetrics,
    EventType, InterviewEvent, InterviewStartedEvent,
    QuestionAskedEvent, TurnRecordedEvent,
    InterviewCompletedEvent, ErrorOccurredEvent
)

__all__ = [
    # Orchestrator and controller
    "InterviewOrchestrator", "ConversationController", "InterviewSession",

    # Data models
    "WordTimestamp", "PauseAnalysis", "FillerWordAnalysis", "SpeechBreakdown",
    "ConfidenceMetrics", "Turn", "CandidateProfile", "InterviewResult",
    "TranscriptionResult",

    # Schemas and state
    "ControllerState", "QuestionCategory", "QuestionFocus", "NextQuestion",
    "TurnOutcome", "parse_llm_question", "parse_follow_up",

    # Speech analysis
    "SpeechAnalyzer", "analyze_transcript_words", "score_speech",

    # Services
    "AnswerTranscriptionService", "SpeechSynthesisService",
    "ConversationManager", "CapturedAnswer",

    # Decision engine
    "ContextualQuestionGenerator", "PromptEngine",

    # Errors
    "InterviewError", "SessionCompleteError", "ControllerStateError",
    "QuestionGenerationError", "QuestionTimeoutError",
    "TranscriptionError", "NoSpeechDetectedError",

    # Events
    "InterviewEventBus", "EventLogger", "InterviewMetrics",
    "EventType", "InterviewEvent", "InterviewStartedEvent",
    "QuestionAskedEvent", "TurnRecordedEvent",
    "InterviewCompletedEvent", "ErrorOccurredEvent",
]
