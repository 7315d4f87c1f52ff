"""
Exceptions raised by the interview core.
"""


class InterviewError(Exception):
    """Base class for interview errors."""


class SessionCompleteError(InterviewError):
    """Raised when a completed session is asked to accept more turns."""


class ControllerStateError(InterviewError):
    """Raised when an operation is not allowed in the controller's current state."""

    def __init__(self, operation: str, state):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while controller is {getattr(state, 'value', state)}")


class QuestionGenerationError(InterviewError):
    """Raised when the question-generation collaborator fails."""


class QuestionTimeoutError(QuestionGenerationError):
    """Raised when the question-generation collaborator does not answer in time."""


class TranscriptionError(InterviewError):
    """Raised when speech-to-text fails."""


class NoSpeechDetectedError(TranscriptionError):
    """Raised when the recording contains no recognizable speech."""
