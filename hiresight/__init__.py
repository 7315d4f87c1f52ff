"""
Hiresight: adaptive interview practice with speech-confidence scoring.

Runs mock interviews whose questions adapt to the candidate's answers,
scores spoken answers for filler words, pauses and fluency, and keeps a
history of interviews and aptitude tests.
"""

__version__ = "1.0.0"

# Main entry points
from .interview.orchestrator import InterviewOrchestrator
from .interview.controller import ConversationController
from .interview.models import Turn, InterviewResult, CandidateProfile

__all__ = ["InterviewOrchestrator", "ConversationController", "Turn", "InterviewResult", "CandidateProfile"]
