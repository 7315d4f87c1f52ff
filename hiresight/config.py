"""
Hiresight Configuration System
==============================

This file contains ALL configuration for the Hiresight interview core.
- User settings at the top (things users might want to change)
- Internal constants at the bottom (scoring thresholds, technical defaults)
"""
import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# USER SETTINGS - Edit these to customize the interview
# =============================================================================

# REQUIRED: Set your Google Cloud project (used for the LLM and speech APIs)
GOOGLE_CLOUD_PROJECT = "your-project-id"  # Change this!
GOOGLE_APPLICATION_CREDENTIALS = None  # Optional: path to credentials JSON

# Interview settings
MAX_TURNS = 12
MIN_QUESTIONS = 8
WORKDIR = "./_hiresight"
INTERVIEW_FOCUS = "Software Engineering"

# Speech settings
ENABLE_TTS = False
TTS_VOICE = "en-US-Neural2-F"
LANGUAGE_CODE = "en-US"

# Aptitude / history backend
API_BASE_URL = "http://localhost:5000/api"
API_TOKEN = None
HISTORY_DIR = "./_hiresight/history"

# Logging
LOG_FILE = "./_hiresight/interview.log"
LOG_LEVEL = "INFO"


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

# Audio processing
SAMPLE_RATE_TARGET = 16000
TARGET_RMS = 0.06
MAX_AUDIO_BYTES = 10 * 1024 * 1024

# Pause classification (seconds)
PAUSE_MIN_GAP = 0.1
PAUSE_SHORT_MAX = 0.5
PAUSE_MEDIUM_MAX = 1.0
PAUSE_LONG_MAX = 2.0

# Speech rate target band (words per minute)
SPEECH_RATE_MIN_WPM = 120.0
SPEECH_RATE_MAX_WPM = 180.0
SPEECH_RATE_PENALTY_PER_WPM = 0.5
SPEECH_RATE_MAX_PENALTY = 30.0

# Overall score weights (filler, pause, fluency)
OVERALL_WEIGHTS = (0.4, 0.4, 0.2)

SINGLE_WORD_FILLERS = frozenset({
    "um", "uh", "ah", "er", "hmm", "well", "so", "like", "basically",
    "actually", "really", "just", "maybe", "probably", "definitely",
})
MULTI_WORD_FILLERS = frozenset({
    ("you", "know"), ("kind", "of"), ("sort", "of"),
    ("i", "mean"), ("i", "think"), ("i", "guess"),
})

# Question planning
BASE_QUESTIONS = 8
PLANNED_QUESTIONS_MIN = 10
PLANNED_QUESTIONS_MAX = 15
BRIEF_ANSWER_CHARS = 100
MAX_ACKNOWLEDGEMENT_CHARS = 50

# LLM
VERTEX_LOCATION = "us-central1"
MODEL_NAME = "gemini-2.5-flash-lite"
LLM_TIMEOUT = 25
FIRST_QUESTION_TIMEOUT = 45
ACKNOWLEDGEMENT_TIMEOUT = 8
MAX_OUTPUT_TOKENS = 256

# HTTP collaborators
API_TIMEOUT = 15


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    google_cloud_project: str
    google_application_credentials: Optional[str] = None
    max_turns: int = MAX_TURNS
    workdir: str = WORKDIR
    interview_focus: str = INTERVIEW_FOCUS
    enable_tts: bool = ENABLE_TTS
    tts_voice: str = TTS_VOICE
    language_code: str = LANGUAGE_CODE
    api_base_url: str = API_BASE_URL
    api_token: Optional[str] = API_TOKEN
    history_dir: str = HISTORY_DIR
    vertex_location: str = VERTEX_LOCATION
    model_name: str = MODEL_NAME
    llm_timeout: int = LLM_TIMEOUT
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL


def get_config() -> Config:
    """Load configuration, letting environment variables override the settings above."""
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
    credentials = os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or GOOGLE_APPLICATION_CREDENTIALS

    if project == "your-project-id":
        raise ValueError("Please set GOOGLE_CLOUD_PROJECT in config.py or as environment variable")

    max_turns_raw = os.getenv("HIRESIGHT_MAX_TURNS")
    try:
        max_turns = int(max_turns_raw) if max_turns_raw else MAX_TURNS
    except ValueError:
        raise ValueError(f"HIRESIGHT_MAX_TURNS must be an integer, got {max_turns_raw!r}")
    if max_turns < 1:
        raise ValueError("HIRESIGHT_MAX_TURNS must be at least 1")

    return Config(
        google_cloud_project=project,
        google_application_credentials=credentials,
        max_turns=max_turns,
        api_base_url=os.getenv("HIRESIGHT_API_URL") or API_BASE_URL,
        api_token=os.getenv("HIRESIGHT_API_TOKEN") or API_TOKEN,
        log_level=os.getenv("HIRESIGHT_LOG_LEVEL") or LOG_LEVEL,
    )
