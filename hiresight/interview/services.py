"""
Service classes for the interview system.
"""
import os
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .models import ConfidenceMetrics, InterviewResult
from .analysis import SpeechAnalyzer
from .session import InterviewSession
from .errors import TranscriptionError, NoSpeechDetectedError
from ..infrastructure.audio import prepare_for_recognition
from ..config import LANGUAGE_CODE, TTS_VOICE

logger = logging.getLogger("services")


@dataclass
class CapturedAnswer:
    """A finalized answer transcript with the speech metrics behind it."""
    transcript: str
    confidence_metrics: Optional[ConfidenceMetrics] = None
    recognition_confidence: float = 0.0


class AnswerTranscriptionService:
    """Turns a recorded answer into a transcript and confidence metrics."""

    def __init__(self,
                 recognizer: Optional[Callable] = None,
                 analyzer: Optional[SpeechAnalyzer] = None,
                 language_code: str = LANGUAGE_CODE):
        if recognizer is None:
            from ..infrastructure.speech import recognize_words
            recognizer = recognize_words
        self.recognizer = recognizer
        self.analyzer = analyzer or SpeechAnalyzer()
        self.language_code = language_code

    def transcribe(self, wav_bytes: bytes) -> CapturedAnswer:
        """
        Transcribe and score a recorded answer.

        Args:
            wav_bytes: The answer recording as a WAV file

        Returns:
            CapturedAnswer with transcript and metrics

        Raises:
            TranscriptionError: If the audio cannot be decoded or recognition fails
            NoSpeechDetectedError: If no speech was recognized
        """
        try:
            pcm16, sr = prepare_for_recognition(wav_bytes)
        except ValueError as e:
            logger.error(f"Could not decode answer audio: {e}")
            raise TranscriptionError(f"Could not decode answer audio: {e}") from e

        result = self.recognizer(pcm16, sr_hz=sr, language=self.language_code)
        logger.info(f"Speech recognition result: {result.transcript or '(empty)'}")
        if not result.transcript.strip():
            raise NoSpeechDetectedError("No speech detected in the recording")

        metrics = self.analyzer.analyze_words(result.words) if result.words else None
        return CapturedAnswer(
            transcript=result.transcript.strip(),
            confidence_metrics=metrics,
            recognition_confidence=result.confidence,
        )

    def transcribe_file(self, path: str) -> CapturedAnswer:
        with open(path, "rb") as f:
            return self.transcribe(f.read())


class SpeechSynthesisService:
    """Handles text-to-speech. Failures degrade to printing the text."""

    def __init__(self,
                 use_tts: bool = True,
                 voice: str = TTS_VOICE,
                 synthesizer: Optional[Callable[..., bytes]] = None,
                 player: Optional[Callable[[bytes], bool]] = None):
        self.use_tts = use_tts
        self.voice = voice
        self._synthesizer = synthesizer
        self._player = player

    def synthesize(self, text: str, voice: Optional[str] = None) -> Optional[bytes]:
        """
        Synthesize text to WAV audio.

        Returns:
            Audio bytes, or None if synthesis failed
        """
        if not text.strip():
            return None
        try:
            synthesizer = self._synthesizer
            if synthesizer is None:
                from ..infrastructure.speech import synthesize_speech
                synthesizer = synthesize_speech
            return synthesizer(text, voice=voice or self.voice)
        except Exception as e:
            logger.error(f"Google TTS failed: {e}")
            return None

    def list_voices(self) -> List[Dict[str, Any]]:
        from ..infrastructure.speech import list_voices
        return list_voices()

    def speak_or_print(self, message: str, prefix: str = "🤖") -> None:
        """Speak message via TTS or print if TTS is disabled or fails."""
        if self.use_tts:
            audio = self.synthesize(message)
            if audio:
                player = self._player
                if player is None:
                    from ..infrastructure.speech import play_wav_bytes
                    player = play_wav_bytes
                if player(audio):
                    return
        print(f"{prefix} {message}")


class ConversationManager:
    """Manages per-interview workspaces and transcripts on disk."""

    def __init__(self, workdir: str):
        self.workdir = workdir

    def create_conversation_workspace(self, session_id: str) -> str:
        """
        Create the directory for one interview.

        Returns:
            Path of the conversation directory
        """
        conversation_dir = os.path.join(self.workdir, session_id)
        os.makedirs(conversation_dir, exist_ok=True)
        return conversation_dir

    def save_transcript(self, session: InterviewSession, result: InterviewResult) -> str:
        """Write the full session and its summary as JSON. Returns the file path."""
        conversation_dir = self.create_conversation_workspace(session.session_id)
        path = os.path.join(conversation_dir, "transcript.json")
        data = session.to_dict()
        data["summary"] = session.stats()
        data["closing_message"] = result.closing_message
        data["ended_early"] = result.ended_early
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.info(f"Saved transcript to {path}")
        return path
