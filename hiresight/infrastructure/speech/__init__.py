"""Speech-to-text and text-to-speech modules."""

from .tts import synthesize_speech, list_voices, play_wav_bytes
from .stt import recognize_words, TranscriptionResult

__all__ = ["synthesize_speech", "list_voices", "play_wav_bytes", "recognize_words", "TranscriptionResult"]
