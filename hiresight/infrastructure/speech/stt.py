"""
Speech-to-text functionality using Google Cloud Speech.
"""
import logging
from typing import List, Optional

from google.cloud import speech

from ...config import LANGUAGE_CODE, SAMPLE_RATE_TARGET
from ...interview.models import WordTimestamp, TranscriptionResult
from ...interview.errors import TranscriptionError

logger = logging.getLogger("speech_stt")


def _seconds(offset) -> float:
    """Word offsets arrive as timedelta (proto-plus) or Duration (raw protobuf)."""
    if offset is None:
        return 0.0
    if hasattr(offset, "total_seconds"):
        return float(offset.total_seconds())
    return float(getattr(offset, "seconds", 0)) + float(getattr(offset, "nanos", 0)) / 1e9


def recognize_words(pcm16_bytes: bytes,
                    sr_hz: int = SAMPLE_RATE_TARGET,
                    language: str = LANGUAGE_CODE,
                    client: Optional[speech.SpeechClient] = None) -> TranscriptionResult:
    """
    Synchronous Google Cloud Speech-to-Text recognition with word time offsets.

    Args:
        pcm16_bytes: Raw mono PCM16 audio
        sr_hz: Sample rate of the audio
        language: BCP-47 language code
        client: Existing SpeechClient to reuse

    Returns:
        TranscriptionResult; empty transcript when no speech was detected

    Raises:
        TranscriptionError: If the recognition request fails
    """
    client = client or speech.SpeechClient()
    audio = speech.RecognitionAudio(content=pcm16_bytes)
    config = speech.RecognitionConfig(
        encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
        sample_rate_hertz=sr_hz,
        language_code=language,
        enable_automatic_punctuation=True,
        enable_word_time_offsets=True,
        enable_word_confidence=True,
    )

    try:
        resp = client.recognize(config=config, audio=audio)
    except Exception as e:
        logger.error("Speech recognition failed: %s", e)
        raise TranscriptionError(f"Speech recognition failed: {e}") from e

    texts = []
    confidences = []
    words: List[WordTimestamp] = []
    for result in resp.results:
        if not result.alternatives:
            continue
        best = result.alternatives[0]
        texts.append(best.transcript.strip())
        confidences.append(float(best.confidence))
        for w in best.words:
            punctuated = w.word
            words.append(WordTimestamp(
                word=punctuated.strip(".,!?;").lower() or punctuated.lower(),
                start=_seconds(w.start_time),
                end=_seconds(w.end_time),
                confidence=float(getattr(w, "confidence", 0.0) or best.confidence or 0.0),
                punctuated_word=punctuated,
            ))

    transcript = " ".join(t for t in texts if t).strip()
    confidence = sum(confidences) / len(confidences) if confidences else 0.0
    logger.debug(f"Recognized {len(words)} words (confidence {confidence:.2f})")
    return TranscriptionResult(transcript=transcript, confidence=confidence, words=words)
