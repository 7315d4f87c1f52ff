"""
Testing infrastructure with mock services for the interview system.
"""
from typing import Dict, Any, List, Optional, Iterable, Union

import numpy as np

from .models import (
    Turn, WordTimestamp, TranscriptionResult, CandidateProfile
)
from .schemas import NextQuestion
from .services import SpeechSynthesisService, AnswerTranscriptionService
from .orchestrator import InterviewOrchestrator
from ..infrastructure.audio import encode_wav
from ..infrastructure.data import InMemoryHistoryRepository


class MockLLMClient:
    """
    Mock LLM client for testing.

    Responses are returned in order; an Exception instance in the list is raised instead.
    """

    DEFAULT_RESPONSE = '{"text": "Tell me more about your recent work.", "category": "technical"}'

    def __init__(self, mock_responses: List[Union[str, Exception]]):
        self.mock_responses = list(mock_responses)
        self.current_response_idx = 0
        self.request_history: List[Dict[str, Any]] = []

    def generate_content(self, prompt: str, temperature: float = 0.0, **kwargs) -> str:
        self.request_history.append({
            "prompt": prompt,
            "temperature": temperature,
            "kwargs": kwargs
        })

        if self.current_response_idx < len(self.mock_responses):
            response = self.mock_responses[self.current_response_idx]
            self.current_response_idx += 1
            if isinstance(response, Exception):
                raise response
            return response
        return self.DEFAULT_RESPONSE


class MockQuestionGenerator:
    """
    Question generator returning scripted NextQuestion objects.

    An Exception instance in the script is raised instead. Once the script runs out,
    numbered generic questions are returned.
    """

    def __init__(self, script: Optional[List[Union[NextQuestion, Exception]]] = None):
        self.script = list(script or [])
        self.calls: List[Dict[str, Any]] = []

    def generate(self, history: List[Turn], profile: CandidateProfile,
                 planned_questions: int) -> NextQuestion:
        self.calls.append({
            "history": list(history),
            "profile": profile,
            "planned_questions": planned_questions
        })
        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return NextQuestion(text=f"Mock question {len(self.calls)}", topic="general")


class MockTTSService(SpeechSynthesisService):
    """Mock TTS service that records what would be spoken."""

    def __init__(self, use_tts: bool = False):
        super().__init__(use_tts=use_tts)
        self.spoken_messages: List[str] = []

    def speak_or_print(self, message: str, prefix: str = "🤖") -> None:
        self.spoken_messages.append(message)

    def synthesize(self, text: str, voice: Optional[str] = None) -> Optional[bytes]:
        return encode_wav(np.zeros(160, dtype=np.int16), 16000)


class MockRecognizer:
    """Speech recognizer returning scripted results, recording the audio it was given."""

    def __init__(self, results: List[TranscriptionResult]):
        self.results = list(results)
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, pcm16_bytes: bytes, sr_hz: int = 16000, language: str = "en-US") -> TranscriptionResult:
        self.calls.append({"bytes": len(pcm16_bytes), "sr_hz": sr_hz, "language": language})
        if self.results:
            return self.results.pop(0)
        return TranscriptionResult(transcript="")


def make_words(text: str, start: float = 0.0, word_duration: float = 0.4,
               gaps: Optional[Dict[int, float]] = None) -> List[WordTimestamp]:
    """
    Build word timestamps for a sentence.

    Args:
        text: Space separated words
        start: Start time of the first word
        word_duration: Length of every word in seconds
        gaps: word index -> silence after that word, in seconds

    Returns:
        List of WordTimestamp with back-to-back words except for the given gaps
    """
    gaps = gaps or {}
    words = []
    t = start
    for idx, word in enumerate(text.split()):
        words.append(WordTimestamp(word=word, start=t, end=t + word_duration))
        t += word_duration + gaps.get(idx, 0.0)
    return words


def make_wav_bytes(seconds: float = 0.5, sr: int = 48000, channels: int = 1,
                   freq: float = 220.0) -> bytes:
    """A sine tone encoded as a PCM16 WAV file."""
    t = np.arange(int(seconds * sr)) / sr
    tone = 0.3 * np.sin(2 * np.pi * freq * t)
    samples = np.repeat(tone[:, None], channels, axis=1)
    pcm16 = (samples * 32767).astype(np.int16)
    return encode_wav(pcm16.reshape(-1), sr, channels)


def create_mock_orchestrator(answers: Iterable[str],
                             script: Optional[List[Union[NextQuestion, Exception]]] = None,
                             workdir: str = "/tmp/hiresight-test",
                             max_turns: int = 5,
                             recognizer: Optional[MockRecognizer] = None) -> InterviewOrchestrator:
    """
    Orchestrator wired to mock collaborators, with answers fed to its input prompt.
    When the answers run out, input raises EOFError like a closed terminal.
    """
    answer_iter = iter(list(answers))

    def fake_input(prompt: str) -> str:
        try:
            return next(answer_iter)
        except StopIteration:
            raise EOFError

    transcription = AnswerTranscriptionService(recognizer=recognizer) if recognizer else None
    return InterviewOrchestrator(
        max_turns=max_turns,
        workdir=workdir,
        question_generator=MockQuestionGenerator(script),
        history_repository=InMemoryHistoryRepository(),
        transcription_service=transcription,
        tts_service=MockTTSService(),
        input_fn=fake_input,
    )
