import datetime
from types import SimpleNamespace

import pytest

from hiresight.infrastructure.speech import recognize_words, synthesize_speech
from hiresight.interview.errors import TranscriptionError


def word(text, start, end, confidence=0.9):
    return SimpleNamespace(
        word=text,
        start_time=datetime.timedelta(seconds=start),
        end_time=datetime.timedelta(seconds=end),
        confidence=confidence,
    )


class FakeSpeechClient:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.requests = []

    def recognize(self, config, audio):
        self.requests.append((config, audio))
        if self.error:
            raise self.error
        return SimpleNamespace(results=self.results)


def test_recognize_words_collects_timing():
    alternative = SimpleNamespace(
        transcript="Um, I wrote it.",
        confidence=0.8,
        words=[word("Um,", 0.0, 0.3), word("I", 0.5, 0.6), word("wrote", 0.6, 0.9), word("it.", 0.9, 1.1)],
    )
    client = FakeSpeechClient([SimpleNamespace(alternatives=[alternative])])

    result = recognize_words(b"\x00\x00" * 160, sr_hz=16000, language="en-US", client=client)

    assert result.transcript == "Um, I wrote it."
    assert result.confidence == pytest.approx(0.8)
    assert [w.word for w in result.words] == ["um", "i", "wrote", "it"]
    assert result.words[0].punctuated_word == "Um,"
    assert result.words[1].start == pytest.approx(0.5)
    config, _ = client.requests[0]
    assert config.enable_word_time_offsets


def test_recognize_words_without_results_is_empty():
    result = recognize_words(b"\x00\x00", client=FakeSpeechClient([]))
    assert result.transcript == ""
    assert result.words == []


def test_recognition_failure_raises():
    with pytest.raises(TranscriptionError):
        recognize_words(b"\x00\x00", client=FakeSpeechClient(error=RuntimeError("quota")))


def test_synthesize_speech_returns_audio():
    calls = []

    class FakeTTSClient:
        def synthesize_speech(self, input, voice, audio_config):
            calls.append((input, voice, audio_config))
            return SimpleNamespace(audio_content=b"RIFF....")

    audio = synthesize_speech("Hello", voice="en-US-Neural2-C", client=FakeTTSClient())

    assert audio == b"RIFF...."
    assert calls[0][1].name == "en-US-Neural2-C"
