import json

import pytest

from hiresight.interview.services import (
    AnswerTranscriptionService, SpeechSynthesisService, ConversationManager
)
from hiresight.interview.session import InterviewSession
from hiresight.interview.models import TranscriptionResult, InterviewResult
from hiresight.interview.errors import TranscriptionError, NoSpeechDetectedError
from hiresight.interview.testing import MockRecognizer, make_words, make_wav_bytes


def test_transcription_scores_recognized_words():
    words = make_words("we cached the exchange rates in redis")
    recognizer = MockRecognizer([
        TranscriptionResult(transcript=" We cached the exchange rates in Redis. ", confidence=0.92, words=words)
    ])
    service = AnswerTranscriptionService(recognizer=recognizer, language_code="en-GB")

    answer = service.transcribe(make_wav_bytes(seconds=0.25, sr=44100, channels=2))

    assert answer.transcript == "We cached the exchange rates in Redis."
    assert answer.recognition_confidence == 0.92
    assert answer.confidence_metrics.breakdown.total_words == 7
    assert recognizer.calls == [{"bytes": 8000, "sr_hz": 16000, "language": "en-GB"}]


def test_transcript_without_word_timing_has_no_metrics():
    service = AnswerTranscriptionService(recognizer=MockRecognizer([TranscriptionResult(transcript="Yes")]))
    answer = service.transcribe(make_wav_bytes())
    assert answer.transcript == "Yes"
    assert answer.confidence_metrics is None


def test_silence_raises_no_speech():
    service = AnswerTranscriptionService(recognizer=MockRecognizer([TranscriptionResult(transcript="  ")]))
    with pytest.raises(NoSpeechDetectedError):
        service.transcribe(make_wav_bytes())


def test_undecodable_audio_raises_transcription_error():
    service = AnswerTranscriptionService(recognizer=MockRecognizer([]))
    with pytest.raises(TranscriptionError):
        service.transcribe(b"garbage")


def test_transcribe_file(tmp_path):
    path = tmp_path / "answer.wav"
    path.write_bytes(make_wav_bytes())
    service = AnswerTranscriptionService(recognizer=MockRecognizer([TranscriptionResult(transcript="Hello")]))
    assert service.transcribe_file(str(path)).transcript == "Hello"


def test_failed_synthesis_returns_none_and_prints(capsys):
    def broken(text, voice=None):
        raise RuntimeError("quota exceeded")

    service = SpeechSynthesisService(use_tts=True, synthesizer=broken, player=lambda audio: True)

    assert service.synthesize("Hello there") is None
    service.speak_or_print("Hello there")
    assert "🤖 Hello there" in capsys.readouterr().out


def test_synthesis_passes_voice_and_plays(capsys):
    seen = {}

    def synthesizer(text, voice=None):
        seen["voice"] = voice
        return b"RIFF"

    played = []
    service = SpeechSynthesisService(use_tts=True, voice="en-US-Neural2-C",
                                     synthesizer=synthesizer, player=lambda audio: played.append(audio) or True)

    service.speak_or_print("Welcome")

    assert seen["voice"] == "en-US-Neural2-C"
    assert played == [b"RIFF"]
    assert capsys.readouterr().out == ""
    assert service.synthesize("   ") is None


def test_save_transcript(tmp_path):
    session = InterviewSession(session_id="abc")
    session.append_turn("Q1", "A1", False, topic="introduction")
    session.mark_complete()
    result = InterviewResult(session_id="abc", turns=session.turns, closing_message="Thanks!")

    path = ConversationManager(str(tmp_path)).save_transcript(session, result)

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert data["session_id"] == "abc"
    assert data["closing_message"] == "Thanks!"
    assert data["summary"]["total_turns"] == 1
    assert data["turns"][0]["answer_text"] == "A1"
