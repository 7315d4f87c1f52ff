"""
Text-to-speech functionality using Google Cloud TTS.
"""
import os
import subprocess
import tempfile
import logging
from typing import List, Optional, Dict, Any

from google.cloud import texttospeech

from ...config import TTS_VOICE, LANGUAGE_CODE, SAMPLE_RATE_TARGET

logger = logging.getLogger("speech_tts")


def synthesize_speech(text: str,
                      voice: str = TTS_VOICE,
                      language: str = LANGUAGE_CODE,
                      sample_rate: int = SAMPLE_RATE_TARGET,
                      client: Optional[texttospeech.TextToSpeechClient] = None) -> bytes:
    """
    Synthesize text to LINEAR16 WAV audio.

    Args:
        text: Text to speak
        voice: Google voice name, e.g. en-US-Neural2-F
        language: Language code of the voice
        sample_rate: Output sample rate
        client: Existing TextToSpeechClient to reuse

    Returns:
        WAV file bytes
    """
    client = client or texttospeech.TextToSpeechClient()
    synthesis_input = texttospeech.SynthesisInput(text=text)
    voice_params = texttospeech.VoiceSelectionParams(language_code=language, name=voice)
    audio_config = texttospeech.AudioConfig(
        audio_encoding=texttospeech.AudioEncoding.LINEAR16,
        sample_rate_hertz=sample_rate
    )
    response = client.synthesize_speech(
        input=synthesis_input, voice=voice_params, audio_config=audio_config
    )
    return response.audio_content


def list_voices(language: str = LANGUAGE_CODE,
                client: Optional[texttospeech.TextToSpeechClient] = None) -> List[Dict[str, Any]]:
    """Available voices for a language as plain dicts."""
    client = client or texttospeech.TextToSpeechClient()
    response = client.list_voices(language_code=language)
    return [
        {
            "name": v.name,
            "language_codes": list(v.language_codes),
            "gender": texttospeech.SsmlVoiceGender(v.ssml_gender).name,
            "natural_sample_rate_hertz": v.natural_sample_rate_hertz,
        }
        for v in response.voices
    ]


def play_wav_bytes(wav_bytes: bytes) -> bool:
    """
    Play WAV audio with the system player (afplay on macOS, aplay on Linux).

    Returns:
        True if a player ran successfully
    """
    with tempfile.NamedTemporaryFile(suffix='.wav', delete=False) as tmp_file:
        wav_path = tmp_file.name
        tmp_file.write(wav_bytes)

    try:
        for player in (["afplay", wav_path], ["aplay", "-q", wav_path]):
            try:
                subprocess.run(player, check=True, capture_output=True)
                return True
            except FileNotFoundError:
                continue
            except subprocess.CalledProcessError as e:
                logger.warning(f"{player[0]} failed: {e}")
                return False
        logger.warning("No audio player found")
        return False
    finally:
        try:
            os.unlink(wav_path)
        except OSError:
            pass
