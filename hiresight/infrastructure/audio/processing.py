"""
Basic audio processing functions including format conversions and normalization.
"""
import io
import wave
from math import gcd
from typing import Tuple

import numpy as np
from scipy.signal import resample_poly

from ...config import TARGET_RMS, SAMPLE_RATE_TARGET, MAX_AUDIO_BYTES

_SAMPLE_DTYPES = {1: np.uint8, 2: np.int16, 4: np.int32}


def decode_wav(wav_bytes: bytes) -> Tuple[np.ndarray, int]:
    """
    Decode WAV bytes into float samples in [-1, 1].

    Args:
        wav_bytes: Contents of a PCM WAV file

    Returns:
        Tuple of (samples with shape (frames, channels), sample rate)

    Raises:
        ValueError: If the payload is too large, not a WAV file or uses an unsupported sample width
    """
    if len(wav_bytes) > MAX_AUDIO_BYTES:
        raise ValueError(f"Audio payload too large: {len(wav_bytes)} bytes")

    try:
        with wave.open(io.BytesIO(wav_bytes), "rb") as wf:
            channels = wf.getnchannels()
            width = wf.getsampwidth()
            sr = wf.getframerate()
            frames = wf.readframes(wf.getnframes())
    except (wave.Error, EOFError) as e:
        raise ValueError(f"Invalid WAV audio: {e}") from e

    dtype = _SAMPLE_DTYPES.get(width)
    if dtype is None:
        raise ValueError(f"Unsupported WAV sample width: {width} bytes")

    raw = np.frombuffer(frames, dtype=dtype)
    if width == 1:
        samples = (raw.astype(np.float32) - 128.0) / 128.0
    else:
        samples = raw.astype(np.float32) / float(np.iinfo(dtype).max)
    return samples.reshape(-1, channels), sr


def stereo_to_mono(x: np.ndarray) -> np.ndarray:
    """Convert multi-channel audio to mono by averaging channels."""
    if x.ndim == 1:
        return x
    return np.mean(x, axis=1)


def remove_dc(x: np.ndarray) -> np.ndarray:
    """Remove DC offset from audio signal."""
    if x.size == 0:
        return x
    return x - np.mean(x)


def resample(mono: np.ndarray, sr_in: int, sr_out: int = SAMPLE_RATE_TARGET) -> np.ndarray:
    """Polyphase resampling between integer sample rates."""
    if sr_in == sr_out or mono.size == 0:
        return mono.astype(np.float32)
    g = gcd(sr_in, sr_out)
    return resample_poly(mono, up=sr_out // g, down=sr_in // g).astype(np.float32)


def normalize_audio(audio: np.ndarray, target_rms: float = TARGET_RMS) -> np.ndarray:
    """Normalize audio to target RMS level."""
    if audio.size == 0:
        return audio
    rms = float(np.sqrt(np.mean(audio**2)) + 1e-9)
    gain = min(20.0, target_rms / rms) if rms > 0 else 1.0
    return audio * gain


def to_pcm16(audio: np.ndarray) -> np.ndarray:
    return (np.clip(audio, -1.0, 1.0) * 32767.0).astype(np.int16)


def prepare_for_recognition(wav_bytes: bytes) -> Tuple[bytes, int]:
    """
    Convert a WAV payload to 16 kHz mono PCM16 for speech recognition.

    Returns:
        Tuple of (raw PCM16 bytes, sample rate)
    """
    samples, sr = decode_wav(wav_bytes)
    mono = remove_dc(stereo_to_mono(samples))
    mono = normalize_audio(resample(mono, sr, SAMPLE_RATE_TARGET))
    return to_pcm16(mono).tobytes(), SAMPLE_RATE_TARGET


def encode_wav(pcm16: np.ndarray, sr: int, channels: int = 1) -> bytes:
    """Encode PCM16 samples as WAV bytes."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sr)
        wf.writeframes(np.asarray(pcm16, dtype=np.int16).tobytes())
    return buffer.getvalue()


def write_wav(path: str, pcm16: np.ndarray, sr: int, channels: int = 1) -> None:
    """Write PCM16 audio data to WAV file."""
    with open(path, "wb") as f:
        f.write(encode_wav(pcm16, sr, channels))
