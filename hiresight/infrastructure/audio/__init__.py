"""Audio format conversion and normalization."""

from .processing import decode_wav, encode_wav, prepare_for_recognition, write_wav

__all__ = ["decode_wav", "encode_wav", "prepare_for_recognition", "write_wav"]
