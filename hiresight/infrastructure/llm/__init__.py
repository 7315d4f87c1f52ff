"""LLM infrastructure."""

from .client import VertexRestClient, LLMError, LLMTimeoutError

__all__ = ["VertexRestClient", "LLMError", "LLMTimeoutError"]
