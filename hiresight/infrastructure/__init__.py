"""Infrastructure components for Hiresight.

This package contains the clients for external services (LLM, speech,
history storage) and low-level audio processing used by the interview core.
Submodules are imported where needed so that the cloud client libraries are
only loaded by code that uses them.
"""
