"""
Pipeline error types.

Malformed documents and empty results are raised to the caller; unresolved
placeholders and unmatched toggle markers are absorbed by the stages.
"""
from typing import Optional


class PipelineError(Exception):
    """Base class for errors raised by the rendering pipeline."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class MalformedDocumentError(PipelineError, ValueError):
    """Raised when a document is not a recognizable tree."""

    def __init__(self, message: str, path: str = "", stage: Optional[str] = None):
        if path:
            message = f"{message} (at {path})"
        super().__init__(message, stage=stage)
        self.path = path


class InvalidConfigurationError(PipelineError, ValueError):
    """Raised when a render configuration entry cannot be used."""


class EmptyRenderError(PipelineError):
    """Raised when a non-empty source renders to an empty document."""
