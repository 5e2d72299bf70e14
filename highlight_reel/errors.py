"""Exception hierarchy for the highlight pipeline."""

from __future__ import annotations


class HighlightReelError(Exception):
    """Base class for all pipeline errors."""


class TranscriptFormatError(HighlightReelError, ValueError):
    """The transcript JSON does not have the expected shape."""


class ContextParseError(HighlightReelError):
    """No usable JSON object in the context-extraction response.

    Fatal for a run: highlight detection needs the conversation context.
    """


class HighlightParseError(HighlightReelError):
    """No usable JSON array in a chunk's highlight-detection response.

    Recoverable: the chunk simply contributes no highlights.
    """


class GenerationFailure(HighlightReelError):
    """A generation backend call failed with a non rate-limit error."""


class RateLimitRetriesExhausted(GenerationFailure):
    """A request kept hitting the rate limit past the configured retry cap."""

    def __init__(self, attempts: int, last_error: str) -> None:
        super().__init__(f"Rate limit retries exhausted after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class ArtifactLoadError(HighlightReelError):
    """A saved analysis artifact could not be read back on resume."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot load {path}: {reason}")
        self.path = path
