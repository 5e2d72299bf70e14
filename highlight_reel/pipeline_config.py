"""Pipeline configuration: provider enum and PipelineConfig dataclass."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from highlight_reel.config import Settings, settings


class GenerationProvider(StrEnum):
    """Available text-generation backends."""

    OLLAMA = "ollama"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"


@dataclass(frozen=True)
class PipelineConfig:
    """Immutable tuning knobs for one highlight extraction run.

    Defaults mirror the behaviour the clip renderer was built around:
    five-minute analysis chunks and one-minute minimum clips.
    """

    chunk_duration: float = 300
    min_clip_duration: float = 60
    # Seconds added on each side of a chunk window when searching for a quote
    window_buffer: float = 10
    # A word-level match must score strictly above this to be accepted
    min_match_score: float = 0.5
    # Confidence assigned to a quote found only as a substring of a segment
    segment_match_score: float = 0.7
    # Highlights below this score are not handed to the clip renderer
    min_clip_score: float = 0.5

    def __post_init__(self) -> None:
        if self.chunk_duration <= 0:
            raise ValueError(f"chunk_duration must be positive, got {self.chunk_duration}")
        if self.min_clip_duration < 0:
            raise ValueError(f"min_clip_duration must not be negative, got {self.min_clip_duration}")

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> PipelineConfig:
        """Build a config from application settings (env / .env)."""
        source = source or settings
        return cls(
            chunk_duration=source.chunk_duration,
            min_clip_duration=source.min_clip_duration,
        )
