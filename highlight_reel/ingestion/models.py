"""Data models for transcripts and analysis chunks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Word:
    """The smallest timestamped transcript unit (seconds)."""

    text: str
    start: float
    end: float

    def to_dict(self) -> dict[str, Any]:
        return {"word": self.text, "start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Word:
        """Build a word from ``{"word"|"text", "start", "end"}``."""
        return cls(
            text=str(data.get("word") or data.get("text") or ""),
            start=float(data["start"]),
            end=float(data["end"]),
        )


@dataclass(frozen=True)
class IndexedWord:
    """A normalized word in the flat word index, pointing back to its segment."""

    text: str
    start: float
    end: float
    segment_index: int

    def as_word(self) -> Word:
        return Word(text=self.text, start=self.start, end=self.end)


@dataclass(frozen=True)
class Segment:
    """A timestamped transcript unit decomposed into words."""

    start: float
    end: float
    text: str
    words: tuple[Word, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "words": [w.to_dict() for w in self.words],
        }


@dataclass(frozen=True)
class Transcript:
    """Speech-to-text output: segments ordered by start time."""

    segments: tuple[Segment, ...] = ()

    @property
    def duration(self) -> float:
        if not self.segments:
            return 0.0
        return self.segments[-1].end - self.segments[0].start


@dataclass(frozen=True)
class Chunk:
    """A fixed-duration time window of transcript text sent to the LLM."""

    index: int
    start_time: float
    end_time: float
    text: str
    segments: tuple[Segment, ...] = field(default_factory=tuple)
