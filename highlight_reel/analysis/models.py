"""Data models produced by the two analysis passes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]


@dataclass(frozen=True)
class ChunkSummary:
    """Pass 1 output: a short summary of one chunk."""

    index: int
    start_time: float
    end_time: float
    summary: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "summary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChunkSummary:
        return cls(
            index=int(data["index"]),
            start_time=float(data["startTime"]),
            end_time=float(data["endTime"]),
            summary=str(data.get("summary", "")),
        )


@dataclass(frozen=True)
class ConversationContext:
    """Global context of the conversation, derived from all chunk summaries."""

    topic: str = ""
    participants: list[str] = field(default_factory=list)
    key_points: list[str] = field(default_factory=list)
    narrative: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic": self.topic,
            "participants": list(self.participants),
            "keyPoints": list(self.key_points),
            "narrative": self.narrative,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConversationContext:
        """Build a context from LLM JSON, tolerating missing or mistyped fields."""
        return cls(
            topic=str(data.get("topic") or ""),
            participants=_str_list(data.get("participants")),
            key_points=_str_list(data.get("keyPoints")),
            narrative=str(data.get("narrative") or ""),
        )


@dataclass(frozen=True)
class HighlightCandidate:
    """One ``{quote, reason}`` item proposed by the highlight-detection pass."""

    quote: str
    reason: str = ""


@dataclass(frozen=True)
class RawHighlight:
    """A proposed quote tagged with the chunk window it came from."""

    chunk_index: int
    chunk_start_time: float
    chunk_end_time: float
    quote: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "chunkIndex": self.chunk_index,
            "chunkStartTime": self.chunk_start_time,
            "chunkEndTime": self.chunk_end_time,
            "quote": self.quote,
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawHighlight:
        return cls(**cls._raw_fields(data))

    @staticmethod
    def _raw_fields(data: dict[str, Any]) -> dict[str, Any]:
        return {
            "chunk_index": int(data["chunkIndex"]),
            "chunk_start_time": float(data["chunkStartTime"]),
            "chunk_end_time": float(data["chunkEndTime"]),
            "quote": str(data["quote"]),
            "reason": str(data.get("reason", "")),
        }
