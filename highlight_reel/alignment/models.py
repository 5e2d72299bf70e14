"""Highlight records enriched with word-level timing.

Each stage builds a new, larger record from the previous one:
RawHighlight -> AlignedHighlight -> ExpandedHighlight. Nothing is mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from highlight_reel.analysis.models import RawHighlight
from highlight_reel.ingestion.models import Word


def _fields_of(record: Any, cls: type) -> dict[str, Any]:
    return {f.name: getattr(record, f.name) for f in fields(cls)}


def _words_from(items: list[dict[str, Any]] | None) -> tuple[Word, ...]:
    return tuple(Word.from_dict(w) for w in items or [])


@dataclass(frozen=True)
class QuoteMatch:
    """Best word window found for a quote."""

    start: float
    end: float
    words: tuple[Word, ...]
    match_score: float


@dataclass(frozen=True)
class AlignedHighlight(RawHighlight):
    """A raw highlight located on the transcript timeline.

    ``match_score`` is 0 for the unaligned sentinel, in which case the span is
    the chunk window and ``words`` is empty.
    """

    start: float
    end: float
    words: tuple[Word, ...]
    match_score: float

    @property
    def duration(self) -> float:
        return self.end - self.start

    @classmethod
    def from_raw(
        cls,
        raw: RawHighlight,
        *,
        start: float,
        end: float,
        words: tuple[Word, ...] | list[Word],
        match_score: float,
    ) -> AlignedHighlight:
        return cls(
            **_fields_of(raw, RawHighlight),
            start=start,
            end=end,
            words=tuple(words),
            match_score=match_score,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "start": self.start,
            "end": self.end,
            "words": [w.to_dict() for w in self.words],
            "matchScore": self.match_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AlignedHighlight:
        return AlignedHighlight(**cls._aligned_fields(data))

    @classmethod
    def _aligned_fields(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            **cls._raw_fields(data),
            "start": float(data["start"]),
            "end": float(data["end"]),
            "words": _words_from(data.get("words")),
            "match_score": float(data.get("matchScore", 0.0)),
        }


@dataclass(frozen=True)
class ExpandedHighlight(AlignedHighlight):
    """An aligned highlight grown along segment boundaries.

    ``start``/``end``/``words`` describe the grown clip; the aligned quote
    span is kept in ``quote_start``/``quote_end``/``quote_words``.
    """

    quote_start: float
    quote_end: float
    quote_words: tuple[Word, ...]

    @classmethod
    def from_aligned(
        cls,
        aligned: AlignedHighlight,
        *,
        start: float,
        end: float,
        words: tuple[Word, ...] | list[Word],
    ) -> ExpandedHighlight:
        base = _fields_of(aligned, AlignedHighlight)
        base.update(start=start, end=end, words=tuple(words))
        return cls(
            **base,
            quote_start=aligned.start,
            quote_end=aligned.end,
            quote_words=aligned.words,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "quoteStart": self.quote_start,
            "quoteEnd": self.quote_end,
            "quoteWords": [w.to_dict() for w in self.quote_words],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExpandedHighlight:
        return cls(
            **cls._aligned_fields(data),
            quote_start=float(data["quoteStart"]),
            quote_end=float(data["quoteEnd"]),
            quote_words=_words_from(data.get("quoteWords")),
        )


def highlight_from_dict(data: dict[str, Any]) -> AlignedHighlight:
    """Rebuild an aligned or expanded highlight from its JSON form."""
    if "quoteStart" in data:
        return ExpandedHighlight.from_dict(data)
    return AlignedHighlight.from_dict(data)
