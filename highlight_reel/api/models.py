"""Pydantic request/response schemas for the Highlight Reel API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from highlight_reel.alignment.models import AlignedHighlight, ExpandedHighlight
from highlight_reel.ingestion.models import Word


class WordOut(BaseModel):
    """A timestamped word."""

    word: str
    start: float
    end: float

    @classmethod
    def from_word(cls, w: Word) -> WordOut:
        return cls(word=w.text, start=w.start, end=w.end)


class HighlightOut(BaseModel):
    """A located highlight. ``quote_*`` fields are set only when it was expanded."""

    chunk_index: int
    chunk_start_time: float
    chunk_end_time: float
    quote: str
    reason: str
    start: float
    end: float
    match_score: float
    words: list[WordOut] = []
    quote_start: float | None = None
    quote_end: float | None = None
    quote_words: list[WordOut] | None = None

    @classmethod
    def from_highlight(cls, h: AlignedHighlight) -> HighlightOut:
        out = cls(
            chunk_index=h.chunk_index,
            chunk_start_time=h.chunk_start_time,
            chunk_end_time=h.chunk_end_time,
            quote=h.quote,
            reason=h.reason,
            start=h.start,
            end=h.end,
            match_score=h.match_score,
            words=[WordOut.from_word(w) for w in h.words],
        )
        if isinstance(h, ExpandedHighlight):
            out.quote_start = h.quote_start
            out.quote_end = h.quote_end
            out.quote_words = [WordOut.from_word(w) for w in h.quote_words]
        return out


class AlignRequest(BaseModel):
    """Request body for the /api/align endpoint."""

    quote: str
    chunk_start_time: float
    chunk_end_time: float
    segments: list[dict[str, Any]]
    chunk_index: int = 0
    reason: str = ""
    min_clip_duration: float = Field(default=60, ge=0)


class HighlightsRequest(BaseModel):
    """Request body for the /api/highlights endpoint."""

    segments: list[dict[str, Any]]
    run_id: str | None = Field(default=None, pattern=r"^[A-Za-z0-9_-]{1,64}$")
    chunk_duration: int | None = Field(default=None, gt=0)
    min_clip_duration: int | None = Field(default=None, ge=0)


class HighlightsResponse(BaseModel):
    """Response body for the /api/highlights endpoint."""

    run_id: str
    topic: str
    context: dict[str, Any]
    resumed: bool
    clip_ready_count: int
    highlights: list[HighlightOut]
