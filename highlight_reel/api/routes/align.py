"""Align endpoint: locate a single quote in a transcript (no LLM call)."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from highlight_reel.alignment.aligner import align_highlight
from highlight_reel.alignment.expander import expand_highlight_with_segments
from highlight_reel.analysis.models import RawHighlight
from highlight_reel.api.models import AlignRequest, HighlightOut
from highlight_reel.errors import TranscriptFormatError
from highlight_reel.ingestion.parsers import parse_segments
from highlight_reel.ingestion.word_index import build_word_index

router = APIRouter()


@router.post("/api/align", response_model=HighlightOut)
async def align_quote(request: AlignRequest) -> HighlightOut:
    """Align *quote* inside the given chunk window and expand it.

    An unalignable quote is not an error: it comes back with
    ``match_score = 0`` and the chunk window as its span.
    """
    try:
        segments = parse_segments(request.segments)
    except TranscriptFormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    raw = RawHighlight(
        chunk_index=request.chunk_index,
        chunk_start_time=request.chunk_start_time,
        chunk_end_time=request.chunk_end_time,
        quote=request.quote,
        reason=request.reason,
    )
    aligned = align_highlight(raw, build_word_index(segments), segments)
    expanded = expand_highlight_with_segments(aligned, segments, request.min_clip_duration)
    return HighlightOut.from_highlight(expanded)
