"""Highlights endpoint: run the full two-pass pipeline on a transcript."""

from __future__ import annotations

import logging
import uuid
from pathlib import Path

from fastapi import APIRouter, HTTPException

from highlight_reel.api.models import HighlightOut, HighlightsRequest, HighlightsResponse
from highlight_reel.config import settings
from highlight_reel.errors import (
    ArtifactLoadError,
    ContextParseError,
    GenerationFailure,
    TranscriptFormatError,
)
from highlight_reel.generation.backends import get_generation_backend
from highlight_reel.generation.queue import GenerationQueue
from highlight_reel.ingestion.models import Transcript
from highlight_reel.ingestion.parsers import parse_segments
from highlight_reel.pipeline import extract_highlights, select_clip_highlights
from highlight_reel.pipeline_config import PipelineConfig

logger = logging.getLogger(__name__)

router = APIRouter()

# Shared by every request: one provider credential, one call in flight.
generation_queue = GenerationQueue(max_retries=settings.max_rate_limit_retries)


@router.post("/api/highlights", response_model=HighlightsResponse)
def create_highlights(request: HighlightsRequest) -> HighlightsResponse:
    """Summarize, contextualize and extract highlights for a transcript.

    Artifacts are written to ``<output_dir>/<run_id>``. Passing the
    ``run_id`` of an earlier run reuses its chunk summaries and context.
    Runs are long and block on the generation queue, so this is a sync
    endpoint served from the worker thread pool.
    """
    try:
        segments = parse_segments(request.segments)
    except TranscriptFormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        backend = get_generation_backend()
    except ValueError as exc:
        raise HTTPException(
            status_code=501,
            detail=f"Generation backend not configured: {exc}",
        ) from exc

    defaults = PipelineConfig.from_settings()
    config = PipelineConfig(
        chunk_duration=request.chunk_duration or defaults.chunk_duration,
        min_clip_duration=(
            request.min_clip_duration if request.min_clip_duration is not None else defaults.min_clip_duration
        ),
    )
    run_id = request.run_id or uuid.uuid4().hex
    output_dir = Path(settings.output_dir) / run_id

    try:
        run = extract_highlights(
            Transcript(segments=tuple(segments)),
            output_dir,
            config=config,
            backend=backend,
            queue=generation_queue,
        )
    except ArtifactLoadError as exc:
        raise HTTPException(
            status_code=409,
            detail=f"Saved artifacts for run {run_id} are unreadable; start a new run: {exc}",
        ) from exc
    except ContextParseError as exc:
        raise HTTPException(status_code=502, detail=f"LLM returned no usable context: {exc}") from exc
    except GenerationFailure as exc:
        logger.exception("Highlight run %s failed", run_id)
        raise HTTPException(status_code=503, detail=f"LLM unavailable: {exc}") from exc

    return HighlightsResponse(
        run_id=run_id,
        topic=run.context.topic,
        context=run.context.to_dict(),
        resumed=run.resumed,
        clip_ready_count=len(select_clip_highlights(run.highlights, config.min_clip_score)),
        highlights=[HighlightOut.from_highlight(h) for h in run.highlights],
    )
