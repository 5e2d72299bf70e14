"""End-to-end highlight pipeline: analyze -> align -> expand -> store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from highlight_reel.alignment.aligner import map_highlights_to_timestamps
from highlight_reel.alignment.expander import expand_highlight_with_segments
from highlight_reel.alignment.models import AlignedHighlight
from highlight_reel.analysis.models import ConversationContext, RawHighlight
from highlight_reel.analysis.orchestrator import AnalysisOrchestrator
from highlight_reel.config import settings
from highlight_reel.generation.backends import GenerationBackend, get_generation_backend
from highlight_reel.generation.queue import GenerationClient, GenerationQueue
from highlight_reel.ingestion.models import Transcript
from highlight_reel.pipeline_config import PipelineConfig
from highlight_reel.storage import ArtifactStore

logger = logging.getLogger(__name__)


@dataclass
class HighlightRun:
    """Result of :func:`extract_highlights`."""

    context: ConversationContext
    raw_highlights: list[RawHighlight]
    highlights: list[AlignedHighlight]
    highlights_path: Path
    resumed: bool = False


def expand_highlights(
    highlights: list[AlignedHighlight],
    transcript: Transcript,
    min_duration: float,
) -> list[AlignedHighlight]:
    """Expand every highlight to *min_duration*, logging each change."""
    expanded_all: list[AlignedHighlight] = []
    for h in highlights:
        expanded = expand_highlight_with_segments(h, transcript.segments, min_duration)
        if expanded is not h:
            logger.info(
                "  %r... %.1fs -> %.1fs",
                h.quote[:30],
                h.end - h.start,
                expanded.end - expanded.start,
            )
        expanded_all.append(expanded)
    return expanded_all


def extract_highlights(
    transcript: Transcript,
    output_dir: str | Path,
    config: PipelineConfig | None = None,
    backend: GenerationBackend | None = None,
    queue: GenerationQueue | None = None,
) -> HighlightRun:
    """Full pipeline for one transcript.

    Args:
        transcript: Parsed speech-to-text output.
        output_dir: Directory for ``chunk_summaries.json``,
            ``conversation_context.json`` and ``highlights.json``. Existing
            summary and context files are reused instead of regenerated.
        config: Pipeline tuning; defaults come from settings.
        backend: Generation backend; defaults to the configured provider.
        queue: Generation queue to share; a private one is created (and
            closed) when omitted.

    Returns:
        A :class:`HighlightRun` with the context and final highlights.
    """
    config = config or PipelineConfig.from_settings()
    backend = backend or get_generation_backend()
    store = ArtifactStore(output_dir)

    owns_queue = queue is None
    run_queue = queue or GenerationQueue(max_retries=settings.max_rate_limit_retries)
    try:
        orchestrator = AnalysisOrchestrator(
            GenerationClient(backend, run_queue),
            store,
            chunk_duration=config.chunk_duration,
        )
        analysis = orchestrator.run(transcript.segments)
    finally:
        if owns_queue:
            run_queue.close()

    logger.info("Mapping highlights to timestamps...")
    aligned = map_highlights_to_timestamps(analysis.raw_highlights, transcript.segments, config)

    logger.info("Expanding highlights to minimum %ss duration...", config.min_clip_duration)
    highlights = expand_highlights(aligned, transcript, config.min_clip_duration)

    path = store.save_highlights(highlights)
    logger.info("Highlights saved to: %s", path)

    return HighlightRun(
        context=analysis.context,
        raw_highlights=analysis.raw_highlights,
        highlights=highlights,
        highlights_path=path,
        resumed=analysis.resumed,
    )


def select_clip_highlights(highlights: list[AlignedHighlight], min_score: float = 0.5) -> list[AlignedHighlight]:
    """Highlights confident enough to hand to the clip renderer."""
    return [h for h in highlights if h.match_score >= min_score]
