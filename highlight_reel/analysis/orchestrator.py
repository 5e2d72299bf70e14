"""Two-pass transcript analysis: summarize -> contextualize -> detect highlights.

Pass 1 summarizes every chunk and derives one conversation context from the
summaries; both are persisted so a re-run skips straight to Pass 2. Pass 2
asks for 0-3 quotes per chunk, given the chunk text and the context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum

from highlight_reel.analysis.models import (
    ChunkSummary,
    ConversationContext,
    HighlightCandidate,
    RawHighlight,
)
from highlight_reel.analysis.parsing import parse_conversation_context, parse_highlight_candidates
from highlight_reel.analysis.prompts import (
    build_context_prompt,
    build_highlight_prompt,
    build_summary_prompt,
)
from highlight_reel.errors import HighlightParseError
from highlight_reel.generation.queue import GenerationClient
from highlight_reel.ingestion.chunking import group_segments_into_chunks
from highlight_reel.ingestion.models import Chunk, Segment
from highlight_reel.storage import ArtifactStore

logger = logging.getLogger(__name__)


class AnalysisStage(StrEnum):
    """Stages of one analysis run, in order."""

    PENDING = "pending"
    GROUPING = "grouping"
    RESUME = "resume"
    PASS1 = "pass1"
    CONTEXT = "context"
    PASS2 = "pass2"
    DONE = "done"


@dataclass
class AnalysisResult:
    """Everything the analysis produced for one transcript."""

    chunks: list[Chunk]
    summaries: list[ChunkSummary]
    context: ConversationContext
    raw_highlights: list[RawHighlight] = field(default_factory=list)
    resumed: bool = False


class AnalysisOrchestrator:
    """Drives both analysis passes through a shared generation queue.

    Args:
        client: Generation backend bound to the run's queue.
        store: Artifact store used for resume and persistence.
        chunk_duration: Chunk window length in seconds.
    """

    def __init__(self, client: GenerationClient, store: ArtifactStore, chunk_duration: float = 300) -> None:
        self.client = client
        self.store = store
        self.chunk_duration = chunk_duration
        self.stage = AnalysisStage.PENDING

    def _enter(self, stage: AnalysisStage) -> None:
        logger.debug("Analysis stage: %s -> %s", self.stage, stage)
        self.stage = stage

    def run(self, segments: list[Segment] | tuple[Segment, ...]) -> AnalysisResult:
        """Run the full analysis for *segments*.

        Raises:
            ContextParseError: The context response held no usable JSON object.
            GenerationFailure: A backend call failed with a non rate-limit error.
        """
        self._enter(AnalysisStage.GROUPING)
        logger.info("Grouping segments into chunks...")
        chunks = group_segments_into_chunks(segments, self.chunk_duration)
        logger.info("Created %d chunks", len(chunks))

        resumed = self.store.has_analysis()
        if resumed:
            self._enter(AnalysisStage.RESUME)
            logger.info(
                "Found existing %s and %s, skipping Pass 1 and context extraction",
                self.store.summaries_path.name,
                self.store.context_path.name,
            )
            summaries = self.store.load_summaries()
            context = self.store.load_context()
            logger.info("Loaded %d chunk summaries", len(summaries))
        else:
            self._enter(AnalysisStage.PASS1)
            logger.info("=== Pass 1: Generating chunk summaries ===")
            summaries = self.generate_chunk_summaries(chunks)
            path = self.store.save_summaries(summaries)
            logger.info("Summaries saved to: %s", path)

            self._enter(AnalysisStage.CONTEXT)
            logger.info("Extracting conversation context...")
            context = self.extract_conversation_context(summaries)
            path = self.store.save_context(context)
            logger.info("Context saved to: %s", path)

        logger.info("Conversation topic: %s", context.topic)

        self._enter(AnalysisStage.PASS2)
        logger.info("=== Pass 2: Detecting highlights ===")
        raw_highlights = self.detect_all_highlights(chunks, context)
        logger.info("Found %d potential highlights", len(raw_highlights))

        self._enter(AnalysisStage.DONE)
        return AnalysisResult(
            chunks=chunks,
            summaries=summaries,
            context=context,
            raw_highlights=raw_highlights,
            resumed=resumed,
        )

    # ----------------------------
    # Pass 1
    # ----------------------------

    def summarize_chunk(self, chunk: Chunk) -> ChunkSummary:
        prompt = build_summary_prompt(chunk.text, chunk.index, chunk.start_time, chunk.end_time)
        response = self.client.generate(prompt)
        return ChunkSummary(
            index=chunk.index,
            start_time=chunk.start_time,
            end_time=chunk.end_time,
            summary=response.strip(),
        )

    def generate_chunk_summaries(self, chunks: list[Chunk]) -> list[ChunkSummary]:
        summaries: list[ChunkSummary] = []
        for i, chunk in enumerate(chunks):
            logger.info("Summarizing chunk %d/%d...", i + 1, len(chunks))
            summaries.append(self.summarize_chunk(chunk))
        return summaries

    def extract_conversation_context(self, summaries: list[ChunkSummary]) -> ConversationContext:
        """Derive the global context; a response without JSON is fatal."""
        response = self.client.generate(build_context_prompt(summaries))
        return parse_conversation_context(response)

    # ----------------------------
    # Pass 2
    # ----------------------------

    def detect_highlights(self, chunk: Chunk, context: ConversationContext) -> list[HighlightCandidate]:
        """Ask for highlights in one chunk; unparseable responses yield none."""
        prompt = build_highlight_prompt(chunk.text, chunk.start_time, chunk.end_time, context)
        response = self.client.generate(prompt)
        try:
            return parse_highlight_candidates(response)
        except HighlightParseError as e:
            logger.warning("Chunk %d: ignoring highlight response (%s)", chunk.index, e)
            return []

    def detect_all_highlights(self, chunks: list[Chunk], context: ConversationContext) -> list[RawHighlight]:
        all_highlights: list[RawHighlight] = []
        for i, chunk in enumerate(chunks):
            logger.info("Detecting highlights in chunk %d/%d...", i + 1, len(chunks))
            for candidate in self.detect_highlights(chunk, context):
                all_highlights.append(
                    RawHighlight(
                        chunk_index=chunk.index,
                        chunk_start_time=chunk.start_time,
                        chunk_end_time=chunk.end_time,
                        quote=candidate.quote,
                        reason=candidate.reason,
                    )
                )
        return all_highlights
