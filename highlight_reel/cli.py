"""Command-line entry point: transcript JSON -> highlights.json.

Run as a module::

    python -m highlight_reel.cli output/transcript.json \\
        --output output \\
        --chunk-duration 300 \\
        --provider gemini

Use ``--help`` for full argument documentation.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from highlight_reel.config import settings
from highlight_reel.errors import (
    ArtifactLoadError,
    ContextParseError,
    GenerationFailure,
    TranscriptFormatError,
)
from highlight_reel.generation.backends import get_generation_backend
from highlight_reel.ingestion.parsers import load_transcript
from highlight_reel.pipeline import extract_highlights, select_clip_highlights
from highlight_reel.pipeline_config import GenerationProvider, PipelineConfig


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="highlight-reel",
        description="Find highlight-worthy quotes in a timestamped conversation transcript.",
    )
    parser.add_argument("transcript", help="Path to the transcript JSON (segments with word timestamps).")
    parser.add_argument(
        "-o",
        "--output",
        default=settings.output_dir,
        help="Directory for analysis artifacts and highlights.json (default: %(default)s).",
    )
    parser.add_argument(
        "-c",
        "--chunk-duration",
        type=int,
        default=settings.chunk_duration,
        help="Analysis chunk duration in seconds (default: %(default)s).",
    )
    parser.add_argument(
        "--min-clip-duration",
        type=int,
        default=settings.min_clip_duration,
        help="Minimum highlight duration in seconds (default: %(default)s).",
    )
    parser.add_argument(
        "--provider",
        choices=[p.value for p in GenerationProvider],
        default=settings.ai_provider,
        help="Text-generation backend (default: %(default)s).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def _error_hint(exc: Exception, provider: str) -> str:
    if isinstance(exc, ArtifactLoadError):
        return "Saved analysis artifacts are unreadable. Delete them from the output directory to start over."
    if isinstance(exc, ContextParseError):
        return "The model did not return usable JSON for the conversation context. Re-run to retry."
    if provider == GenerationProvider.GEMINI:
        return "Check that GEMINI_API_KEY is valid and that you have API quota available."
    if provider == GenerationProvider.OLLAMA:
        return "Check that the Ollama server is running and OLLAMA_API_URL / OLLAMA_MODEL are correct."
    return "Check that ANTHROPIC_API_KEY is valid."


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    transcript_path = Path(args.transcript)
    if not transcript_path.exists():
        print(f"Error: Transcript file not found: {transcript_path}", file=sys.stderr)
        return 1

    try:
        config = PipelineConfig(
            chunk_duration=args.chunk_duration,
            min_clip_duration=args.min_clip_duration,
        )
        backend = get_generation_backend(args.provider)
        transcript = load_transcript(transcript_path)
    except (ValueError, TranscriptFormatError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    print(f"Transcript: {transcript_path} ({len(transcript.segments)} segments)")
    print(f"Output directory: {args.output}")
    print(f"Chunk duration: {config.chunk_duration} seconds")

    try:
        run = extract_highlights(transcript, args.output, config=config, backend=backend)
    except (ArtifactLoadError, ContextParseError, GenerationFailure) as exc:
        print(f"\n=== Error ===\nMessage: {exc}", file=sys.stderr)
        print(_error_hint(exc, args.provider), file=sys.stderr)
        return 1

    clip_ready = select_clip_highlights(run.highlights, config.min_clip_score)
    print(f"\nConversation topic: {run.context.topic}")
    print(f"Highlights: {len(run.highlights)} found, {len(clip_ready)} aligned well enough for clips")
    for i, h in enumerate(clip_ready, start=1):
        print(f"  {i}. [{h.start:.1f}s - {h.end:.1f}s] ({h.end - h.start:.1f}s) \"{h.quote[:60]}...\"")
    print(f"\nHighlights saved to: {run.highlights_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
