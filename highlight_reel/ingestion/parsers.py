"""Parsers for speech-to-text transcript JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from highlight_reel.errors import TranscriptFormatError
from highlight_reel.ingestion.models import Segment, Transcript, Word


def _parse_word(item: Any, seg_idx: int) -> Word:
    if not isinstance(item, dict) or "start" not in item or "end" not in item:
        msg = f"Segment {seg_idx} has a word without start/end: {item!r}"
        raise TranscriptFormatError(msg)
    try:
        return Word.from_dict(item)
    except (TypeError, ValueError) as e:
        msg = f"Segment {seg_idx} has a word with non-numeric start/end: {item!r}"
        raise TranscriptFormatError(msg) from e


def parse_segments(raw_segments: list[Any]) -> list[Segment]:
    """Parse whisper-style segment dicts into :class:`Segment` instances.

    Segment order is preserved as given; the transcription stage is
    responsible for emitting segments sorted by start time.
    """
    segments: list[Segment] = []
    for seg_idx, seg in enumerate(raw_segments):
        if not isinstance(seg, dict) or "start" not in seg or "end" not in seg:
            msg = f"Segment {seg_idx} is missing start/end: {seg!r}"
            raise TranscriptFormatError(msg)
        try:
            start, end = float(seg["start"]), float(seg["end"])
        except (TypeError, ValueError) as e:
            msg = f"Segment {seg_idx} has non-numeric start/end: {seg!r}"
            raise TranscriptFormatError(msg) from e
        words = tuple(_parse_word(w, seg_idx) for w in seg.get("words") or [])
        text = seg.get("text")
        segments.append(
            Segment(
                start=start,
                end=end,
                text="" if text is None else str(text),
                words=words,
            )
        )
    return segments


def parse_transcript(data: dict[str, Any]) -> Transcript:
    """Parse a transcript document.

    Expected format::

        {"segments": [{"start": s, "end": s, "text": "...",
                       "words": [{"word": "...", "start": s, "end": s}]}]}

    Word text may be stored under ``word`` or ``text``.

    Raises:
        TranscriptFormatError: If the document has no ``segments`` list or a
            segment/word lacks timestamps.
    """
    if not isinstance(data, dict) or not isinstance(data.get("segments"), list):
        keys = list(data.keys()) if isinstance(data, dict) else type(data).__name__
        msg = f"Transcript JSON must contain a 'segments' list. Got: {keys}"
        raise TranscriptFormatError(msg)
    return Transcript(segments=tuple(parse_segments(data["segments"])))


def load_transcript(path: str | Path) -> Transcript:
    """Read and parse a transcript JSON file."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise TranscriptFormatError(f"Transcript file {path} is not valid JSON: {e}") from e
    return parse_transcript(data)
