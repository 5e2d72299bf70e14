"""Flat, chronologically ordered index of every transcript word."""

from __future__ import annotations

from highlight_reel.ingestion.models import IndexedWord, Segment


def normalize_word(text: str) -> str:
    """Lower-case and trim a word for matching."""
    return text.lower().strip()


def build_word_index(segments: list[Segment] | tuple[Segment, ...]) -> list[IndexedWord]:
    """Flatten all segment words into one list, keeping provenance.

    Word text is normalized (see :func:`normalize_word`), so matching against
    the index is case-insensitive by construction. Order follows the input,
    which is chronological as long as segments are sorted by start time.

    Args:
        segments: Transcript segments with word-level timestamps.

    Returns:
        List of :class:`IndexedWord` with ``segment_index`` back-references.
    """
    index: list[IndexedWord] = []
    for seg_idx, seg in enumerate(segments):
        for word in seg.words:
            index.append(
                IndexedWord(
                    text=normalize_word(word.text),
                    start=word.start,
                    end=word.end,
                    segment_index=seg_idx,
                )
            )
    return index
