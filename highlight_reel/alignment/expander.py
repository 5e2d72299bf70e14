"""Grow short highlights to a minimum clip duration along segment boundaries."""

from __future__ import annotations

from highlight_reel.alignment.models import AlignedHighlight, ExpandedHighlight
from highlight_reel.ingestion.models import Segment, Word


def _overlapping_range(
    highlight: AlignedHighlight, segments: list[Segment] | tuple[Segment, ...]
) -> tuple[int, int] | None:
    first = last = -1
    for i, seg in enumerate(segments):
        if seg.end >= highlight.start and seg.start <= highlight.end:
            if first == -1:
                first = i
            last = i
    if first == -1:
        return None
    return first, last


def expand_highlight_with_segments(
    highlight: AlignedHighlight,
    segments: list[Segment] | tuple[Segment, ...],
    min_duration: float = 60,
) -> AlignedHighlight:
    """Widen *highlight* by whole segments until it lasts *min_duration*.

    Starting from the segments overlapping the highlight, each round adds one
    preceding segment, re-checks the duration, then adds one following
    segment. Lead-in context is preferred over trailing material. Growth
    stops when the target is met or the transcript is exhausted on both
    sides, so a transcript shorter than *min_duration* yields its full span.

    Args:
        highlight: An aligned highlight.
        segments: All transcript segments, ordered by start time.
        min_duration: Target clip length in seconds.

    Returns:
        The input itself when it is already long enough or overlaps no
        segment; otherwise a new :class:`ExpandedHighlight`.
    """
    if highlight.end - highlight.start >= min_duration:
        return highlight

    span = _overlapping_range(highlight, segments)
    if span is None:
        return highlight
    start_idx, end_idx = span

    # Never shrink the aligned span, even if it starts or ends in a pause.
    expanded_start = min(highlight.start, segments[start_idx].start)
    expanded_end = max(highlight.end, segments[end_idx].end)

    while expanded_end - expanded_start < min_duration:
        can_expand_backward = start_idx > 0
        can_expand_forward = end_idx < len(segments) - 1
        if not can_expand_backward and not can_expand_forward:
            break

        if can_expand_backward:
            start_idx -= 1
            expanded_start = min(expanded_start, segments[start_idx].start)

        if expanded_end - expanded_start >= min_duration:
            break

        if can_expand_forward:
            end_idx += 1
            expanded_end = max(expanded_end, segments[end_idx].end)

    words: list[Word] = []
    for seg in segments[start_idx : end_idx + 1]:
        words.extend(seg.words)

    return ExpandedHighlight.from_aligned(
        highlight,
        start=expanded_start,
        end=expanded_end,
        words=words,
    )
