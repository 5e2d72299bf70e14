"""Time-window chunking of transcript segments."""

from __future__ import annotations

import math

from highlight_reel.ingestion.models import Chunk, Segment


def group_segments_into_chunks(
    segments: list[Segment] | tuple[Segment, ...],
    chunk_duration: float = 300,
) -> list[Chunk]:
    """Group segments into fixed-duration time windows.

    A segment belongs to chunk ``floor(segment.start / chunk_duration)``
    based on its start time alone, so a segment running past a chunk
    boundary is never split. Chunks are emitted in the order their first
    segment appears; empty windows produce no chunk.

    Args:
        segments: Transcript segments, ordered by start time.
        chunk_duration: Window length in seconds.

    Returns:
        List of :class:`Chunk` instances.

    Raises:
        ValueError: If *chunk_duration* is not positive.
    """
    if chunk_duration <= 0:
        raise ValueError(f"chunk_duration must be positive, got {chunk_duration}")

    # (index, segments) groups of consecutive segments sharing a window
    groups: list[tuple[int, list[Segment]]] = []
    for seg in segments:
        chunk_idx = math.floor(seg.start / chunk_duration)
        if groups and groups[-1][0] == chunk_idx:
            groups[-1][1].append(seg)
        else:
            groups.append((chunk_idx, [seg]))

    chunks: list[Chunk] = []
    for chunk_idx, group_segs in groups:
        start_time = chunk_idx * chunk_duration
        chunks.append(
            Chunk(
                index=chunk_idx,
                start_time=start_time,
                end_time=start_time + chunk_duration,
                text=" ".join(s.text for s in group_segs).strip(),
                segments=tuple(group_segs),
            )
        )

    return chunks
