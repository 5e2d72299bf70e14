"""Map LLM-proposed quotes back onto exact word-level time spans.

Quotes come back from the model only approximately verbatim (punctuation,
casing, plurals drift), so matching is fuzzy: a sliding window of quote
length is scored token by token, where a token matches a word when their
alphanumeric forms are equal or one contains the other. The scan is bounded
by one chunk's words, so it stays cheap even though it runs per highlight.
"""

from __future__ import annotations

import logging
import re

from highlight_reel.alignment.models import AlignedHighlight, QuoteMatch
from highlight_reel.analysis.models import RawHighlight
from highlight_reel.ingestion.models import IndexedWord, Segment
from highlight_reel.ingestion.word_index import build_word_index
from highlight_reel.pipeline_config import PipelineConfig

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def _clean(token: str) -> str:
    return _NON_ALNUM_RE.sub("", token)


def _tokens_match(quote_token: str, word: str) -> bool:
    q, w = _clean(quote_token), _clean(word)
    return q == w or q in w or w in q


def find_quote_in_words(
    quote: str,
    word_index: list[IndexedWord],
    window_start: float,
    window_end: float,
) -> QuoteMatch | None:
    """Find the word window that best matches *quote* inside a time range.

    Args:
        quote: Free-text quote proposed by the model.
        word_index: Output of :func:`build_word_index`.
        window_start: Only words starting at or after this time are considered.
        window_end: Only words ending at or before this time are considered.

    Returns:
        The earliest best-scoring window, or ``None`` when the quote is empty
        or the range holds fewer words than the quote has tokens.
    """
    quote_tokens = quote.lower().split()
    if not quote_tokens:
        return None

    bounded = [w for w in word_index if w.start >= window_start and w.end <= window_end]
    n_tokens = len(quote_tokens)

    best: QuoteMatch | None = None
    for i in range(len(bounded) - n_tokens + 1):
        window = bounded[i : i + n_tokens]
        matches = sum(
            1 for token, word in zip(quote_tokens, window, strict=True) if _tokens_match(token, word.text)
        )
        score = matches / n_tokens

        if best is None or score > best.match_score:
            best = QuoteMatch(
                start=window[0].start,
                end=window[-1].end,
                words=tuple(w.as_word() for w in window),
                match_score=score,
            )
        if score == 1.0:
            break

    return best


def _find_in_segments(raw: RawHighlight, segments: list[Segment] | tuple[Segment, ...]) -> Segment | None:
    """First segment fully inside the chunk window whose text contains the quote."""
    needle = raw.quote.lower().strip()
    if not needle:
        return None
    for seg in segments:
        if seg.start >= raw.chunk_start_time and seg.end <= raw.chunk_end_time:
            if needle in seg.text.lower():
                return seg
    return None


def align_highlight(
    raw: RawHighlight,
    word_index: list[IndexedWord],
    segments: list[Segment] | tuple[Segment, ...],
    config: PipelineConfig | None = None,
) -> AlignedHighlight:
    """Locate one raw highlight on the transcript timeline.

    Tries, in order: a word-level match scoring above
    ``config.min_match_score`` within the chunk window widened by
    ``config.window_buffer``; a segment whose text contains the quote
    (``match_score = config.segment_match_score``); finally the chunk window
    itself with no words and ``match_score = 0``. Never raises for a bad quote.
    """
    config = config or PipelineConfig()

    match = find_quote_in_words(
        raw.quote,
        word_index,
        raw.chunk_start_time - config.window_buffer,
        raw.chunk_end_time + config.window_buffer,
    )
    if match is not None and match.match_score > config.min_match_score:
        return AlignedHighlight.from_raw(
            raw,
            start=match.start,
            end=match.end,
            words=match.words,
            match_score=match.match_score,
        )

    seg = _find_in_segments(raw, segments)
    if seg is not None:
        logger.debug("Quote matched by segment text only: %.40r", raw.quote)
        return AlignedHighlight.from_raw(
            raw,
            start=seg.words[0].start if seg.words else seg.start,
            end=seg.words[-1].end if seg.words else seg.end,
            words=seg.words,
            match_score=config.segment_match_score,
        )

    logger.info("Could not align quote in chunk %d: %.40r", raw.chunk_index, raw.quote)
    return AlignedHighlight.from_raw(
        raw,
        start=raw.chunk_start_time,
        end=raw.chunk_end_time,
        words=(),
        match_score=0.0,
    )


def map_highlights_to_timestamps(
    highlights: list[RawHighlight],
    segments: list[Segment] | tuple[Segment, ...],
    config: PipelineConfig | None = None,
) -> list[AlignedHighlight]:
    """Align every raw highlight, building the word index once."""
    word_index = build_word_index(segments)
    return [align_highlight(h, word_index, segments, config) for h in highlights]
