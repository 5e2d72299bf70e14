"""Prompt templates for chunk summaries, conversation context, and highlights."""

from __future__ import annotations

from highlight_reel.analysis.models import ChunkSummary, ConversationContext

SUMMARY_PROMPT = """\
You are summarizing a segment of a recorded conversation (a live audio Space or podcast).

SEGMENT {number} ({start} - {end}):
{text}

Provide a 1-2 sentence summary of what is discussed in this segment. Focus on the main \
topics, key points, or any notable moments. Be concise and factual.

Summary:"""

CONTEXT_PROMPT = """\
You are analyzing a recorded conversation (a live audio Space or podcast). Below are \
summaries of each segment of the conversation.

SEGMENT SUMMARIES:
{summaries}

Based on these summaries, extract the following information about the overall \
conversation. Respond in JSON format only, no additional text.

{{
  "topic": "The main topic or theme of the conversation (1 sentence)",
  "participants": ["List of speaker names or roles mentioned, if identifiable"],
  "keyPoints": ["List of 3-5 key discussion points or themes"],
  "narrative": "A brief narrative arc of how the conversation progressed (2-3 sentences)"
}}

JSON:"""

HIGHLIGHT_PROMPT = """\
You are identifying highlight-worthy moments from a recorded conversation for creating \
short video clips.

CONVERSATION CONTEXT:
- Topic: {topic}
- Key themes: {key_points}
- Narrative: {narrative}

CURRENT SEGMENT ({start} - {end}):
{text}

Identify 0-3 highlight-worthy moments from this segment. A good highlight is:
- An insightful or thought-provoking statement
- A memorable quote or strong opinion
- An interesting fact, statistic, or revelation
- A moment of humor or wit
- A key conclusion or important point

For each highlight, provide the EXACT quote (word-for-word as it appears in the text) \
and a brief reason why it's highlight-worthy.

Respond in JSON format only, no additional text. If no highlights are found, return an \
empty array.

[
  {{
    "quote": "exact quote from the transcript",
    "reason": "why this is highlight-worthy"
  }}
]

JSON:"""


def format_time(seconds: float) -> str:
    """Format seconds as ``M:SS`` (minutes are not wrapped into hours)."""
    mins, secs = divmod(int(seconds), 60)
    return f"{mins}:{secs:02d}"


def build_summary_prompt(text: str, chunk_index: int, start_time: float, end_time: float) -> str:
    return SUMMARY_PROMPT.format(
        number=chunk_index + 1,
        start=format_time(start_time),
        end=format_time(end_time),
        text=text,
    )


def format_summaries(summaries: list[ChunkSummary]) -> str:
    """One ``[M:SS - M:SS]: summary`` line per chunk."""
    return "\n".join(
        f"[{format_time(s.start_time)} - {format_time(s.end_time)}]: {s.summary}" for s in summaries
    )


def build_context_prompt(summaries: list[ChunkSummary]) -> str:
    return CONTEXT_PROMPT.format(summaries=format_summaries(summaries))


def build_highlight_prompt(
    text: str,
    start_time: float,
    end_time: float,
    context: ConversationContext,
) -> str:
    return HIGHLIGHT_PROMPT.format(
        topic=context.topic,
        key_points=", ".join(context.key_points),
        narrative=context.narrative,
        start=format_time(start_time),
        end=format_time(end_time),
        text=text,
    )
