"""Shared fixtures: synthetic transcripts and a scripted generation backend."""

from __future__ import annotations

import json
from collections.abc import Callable

import pytest

from highlight_reel.ingestion.models import Segment, Transcript, Word


def make_segment(start: float, text: str, word_duration: float = 0.5) -> Segment:
    """Build a segment whose words are laid out back to back from *start*."""
    words: list[Word] = []
    t = start
    for token in text.split():
        words.append(Word(text=token, start=t, end=t + word_duration))
        t += word_duration
    return Segment(start=start, end=t, text=text, words=tuple(words))


CONTEXT_JSON = {
    "topic": "Open source funding",
    "participants": ["Host", "Maintainer"],
    "keyPoints": ["Sponsorship", "Burnout"],
    "narrative": "The host and a maintainer discuss how projects get funded.",
}


class ScriptedBackend:
    """Generation backend answering by prompt type, recording every prompt."""

    def __init__(
        self,
        context_response: str | None = None,
        highlight_responses: Callable[[str], str] | None = None,
    ) -> None:
        self.prompts: list[str] = []
        self.context_response = context_response or (
            "Here is the context:\n```json\n" + json.dumps(CONTEXT_JSON) + "\n```"
        )
        self.highlight_responses = highlight_responses or (lambda prompt: "[]")

    def calls_of(self, kind: str) -> list[str]:
        return [p for p in self.prompts if _kind(p) == kind]

    def generate_content(self, prompt: str) -> str:
        self.prompts.append(prompt)
        kind = _kind(prompt)
        if kind == "summary":
            return "  The speakers talk about funding.  \n"
        if kind == "context":
            return self.context_response
        return self.highlight_responses(prompt)


def _kind(prompt: str) -> str:
    if "SEGMENT SUMMARIES:" in prompt:
        return "context"
    if "highlight-worthy moments" in prompt:
        return "highlights"
    return "summary"


@pytest.fixture
def podcast_transcript() -> Transcript:
    """Three chunks at 300s: 0-300, 300-600 and 600-900 (one segment each window start)."""
    return Transcript(
        segments=(
            make_segment(0.0, "Welcome back to the show everyone."),
            make_segment(10.0, "Today we talk about funding open source."),
            make_segment(290.0, "Money alone will not fix maintainer burnout."),
            make_segment(320.0, "Sponsors want visibility, not just good will."),
            make_segment(610.0, "Thanks for listening and see you next week."),
        )
    )
