"""Flat-file storage for intermediate and final pipeline artifacts."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from highlight_reel.alignment.models import AlignedHighlight, highlight_from_dict
from highlight_reel.analysis.models import ChunkSummary, ConversationContext
from highlight_reel.errors import ArtifactLoadError

SUMMARIES_FILE = "chunk_summaries.json"
CONTEXT_FILE = "conversation_context.json"
HIGHLIGHTS_FILE = "highlights.json"

T = TypeVar("T")


class ArtifactStore:
    """Reads and writes the JSON artifacts of one run in *output_dir*."""

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)

    @property
    def summaries_path(self) -> Path:
        return self.output_dir / SUMMARIES_FILE

    @property
    def context_path(self) -> Path:
        return self.output_dir / CONTEXT_FILE

    @property
    def highlights_path(self) -> Path:
        return self.output_dir / HIGHLIGHTS_FILE

    def has_analysis(self) -> bool:
        """True when both Pass 1 artifacts exist and the run can resume."""
        return self.summaries_path.exists() and self.context_path.exists()

    def _write_json(self, path: Path, data: Any) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @staticmethod
    def _read_json(path: Path) -> Any:
        with open(path, encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise ArtifactLoadError(str(path), f"not valid JSON ({e})") from e

    def _load_records(self, path: Path, build: Callable[[Any], T]) -> T:
        data = self._read_json(path)
        try:
            return build(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ArtifactLoadError(str(path), f"unexpected content ({e!r})") from e

    def save_summaries(self, summaries: list[ChunkSummary]) -> Path:
        self._write_json(self.summaries_path, [s.to_dict() for s in summaries])
        return self.summaries_path

    def load_summaries(self) -> list[ChunkSummary]:
        return self._load_records(
            self.summaries_path, lambda data: [ChunkSummary.from_dict(item) for item in data]
        )

    def save_context(self, context: ConversationContext) -> Path:
        self._write_json(self.context_path, context.to_dict())
        return self.context_path

    def load_context(self) -> ConversationContext:
        return self._load_records(self.context_path, ConversationContext.from_dict)

    def save_highlights(self, highlights: list[AlignedHighlight]) -> Path:
        self._write_json(self.highlights_path, [h.to_dict() for h in highlights])
        return self.highlights_path

    def load_highlights(self) -> list[AlignedHighlight]:
        return self._load_records(
            self.highlights_path, lambda data: [highlight_from_dict(item) for item in data]
        )
