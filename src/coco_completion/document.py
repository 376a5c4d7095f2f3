"""In-memory text document used as the completion text source."""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from pathlib import Path
from typing import List, Protocol

from .languages import language_id_for_path


@dataclass(frozen=True)
class Position:
    line: int
    character: int


class TextSource(Protocol):
    language_id: str

    def offset_at(self, position: Position) -> int:
        ...

    def position_at(self, offset: int) -> Position:
        ...

    def get_text(self, start: Position, end: Position) -> str:
        ...


class TextDocument:
    """Plain-text document with line/character addressing.

    Positions and offsets outside the content are clamped to the nearest
    valid location instead of raising.
    """

    def __init__(
        self,
        text: str,
        language_id: str = "plaintext",
        file_name: str = "Untitled-1",
        is_untitled: bool = True,
    ) -> None:
        self.text = text
        self.language_id = language_id
        self.file_name = file_name
        self.is_untitled = is_untitled
        self._line_starts = self._compute_line_starts(text)

    @staticmethod
    def _compute_line_starts(text: str) -> List[int]:
        starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                starts.append(index + 1)
        return starts

    @classmethod
    def from_path(cls, path: str | Path) -> "TextDocument":
        file_path = Path(path)
        return cls(
            text=file_path.read_text(encoding="utf-8"),
            language_id=language_id_for_path(file_path),
            file_name=str(file_path),
            is_untitled=False,
        )

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def _clamp_offset(self, offset: int) -> int:
        return min(max(offset, 0), len(self.text))

    def offset_at(self, position: Position) -> int:
        if position.line < 0:
            return 0
        if position.line >= self.line_count:
            return len(self.text)
        line_start = self._line_starts[position.line]
        if position.line + 1 < self.line_count:
            line_end = self._line_starts[position.line + 1] - 1
        else:
            line_end = len(self.text)
        return line_start + min(max(position.character, 0), line_end - line_start)

    def position_at(self, offset: int) -> Position:
        offset = self._clamp_offset(offset)
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return Position(line=line, character=offset - self._line_starts[line])

    def get_text(self, start: Position, end: Position) -> str:
        start_offset = self.offset_at(start)
        end_offset = self.offset_at(end)
        if end_offset < start_offset:
            start_offset, end_offset = end_offset, start_offset
        return self.text[start_offset:end_offset]
