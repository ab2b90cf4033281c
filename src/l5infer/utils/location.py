"""Source positions carried by tokens and parse errors."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    """1-based line/column position inside a named source."""

    line: int
    column: int
    file: str | None = None

    def advance(self, text: str) -> Location:
        """Position reached after consuming text from this location."""
        newlines = text.count("\n")
        if newlines == 0:
            return Location(self.line, self.column + len(text), self.file)
        tail = text.rsplit("\n", 1)[1]
        return Location(self.line + newlines, len(tail) + 1, self.file)

    def __str__(self) -> str:
        if self.file:
            return f"{self.file}:{self.line}:{self.column}"
        return f"line {self.line}, column {self.column}"
