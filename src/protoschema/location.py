from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Location:
    """A position in a schema source.

    Line and column are 1-based for user-facing messages.
    """

    file: str
    line: int = 1
    column: int = 1

    def at(self, line: int, column: int) -> Location:
        return Location(file=self.file, line=line, column=column)

    def format(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    def __str__(self) -> str:
        return self.format()
