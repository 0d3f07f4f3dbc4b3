from __future__ import annotations

from dataclasses import dataclass

from .location import Location


@dataclass(slots=True)
class ParseError(Exception):
    location: Location
    message: str

    def __str__(self) -> str:
        return f"{self.location.format()}: {self.message}"
