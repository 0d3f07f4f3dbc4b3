from __future__ import annotations

from .api import parse_file, parse_source
from .ast import MAX_TAG_VALUE, FieldLabel, ProtoFileElement, Syntax
from .errors import ParseError
from .location import Location

__all__ = [
    "MAX_TAG_VALUE",
    "FieldLabel",
    "Location",
    "ParseError",
    "ProtoFileElement",
    "Syntax",
    "parse_file",
    "parse_source",
]
