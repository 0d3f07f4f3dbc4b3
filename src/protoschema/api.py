from __future__ import annotations

import logging
from pathlib import Path

from .ast import ProtoFileElement
from .location import Location
from .parser import ProtoParser


logger = logging.getLogger(__name__)


def parse_source(data: str, *, file: str = "<memory>") -> ProtoFileElement:
    """Parse one schema held in memory. `file` is only used in diagnostics."""
    logger.debug("parsing %s (%d chars)", file, len(data))
    proto_file = ProtoParser.parse(Location(file=file), data)
    logger.debug(
        "parsed %s: syntax=%s package=%s types=%d services=%d extends=%d",
        file,
        proto_file.syntax.value if proto_file.syntax else None,
        proto_file.package_name,
        len(proto_file.types),
        len(proto_file.services),
        len(proto_file.extend_declarations),
    )
    return proto_file


def parse_file(path: str | Path) -> ProtoFileElement:
    """Parse a single `.proto` file. Imports are recorded, not followed."""
    p = Path(path).expanduser().resolve()
    src = p.read_text(encoding="utf-8-sig")
    return parse_source(src, file=str(p))
