from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict, is_dataclass

from .api import parse_file
from .ast import ProtoFileElement
from .errors import ParseError


def _to_jsonable(obj):
    if is_dataclass(obj):
        return {k: _to_jsonable(v) for k, v in asdict(obj).items()}
    if isinstance(obj, (tuple, list)):
        return [_to_jsonable(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _to_jsonable(v) for k, v in obj.items()}
    return obj


def _summary(pf: ProtoFileElement) -> str:
    syntax = pf.syntax.value if pf.syntax else "-"
    return (
        f"syntax={syntax} package={pf.package_name or '-'} "
        f"types={len(pf.types)} services={len(pf.services)} extends={len(pf.extend_declarations)}"
    )


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="protoschema", description="Parse .proto schema files")
    ap.add_argument("files", nargs="+", help=".proto files to parse, each on its own")
    ap.add_argument("--json", action="store_true", help="Print parsed AST as JSON")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log parser activity to stderr")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    results: dict[str, ProtoFileElement] = {}
    for f in args.files:
        try:
            results[f] = parse_file(f)
        except ParseError as e:
            print(str(e), file=sys.stderr)
            return 1

    if args.json:
        payload = {k: _to_jsonable(v) for k, v in results.items()}
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        for f, pf in results.items():
            print(f"{f}: {_summary(pf)}")
    return 0
