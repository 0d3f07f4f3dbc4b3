from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ..api import parse_file
from ..errors import ParseError
from .corpus import generate_corpus_files


logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Write a seeded corpus of `.proto` files, optionally parsing each one back."""
    ap = argparse.ArgumentParser(prog="python -m protoschema.testing")
    ap.add_argument("--seed", type=int, default=1)
    ap.add_argument("--count", type=int, default=1000)
    ap.add_argument("--out", default="tests/fixtures/generated_corpus")
    ap.add_argument("--check", action="store_true", help="Parse every written file and report failures")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    out_dir = Path(args.out).resolve() / f"seed_{args.seed}_count_{args.count}"
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for rel, src in generate_corpus_files(seed=args.seed, count=args.count):
        path = out_dir / rel
        path.write_text(src, encoding="utf-8")
        paths.append(path)
    logger.info("wrote %d files to %s", len(paths), out_dir)

    failures = 0
    if args.check:
        for path in paths:
            try:
                parse_file(path)
            except ParseError as e:
                print(str(e), file=sys.stderr)
                failures += 1

    print(str(out_dir))
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
