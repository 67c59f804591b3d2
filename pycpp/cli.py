"""Command line interface for the pycpp macro preprocessor."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from pycpp.preprocessor import Preprocessor


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    ap = argparse.ArgumentParser(prog="pycpp", description="C macro preprocessor")
    ap.add_argument("source", nargs="?", default="-", help="Input source file ('-' or omitted for stdin)")
    ap.add_argument("-o", dest="output", required=False, help="Write output to this file instead of stdout")
    ap.add_argument("-D", dest="defines", action="append", default=[], metavar="NAME[=VALUE]",
                    help="Define a macro before reading the source")
    ap.add_argument("-U", dest="undefines", action="append", default=[], metavar="NAME",
                    help="Undefine a macro before reading the source")
    ap.add_argument("-dM", "--dump-macros", dest="dump_macros", action="store_true",
                    help="Print the final macro definitions instead of the expanded text")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log every expansion to stderr")
    args = ap.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    pp = Preprocessor(defines=args.defines, undefines=args.undefines)
    if args.source == "-":
        res = pp.preprocess_text(sys.stdin.read())
    else:
        res = pp.preprocess(args.source)

    for w in res.warnings:
        print(f"Warning: {w}", file=sys.stderr)
    if not res.success:
        for e in res.errors:
            print(f"Error: {e}", file=sys.stderr)
        return 1

    out = pp.macros.dump() if args.dump_macros else res.text
    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8", newline="") as f:
                f.write(out)
        except OSError as e:
            print(f"Error: cannot write {args.output}: {e}", file=sys.stderr)
            return 1
    else:
        sys.stdout.write(out)
    return 0
