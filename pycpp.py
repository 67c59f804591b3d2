#!/usr/bin/env python3
"""pycpp - top-level CLI wrapper for the pycpp macro preprocessor

Usage examples:
  ./pycpp.py input.c
  ./pycpp.py -D DEBUG=1 input.c -o expanded.c
  ./pycpp.py -dM input.c
"""
from __future__ import annotations

from pycpp.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
