#!/usr/bin/env python3
"""CLI entrypoint for the DEG summary workbook pipeline."""

from __future__ import annotations

from degbook.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
