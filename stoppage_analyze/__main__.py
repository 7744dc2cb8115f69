"""Module entry point: python -m stoppage_analyze ..."""

from __future__ import annotations

from stoppage_analyze.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
