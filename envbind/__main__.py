"""``python -m envbind``."""
from __future__ import annotations

from envbind.cli import main

if __name__ == "__main__":  # pragma: no cover - module CLI entry point
    raise SystemExit(main())
