from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))


@pytest.fixture(autouse=True)
def restore_library_logger():
    """The CLI reroutes ``envbind`` records into loguru; undo that per test."""

    library_logger = logging.getLogger("envbind")
    handlers = list(library_logger.handlers)
    level = library_logger.level
    propagate = library_logger.propagate
    yield
    library_logger.handlers = handlers
    library_logger.setLevel(level)
    library_logger.propagate = propagate
