from __future__ import annotations

import logging
from typing import Iterator

import pytest


@pytest.fixture(autouse=True)
def _reset_storyscan_logger() -> Iterator[None]:
    """Undo ``configure_logging`` so caplog keeps receiving storyscan records."""
    yield
    logger = logging.getLogger("storyscan")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
