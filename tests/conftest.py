from __future__ import annotations

import logging

import pytest

from common.base.logging import ROOT_LOGGER_NAME


@pytest.fixture(autouse=True)
def _reset_lister_logger():
    """Drop handlers bound to per-test capture streams."""
    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    logger._initialized = False  # type: ignore[attr-defined]
