"""Tests for logging configuration."""

import logging

from webinar_access.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("webinar_access")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logging.getLogger("webinar_access.services.roster").getEffectiveLevel() == (
        logging.INFO
    )
