"""Tests for per-category logging levels."""

import logging

from ragdesk.config import Settings
from ragdesk.infrastructure.logging.log_config import parse_level, setup_logging


def test_parse_level():
    assert parse_level("debug") == logging.DEBUG
    assert parse_level(" WARNING ") == logging.WARNING
    assert parse_level("chatty") == logging.INFO


def test_categories_get_their_own_levels():
    settings = Settings(
        _env_file=None,
        log_level_sql="ERROR",
        log_level_privacy="DEBUG",
        log_level_pipeline="WARNING",
    )

    applied = setup_logging(settings)

    assert applied["sqlalchemy.engine"] == logging.ERROR
    assert logging.getLogger("ragdesk.application.services.audit_trail").level == logging.DEBUG
    assert logging.getLogger("DocumentIngestion").level == logging.WARNING
    assert applied["httpx"] == logging.WARNING
