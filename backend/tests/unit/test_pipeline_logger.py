"""Tests for the colored ingestion pipeline logger."""

import logging

import pytest

from ragdesk.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage


def test_step_messages_carry_stage_label_and_details(caplog):
    log = PipelineLogger("test.pipeline")
    with caplog.at_level(logging.INFO, logger="test.pipeline"):
        log.step_complete(PipelineStage.CHUNK, "3 chunk(s)", size=1000)

    [record] = caplog.records
    text = record.getMessage()
    assert "[CHUNK]" in text
    assert "3 chunk(s)" in text
    assert "size=1000" in text


def test_timed_step_logs_failure_and_reraises(caplog):
    log = PipelineLogger("test.pipeline")
    with caplog.at_level(logging.INFO, logger="test.pipeline"):
        with pytest.raises(RuntimeError):
            with log.timed_step(PipelineStage.EMBED, "Embedding 2 chunk(s)"):
                raise RuntimeError("provider down")

    levels = [r.levelno for r in caplog.records]
    assert levels == [logging.INFO, logging.ERROR]
    assert "RuntimeError: provider down" in caplog.records[-1].getMessage()
