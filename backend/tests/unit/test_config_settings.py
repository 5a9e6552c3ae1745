"""Unit tests for application settings configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from ragdesk.config import Settings


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_ingestion_and_privacy_defaults():
    settings = Settings(_env_file=None)
    assert (settings.chunk_size, settings.chunk_overlap, settings.chunk_max_chunks) == (1000, 200, None)
    assert (settings.embedding_batch_size, settings.embedding_batch_delay_seconds) == (10, 1.0)
    assert (settings.search_match_threshold, settings.search_default_limit) == (0.7, 5)
    assert (settings.data_request_sla_days, settings.data_request_sla_warning_days) == (30, 27)
    assert settings.export_retention_days == 30


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("CHUNK_SIZE", "500")
    monkeypatch.setenv("SEARCH_MATCH_THRESHOLD", "0.8")
    settings = Settings(_env_file=None)
    assert settings.chunk_size == 500
    assert settings.search_match_threshold == 0.8


@pytest.mark.parametrize(
    "overrides",
    [
        {"chunk_size": 100, "chunk_overlap": 100},
        {"chunk_size": 100, "chunk_overlap": 150},
        {"chunk_overlap": -1},
        {"chunk_size": 0, "chunk_overlap": 0},
        {"chunk_max_chunks": 0},
    ],
)
def test_unusable_chunking_settings_fail_at_load(overrides):
    with pytest.raises(PydanticValidationError):
        Settings(_env_file=None, **overrides)


def test_unusable_chunking_from_environment_fails(monkeypatch):
    monkeypatch.setenv("CHUNK_SIZE", "200")
    monkeypatch.setenv("CHUNK_OVERLAP", "200")
    with pytest.raises(PydanticValidationError, match="CHUNK_OVERLAP"):
        Settings(_env_file=None)
