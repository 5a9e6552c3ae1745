"""Logging setup: one root handler plus per-category levels from Settings.

Categories group loggers that are tuned together, e.g. quieting SQL echo
while the ingestion pipeline stays verbose, or raising the privacy
workflow (audit trail, cascading deletion) to DEBUG during an incident.

Usage:
    from ragdesk.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, from the FastAPI lifespan
"""

import logging
import sys

from ragdesk.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Settings field -> logger names it controls.
LOGGER_CATEGORIES: dict[str, tuple[str, ...]] = {
    "log_level_sql": ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "asyncpg"),
    "log_level_http": ("httpx", "httpcore"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_pipeline": (
        "DocumentIngestion",
        "ragdesk.application.services.document_service",
        "ragdesk.application.services.embedding_gateway",
    ),
    "log_level_openrouter": ("ragdesk.infrastructure.openrouter",),
    "log_level_privacy": (
        "ragdesk.application.services.audit_trail",
        "ragdesk.application.services.cascading_deletion",
        "ragdesk.application.services.data_request_service",
        "ragdesk.application.services.consent_service",
    ),
}


def setup_logging(settings: Settings | None = None) -> dict[str, int]:
    """Configure the root logger and every category logger.

    Returns:
        The level applied to each category logger, keyed by logger name.
    """
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(parse_level(settings.log_level))
    # uvicorn installs its own handlers; scripts and tests may not.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    applied: dict[str, int] = {}
    for field_name, logger_names in LOGGER_CATEGORIES.items():
        level = parse_level(getattr(settings, field_name, "INFO"))
        for name in logger_names:
            logging.getLogger(name).setLevel(level)
            applied[name] = level

    logging.getLogger(__name__).debug(
        "Logging configured: root=%s %s",
        settings.log_level,
        " ".join(f"{f.removeprefix('log_level_')}={getattr(settings, f)}" for f in LOGGER_CATEGORIES),
    )
    return applied


def parse_level(raw: str) -> int:
    """Level name to ``logging`` constant; unknown names fall back to INFO."""
    numeric = logging.getLevelName(raw.strip().upper())
    return numeric if isinstance(numeric, int) else logging.INFO
