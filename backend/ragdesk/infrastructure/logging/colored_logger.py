"""Colored console logging for the document ingestion pipeline.

Each stage gets its own color and icon so one document can be followed
from URL normalization to stored chunks in a busy terminal:

    NORMALIZE (yellow) → DEDUPE (blue) → CHUNK (cyan) → EMBED (magenta)
    → STORE (green), with ERROR in red and timings in gray.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, NamedTuple

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
MAGENTA = "\033[95m"
CYAN = "\033[96m"
GRAY = "\033[90m"


class Stage(NamedTuple):
    label: str
    color: str
    icon: str


class PipelineStage:
    NORMALIZE = Stage("NORMALIZE", YELLOW, "🔗")
    DEDUPE = Stage("DEDUPE", BLUE, "🔍")
    CHUNK = Stage("CHUNK", CYAN, "✂️")
    EMBED = Stage("EMBED", MAGENTA, "🧮")
    STORE = Stage("STORE", GREEN, "💾")
    ERROR = Stage("ERROR", RED, "❌")
    COMPLETE = Stage("COMPLETE", GREEN, "✅")


def _details(kwargs: dict[str, Any], tone: str = GRAY) -> str:
    if not kwargs:
        return ""
    return f" {tone}({' | '.join(f'{k}={v}' for k, v in kwargs.items())}){RESET}"


class PipelineLogger:
    """Stage-aware wrapper around a standard logger.

    Usage:
        log = PipelineLogger("DocumentIngestion")
        log.step_start(PipelineStage.CHUNK, "Chunking (fixed)")
        log.step_complete(PipelineStage.CHUNK, "12 chunk(s)", size=1000)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def step_start(self, stage: Stage, message: str, **kwargs: Any) -> None:
        self._logger.info(
            "%s%s%s [%s]%s %s%s%s%s",
            stage.color, BOLD, stage.icon, stage.label, RESET,
            stage.color, message, RESET, _details(kwargs),
        )

    def step_complete(self, stage: Stage, message: str, **kwargs: Any) -> None:
        self._logger.info(
            "%s%s [%s]%s %s✓ %s%s%s",
            stage.color, stage.icon, stage.label, RESET,
            GREEN, message, RESET, _details(kwargs),
        )

    def step_error(self, stage: Stage, message: str, error: Exception | None = None) -> None:
        cause = f" {DIM}→ {type(error).__name__}: {error}{RESET}" if error else ""
        self._logger.error(
            "%s%s❌ [%s]%s %s%s%s%s", RED, BOLD, stage.label, RESET, RED, message, RESET, cause
        )

    def detail(self, message: str, **kwargs: Any) -> None:
        self._logger.info("   %s├─ %s%s%s", GRAY, message, RESET, _details(kwargs, DIM))

    def separator(self, title: str = "") -> None:
        line = f"{'─' * 10} {title} {'─' * max(0, 50 - len(title))}" if title else "─" * 60
        self._logger.info("%s%s%s", GRAY, line, RESET)

    def stats(self, **kwargs: Any) -> None:
        summary = " | ".join(f"{k}: {v}" for k, v in kwargs.items())
        self._logger.info("   %s📈 %s%s", GRAY, summary, RESET)

    @contextmanager
    def timed_step(self, stage: Stage, message: str, **kwargs: Any):
        """Log start, then completion or failure with the elapsed time."""
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as exc:
            self.step_error(stage, f"{message} failed after {time.perf_counter() - start:.2f}s", error=exc)
            raise
        self.step_complete(stage, f"{message} ({time.perf_counter() - start:.2f}s)")
