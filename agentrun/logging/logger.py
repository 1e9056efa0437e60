# ==============================
# Logging Bootstrap
# ==============================
"""
Logging bootstrap.

Goals:
- Centralize logger configuration using Settings.logging.
- Provide structured context fields (run_id, thread_id, step_id).
- Keep it simple: stdlib logging + JSON-line formatter.

No persistence here.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

from agentrun.config.schema import Settings

LOGGER_NAME = "agentrun"
CONTEXT_FIELDS = ("run_id", "thread_id", "step_id")


@dataclass(frozen=True)
class LogContext:
    run_id: Optional[str] = None
    thread_id: Optional[str] = None
    step_id: Optional[str] = None


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        # Optional structured extras; unset context is dropped
        for k in CONTEXT_FIELDS:
            v = getattr(record, k, None)
            if v is not None:
                payload[k] = v
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def bootstrap_logger(settings: Settings) -> logging.Logger:
    """
    Configure the package logger based on settings.
    Returns the named logger ("agentrun").
    """
    level = getattr(logging, settings.logging.level.upper(), logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # clear existing handlers to avoid duplicates on re-bootstrap
    logger.handlers = []

    if settings.logging.console:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(JsonLineFormatter())
        logger.addHandler(handler)

    return logger


def with_context(logger: logging.Logger, ctx: LogContext) -> logging.LoggerAdapter:
    return logging.LoggerAdapter(
        logger,
        {
            "run_id": ctx.run_id,
            "thread_id": ctx.thread_id,
            "step_id": ctx.step_id,
        },
    )
