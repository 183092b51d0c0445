"""
Centralized Logging

Architectural Intent:
- Installs the handler for the "tierplan" logger hierarchy, once, from the
  entry point; library code only calls logging.getLogger(__name__)
- Resolution decisions carry their topology context (component kind, tier,
  deployment, template) as LogRecord attributes passed through `extra=`, so
  a run over many components can be filtered per tier

Design Decisions:
- JSON output (--log-json) emits the context as top-level keys
- Human output appends the context as a "[component/tier]" suffix
- Log level names from the settings file are resolved leniently; an unknown
  name falls back to the default rather than failing the run
"""

import json
import logging
import sys
from datetime import datetime, UTC

ROOT_LOGGER = "tierplan"

# LogRecord attributes the resolution services attach via `extra=`.
CONTEXT_FIELDS = ("component", "tier", "deployment_id", "template_id")


def record_context(record: logging.LogRecord) -> dict:
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None)
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with topology context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(record_context(record))
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class ContextFormatter(logging.Formatter):
    """Human-readable lines ending in "[component/tier]" when context is set."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        scope = "/".join(
            context[k] for k in ("component", "tier") if k in context
        )
        return f"{line} [{scope}]" if scope else line


def level_from_name(name: str, default: int = logging.WARNING) -> int:
    level = logging.getLevelName(name.upper()) if name else default
    return level if isinstance(level, int) else default


def configure_logging(level: int = logging.WARNING, json_format: bool = False) -> None:
    """Send tierplan logs at `level` and above to stderr, replacing prior handlers."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else ContextFormatter())
    logger.addHandler(handler)
