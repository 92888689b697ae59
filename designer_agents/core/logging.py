"""Logging setup for the agent system.

Every record is a structlog event name plus keyword fields. Records emitted
while a request is being handled carry its ``request_id``. Credentials are
masked before rendering, and long free text (user requests, LLM replies,
markup) is clipped so a single record stays readable.
"""

import logging
import re
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional

import structlog

from designer_agents import __version__
from designer_agents.core.config import Settings, settings as default_settings

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

REDACTED = "[REDACTED]"
MAX_REDACT_DEPTH = 10
MAX_TEXT_LENGTH = 2000

# Substrings of field names whose values are never written out
_SECRET_KEY_PARTS = (
    "password", "secret", "token", "credential", "auth",
    "apikey", "api_key", "cookie", "session",
)
# Token accounting fields, not secrets
_COUNT_SUFFIXES = ("_tokens", "tokens_used")

_SECRET_VALUE = re.compile(r"\bsk-[\w-]+|\bBearer\s")

_NOISY_LOGGERS = ("anthropic", "httpx", "httpcore")


def _is_sensitive_key(key: Any) -> bool:
    name = str(key).lower()
    if name.endswith(_COUNT_SUFFIXES):
        return False
    return any(part in name for part in _SECRET_KEY_PARTS)


def redact_sensitive(data: Any, depth: int = 0) -> Any:
    """Return a copy of ``data`` with credentials replaced by ``[REDACTED]``.

    Dict values are masked by key name, strings by content (API keys and
    bearer tokens). Structures nested deeper than ``MAX_REDACT_DEPTH`` are
    replaced by ``[MAX_DEPTH]``.
    """
    if depth > MAX_REDACT_DEPTH:
        return "[MAX_DEPTH]"
    if isinstance(data, str):
        return REDACTED if _SECRET_VALUE.search(data) else data
    if isinstance(data, dict):
        return {
            key: REDACTED if _is_sensitive_key(key) else redact_sensitive(value, depth + 1)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact_sensitive(item, depth + 1) for item in data]
    return data


@contextmanager
def request_scope(request_id: str) -> Iterator[str]:
    """Tag every record logged inside the block with ``request_id``."""
    token = request_id_var.set(request_id)
    try:
        yield request_id
    finally:
        request_id_var.reset(token)


# structlog processors

def add_request_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    request_id = request_id_var.get()
    if request_id is not None:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def _add_service(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict["service"] = "designer-agents"
    event_dict["version"] = __version__
    return event_dict


def _redact_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    return redact_sensitive(event_dict)


def _clip_long_text(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key, value in event_dict.items():
        if isinstance(value, str) and len(value) > MAX_TEXT_LENGTH:
            event_dict[key] = f"{value[:MAX_TEXT_LENGTH]}... ({len(value)} chars)"
    return event_dict


def _build_processors(config: Settings) -> list:
    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_request_context,
        _add_service,
    ]
    if config.redact_sensitive_data:
        processors.append(_redact_event)
    processors += [
        _clip_long_text,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if config.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    return processors


def configure_logging(config: Optional[Settings] = None) -> None:
    """Configure structlog and the standard library root logger.

    Output goes to stderr, as JSON lines when ``log_format`` is ``"json"`` and
    as console lines otherwise.
    """
    config = config or default_settings
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {config.log_level!r}")

    structlog.configure(
        processors=_build_processors(config),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)
