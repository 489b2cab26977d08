from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger
else:
    EventDict = dict[str, Any]
    WrappedLogger = Any

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[31m"
_YELLOW = "\033[33m"
_CYAN = "\033[36m"
_WHITE = "\033[37m"
_BG_RED = "\033[41m"
_BG_GREEN = "\033[42m"
_BG_YELLOW = "\033[43m"
_BG_BLUE = "\033[44m"

_LEVEL_STYLES: dict[str, str] = {
    "debug": _DIM,
    "info": _CYAN,
    "warning": f"{_BOLD}{_YELLOW}",
    "error": f"{_BOLD}{_RED}",
    "critical": f"{_BOLD}{_BG_RED}{_WHITE}",
}

_EVENT_ICONS: dict[str, str] = {
    "strategy_derived": f"{_BG_BLUE}{_WHITE} DERIVE{_RESET}",
    "instructions_rendered": f"{_BG_GREEN}{_WHITE} PROMPT{_RESET}",
    "profile_unknown": f"{_BG_RED}{_WHITE}{_BOLD} UNKNWN{_RESET}",
    "settings_fallback": f"{_BG_YELLOW}{_WHITE}{_BOLD} SAFE  {_RESET}",
}

_SKIP_CONSOLE_KEYS = frozenset({"event", "level", "ts", "timestamp", "run_id", "logger", "exc_info"})

_LEVEL_MAP = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}


def _format_kv(key: str, value: object) -> str:
    return f"{_DIM}{key}={_RESET}{value}"


def _pretty_console(event: str, level: str, kv: dict[str, Any]) -> str:
    ts = datetime.now(timezone.utc).strftime("%H:%M:%S")
    level_style = _LEVEL_STYLES.get(level, "")

    icon = _EVENT_ICONS.get(event)
    if icon:
        header = f"{_DIM}{ts}{_RESET} {icon}"
    else:
        lvl_tag = level.upper()[:4].ljust(4)
        header = f"{_DIM}{ts}{_RESET} {level_style}{lvl_tag}{_RESET}"

    event_str = f"{_BOLD}{event}{_RESET}"

    detail_parts = [
        _format_kv(k, v) for k, v in kv.items() if k not in _SKIP_CONSOLE_KEYS and v is not None
    ]
    details = f"  {' '.join(detail_parts)}" if detail_parts else ""

    return f"{header} {event_str}{details}"


def add_common_fields(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("run_id", os.getenv("RUN_ID", "unknown"))
    return event_dict


def _pretty_structlog_renderer(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> str:
    event = str(event_dict.pop("event", ""))
    level = str(event_dict.pop("level", method_name))
    event_dict.pop("timestamp", None)
    return _pretty_console(event, level, event_dict)


def _stderr_logger_factory(*_args: Any) -> Any:
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(log_level: str = "INFO") -> None:
    level = _LEVEL_MAP.get(log_level.upper(), 20)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            add_common_fields,
            _pretty_structlog_renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)
