"""Runtime logging helpers."""

from __future__ import annotations

import os

from loguru import logger
from rich import get_console
from rich.console import Console
from rich.logging import RichHandler

LogFilter = dict[str | None, str | int | bool]


def parse_log_filter(value: str | None = None) -> tuple[str, LogFilter]:
    """Parse an L5INFER_LOG_FILTER value.

    Format: "level" or "level,module1=level,module2=false"
    Examples:
        - "info" - global INFO level
        - "info,l5infer.core.unify=debug" - unifier at DEBUG
        - "debug,l5infer.core=false" - core disabled

    Returns:
        (global_level, module_filter_dict)
    """
    raw = value if value is not None else os.getenv("L5INFER_LOG_FILTER", "warning")
    global_level = "warning"
    modules: LogFilter = {}
    for part in (p.strip() for p in raw.lower().split(",")):
        if not part:
            continue
        module, sep, level = part.partition("=")
        if not sep:
            global_level = part
        elif level.strip() == "false":
            modules[module.strip()] = False
        else:
            modules[module.strip()] = level.strip().upper()
    return global_level, modules


def configure_logging(*, console: Console | None = None) -> None:
    """Route l5infer log events to a rich handler on console.

    Levels come from L5INFER_LOG_FILTER (default "warning"). Calling this
    again replaces the previous sink.
    """
    global_level, modules = parse_log_filter()
    # The root entry applies to every module without its own level.
    modules.setdefault("", global_level.upper())

    logger.remove()
    logger.enable("l5infer")
    handler = RichHandler(
        console=console if console is not None else get_console(),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )
    logger.add(
        handler,
        level="TRACE",
        format="{message}",
        backtrace=False,
        diagnose=False,
        filter=modules,
    )
