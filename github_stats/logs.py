"""Logging helpers: handler setup and per-cycle logger adapters."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple, Union

from rich.logging import RichHandler

from .console import Console

LoggerLike = Union[logging.Logger, logging.LoggerAdapter]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class CycleLoggerAdapter(logging.LoggerAdapter):
    """Prefix every record with the collection cycle it belongs to."""

    def __init__(self, logger: logging.Logger, cycle: int, repo: Optional[str] = None):
        extra = {"cycle": cycle}
        if repo:
            extra["repo"] = repo
        super().__init__(logger, extra)

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        prefix = f"[cycle {self.extra['cycle']}]"
        if "repo" in self.extra:
            prefix = f"{prefix} [{self.extra['repo']}]"
        return f"{prefix} {msg}", kwargs

    def for_repo(self, repo: str) -> "CycleLoggerAdapter":
        return CycleLoggerAdapter(self.logger, self.extra["cycle"], repo)


def configure_logging(log_file: Optional[Path] = None, verbose: bool = False) -> None:
    """Install the root handler.

    Records go to ``log_file`` when one is configured, otherwise to stderr
    through rich.

    Args:
        log_file: Optional path of a log file (appended to)
        verbose: Log at DEBUG instead of INFO
    """
    level = logging.DEBUG if verbose else logging.INFO
    handler: logging.Handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()
    root.addHandler(handler)
    root.setLevel(level)
    # urllib3 connection chatter is noise at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
