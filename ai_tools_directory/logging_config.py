"""Logging configuration for the AI tools directory."""

import logging
import sys
from pathlib import Path
from typing import Optional


class IndentLogger:
    """Logger wrapper that manages absolute indentation levels."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger
        self._indent = 0

    def indent(self, level: Optional[int] = None) -> None:
        """Set absolute indent level."""
        if level is not None:
            self._indent = max(0, level)
        else:
            self._indent += 1

    def dedent(self) -> None:
        self._indent = max(0, self._indent - 1)

    def _log(self, level: int, msg: str, *args, **kwargs) -> None:
        indent = "  " * self._indent
        prefix = "•" if self._indent > 0 else "▶"
        self._logger.log(level, f"{indent}{prefix} {msg}", *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)


def setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration."""
    root_logger = logging.getLogger()
    # Handlers are attached once per process
    if any(getattr(h, "_aitools", False) for h in root_logger.handlers):
        return

    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # File handler for all logs
    file_handler = logging.FileHandler(log_dir / "ai_tools_directory.log")
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    file_handler._aitools = True
    root_logger.addHandler(file_handler)

    # Stream handler for INFO and above
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))
    stream_handler.setLevel(logging.INFO)
    stream_handler._aitools = True
    root_logger.addHandler(stream_handler)

    # Silence httpx logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
