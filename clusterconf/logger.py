"""
clusterconf Logging System
==========================

A thread-safe logging utility for the configuration resolver. This module
integrates with the standard Python `logging` library and the `rich` library
so that resolved addresses and seed triples stand out on the console.

Usage:
    >>> from clusterconf.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Start to read config file %s", path)
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOGGER_DEFAULTS,
    LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_MAX_FILE_SIZE,
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_FILE_OUTPUT,
)


PROJECT_ROOT = Path(__file__).parent.parent
LOG_FILE_PATH = PROJECT_ROOT / "logs" / "clusterconf.log"


class LogManager:
    """
    Manages logging configuration for the process.

    The root logger is configured exactly once; later calls to `configure`
    are no-ops.
    """

    _lock: threading.Lock = threading.Lock()

    def __init__(self) -> None:
        self._configured = False

    @staticmethod
    def validate_log_format(log_format: str) -> str:
        """
        Validates a logging format string by formatting a dummy record.

        Returns the format unchanged, or the default format if it is unusable.
        """
        default = LOGGER_DEFAULTS["LOG_FORMAT"]
        if not log_format:
            return default
        try:
            formatter = logging.Formatter(fmt=str(log_format))
            record = logging.LogRecord(
                name="test", level=logging.INFO, pathname="", lineno=0,
                msg="test", args=(), exc_info=None,
            )
            formatter.format(record)
            return str(log_format)
        except (ValueError, KeyError, TypeError) as e:
            print(
                f"{time.strftime(LOGGER_DEFAULTS['LOG_DATE_FORMAT'])} - clusterconf.logger - "
                f"Invalid LOG_FORMAT: {e}. Using default.",
                file=sys.stderr,
            )
            return default

    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        file_output: Optional[bool] = None,
    ) -> None:
        """
        Configures the root logger with console and file handlers.

        Args:
            log_level: Logging level name. Defaults to LOG_LEVEL.
            log_file: Path of the rotating log file. Defaults to `logs/clusterconf.log`.
            console_output: Enable console logging.
            file_output: Enable rotating file logging. Defaults to LOG_FILE_OUTPUT.
        """
        with self._lock:
            if self._configured:
                return

            level_str = log_level or LOG_LEVEL
            numeric_level = getattr(logging, str(level_str).upper(), logging.INFO)

            root_logger = logging.getLogger()
            root_logger.setLevel(numeric_level)
            root_logger.handlers.clear()

            log_format = self.validate_log_format(LOG_FORMAT)
            date_format = LOG_DATE_FORMAT or LOGGER_DEFAULTS["LOG_DATE_FORMAT"]

            # UTC keeps timestamps comparable across cluster nodes
            formatter = TerminalSafeFormatter(fmt=log_format, datefmt=date_format + " UTC")
            formatter.converter = time.gmtime

            if console_output:
                if LOG_CONSOLE_HIGHLIGHTING:
                    theme = Theme(
                        {
                            "cluster.ip":             "cyan",
                            "cluster.seed":           "bold cyan",
                            "cluster.key":            "bold magenta",
                            "cluster.level_critical": "bold red reverse",
                            "cluster.level_debug":    "bold dim",
                            "cluster.level_error":    "bold red",
                            "cluster.level_info":     "bold green",
                            "cluster.level_warning":  "bold yellow",
                            "cluster.timestamp":      "bold cyan",
                        }
                    )
                    handler = RichHandler(
                        console=Console(theme=theme, highlight=False),
                        highlighter=ClusterLogHighlighter(),
                        rich_tracebacks=True,
                        show_path=False,
                        show_time=False,
                        show_level=False,
                        markup=False,
                    )
                else:
                    handler = logging.StreamHandler(sys.stdout)
                handler.setLevel(numeric_level)
                handler.setFormatter(formatter)
                root_logger.addHandler(handler)

            if file_output is None:
                file_output = LOG_FILE_OUTPUT
            if file_output:
                log_file_path = log_file or LOG_FILE_PATH
                log_file_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.handlers.RotatingFileHandler(
                    filename=str(log_file_path),
                    maxBytes=LOG_MAX_FILE_SIZE,
                    backupCount=LOG_BACKUP_COUNT,
                    encoding="utf-8",
                )
                file_handler.setLevel(numeric_level)
                file_handler.setFormatter(formatter)
                root_logger.addHandler(file_handler)

            self._configured = True

    def get_logger(self, name: str) -> logging.Logger:
        if not self._configured:
            self.configure()
        return logging.getLogger(name)

    @property
    def is_configured(self) -> bool:
        return self._configured


class TerminalSafeFormatter(logging.Formatter):
    """
    Strips ANSI escape sequences and control characters from log output.

    Property values and command-line flags are logged verbatim, so a crafted
    value could otherwise rewrite the operator's terminal.
    """

    _ansi_escape_re = re.compile(
        r"\x1b\[[0-?]*[ -/]*[@-~]"
        r"|\x1b[@-Z\\-_]"
    )
    # Control chars excluding Tab and Newline
    _control_chars_re = re.compile(r"[\x00-\x08\x0B-\x1F\x7F]")

    @classmethod
    def sanitize(cls, text: str) -> str:
        if not text:
            return text
        text = cls._ansi_escape_re.sub("", text)
        return cls._control_chars_re.sub("", text)

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class ClusterLogHighlighter(RegexHighlighter):
    """Colours IP addresses, seed triples and property keys in log lines."""

    base_style = "cluster."
    highlights = [
        r"(?P<seed>\b[\w.\-]+:\d{1,5}:\d{1,5}\b)",
        r"(?P<ip>(?<!\d)\b(?:\d{1,3}\.){3}\d{1,3}\b)",
        r"(?P<key>\b[A-Z][A-Z_]{2,}[A-Z]\b(?==))",
        r"(?P<level_critical>\bCRITICAL\b)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<level_error>\bERROR\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_warning>\bWARNING\b)",
        r"(?P<timestamp>^(.*?)UTC)",
    ]


_manager = LogManager()


def get_logger(name: str) -> logging.Logger:
    """
    Public accessor of the logging system. Configures logging on first use.

    Args:
        name: The name of the module requesting the logger.
    """
    return _manager.get_logger(name)
