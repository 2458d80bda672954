"""
TBURN Logging System
====================

A unified, thread-safe logging utility for the TBURN engine. This module
integrates the standard Python `logging` library with `rich` so that ranking
passes, live-update events and registry requests produce structured and
visually distinct console output.

Usage:
    >>> from tburn.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Ranking recomputed")
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
    LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATE_FORMAT,
    LOG_MAX_FILE_SIZE,
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_FILE_OUTPUT,
)


PROJECT_ROOT = Path(__file__).parent.parent
LOG_FILE_PATH = PROJECT_ROOT / "logs" / "tburn.log"

# Third-party loggers that would otherwise flood the console
_QUIET_LIBRARIES = ("httpx", "httpcore", "asyncio")


class LogManager:
    """
    Manages logging configuration via the Singleton pattern.

    The logging subsystem is initialized exactly once per process with a
    'Rich' console handler and, when enabled, a rotating file handler.

    Attributes:
        _instance (LogManager): The singleton instance.
        _lock (threading.Lock): Thread lock for atomic initialization.
    """

    _instance: Optional["LogManager"] = None
    _lock: threading.Lock = threading.Lock()

    def __new__(cls) -> "LogManager":
        # Double-checked locking for thread-safe singleton initialization
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self) -> None:
        if self._initialized:
            return
        self._configured = False
        self._initialized = True

    @staticmethod
    def validate_log_format(log_format: str) -> str:
        """
        Validates a logging format string by formatting a dummy record.

        Args:
            log_format (str): The logging format string.

        Returns:
            str: The validated format string, or the default `LOG_FORMAT`.
        """
        if not log_format:
            return str(LOG_FORMAT.default())

        log_format = str(log_format)
        try:
            formatter = logging.Formatter(fmt=log_format)
            record = logging.LogRecord(
                name="test", level=logging.INFO, pathname="", lineno=0,
                msg="test", args=(), exc_info=None,
            )
            formatter.format(record)
        except (ValueError, KeyError, TypeError) as e:
            print(
                f"{time.strftime(str(LOG_DATE_FORMAT.default()))} - tburn.logger - "
                f"Invalid log format: {e}. Using default.",
                file=sys.stderr,
            )
            return str(LOG_FORMAT.default())
        return log_format

    @staticmethod
    def validate_date_format(date_format: str) -> str:
        """
        Validates a strftime date format, falling back to the default.
        """
        if not date_format or "%" not in str(date_format):
            return str(LOG_DATE_FORMAT.default())
        return str(date_format)

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
            log_level (Optional[str]): Logging level (DEBUG, INFO, etc.). Defaults to env var.
            log_file (Optional[Path]): Path to log file. Defaults to `logs/tburn.log`.
            console_output (bool): Enable console logging. Defaults to True.
            file_output (Optional[bool]): Enable rotating file logging. Defaults to env var.
        """
        with self._lock:
            if self._configured:
                return

            level_str = log_level or LOG_LEVEL
            numeric_level = getattr(logging, str(level_str).upper(), logging.INFO)

            root_logger = logging.getLogger()
            root_logger.setLevel(numeric_level)

            for lib in _QUIET_LIBRARIES:
                logging.getLogger(lib).setLevel(logging.WARNING)

            root_logger.handlers.clear()

            log_format = self.validate_log_format(LOG_FORMAT)
            date_format = self.validate_date_format(LOG_DATE_FORMAT)

            # UTC keeps timestamps comparable across hosts
            formatter = TerminalSafeFormatter(fmt=log_format, datefmt=date_format + " UTC")
            formatter.converter = time.gmtime

            if console_output:
                if LOG_CONSOLE_HIGHLIGHTING:
                    tburn_theme = Theme(
                        {
                            "tburn.address":         "cyan",
                            "tburn.arrow":           "bold yellow",
                            "tburn.event":           "bold magenta",
                            "tburn.level_critical":  "bold red reverse",
                            "tburn.level_debug":     "bold dim",
                            "tburn.level_error":     "bold red",
                            "tburn.level_info":      "bold green",
                            "tburn.level_warning":   "bold yellow",
                            "tburn.logger_name":     "magenta",
                            "tburn.method":          "bold white",
                            "tburn.network_error":   "bold red",
                            "tburn.status_error":    "bold red",
                            "tburn.status_success":  "bold green",
                            "tburn.tier":            "bold blue",
                            "tburn.timestamp":       "bold cyan",
                            "tburn.url":             "cyan",
                        }
                    )
                    console = Console(theme=tburn_theme, highlight=False)
                    handler = RichHandler(
                        console=console,
                        highlighter=TBURNLogHighlighter(),
                        keywords=[],
                        rich_tracebacks=True,
                        omit_repeated_times=False,
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
                file_output = bool(LOG_FILE_OUTPUT)
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
        """
        Retrieves a logger for a module, configuring the subsystem on first use.
        """
        if not self._configured:
            self.configure()
        return logging.getLogger(name)

    @property
    def is_configured(self) -> bool:
        return self._configured


class TerminalSafeFormatter(logging.Formatter):
    """
    Formatter that strips ANSI escape sequences and control characters.

    Validator names and event payloads come from external feeds, so they are
    sanitized before reaching the terminal or the log file.
    """

    _ansi_escape_re = re.compile(
        r"\x1b\[[0-?]*[ -/]*[@-~]"
        r"|\x1b[@-Z\\-_]"
    )
    # Control chars (0x00-0x1F) excluding Tab and Newline
    _control_chars_re = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
    _carriage_return_re = re.compile(r"\r")

    @classmethod
    def sanitize(cls, text: str) -> str:
        if not text:
            return text
        text = cls._ansi_escape_re.sub("", text)
        text = cls._carriage_return_re.sub("", text)
        text = cls._control_chars_re.sub("", text)
        return text

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class TBURNLogHighlighter(RegexHighlighter):
    """
    Rich highlighter for engine logs: addresses, tiers, live event types and
    registry request lines.
    """

    base_style = "tburn."
    highlights = [
        r"(?P<address>\b0x[0-9a-fA-F]{40}\b)",
        r"(?P<arrow>(\-\->)|(<--))",
        r"(?P<event>\b(validators_update|voting_activity)\b)",
        r"(?P<level_critical>\bCRITICAL\b)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<level_error>\bERROR\b)",
        r"(?P<level_info>\bINFO\b)",
        r"\-\s+\w+\s+-\s+(?P<logger_name>[\w.]+)(?=\s-\s)",
        r"(?P<level_warning>\bWARNING\b)",
        r"(?P<method>\b(GET|POST)\b)",
        r"(?P<network_error>NETWORK_ERROR)",
        r"(?P<status_error>(?<!\.)\b[45]\d{2}\b(?!\.))",
        r"(?P<status_success>(?<!\.)\b2\d{2}\b(?!\.))",
        r"(?P<tier>\b(genesis|pioneer|standard|community)\b)",
        r"(?P<timestamp>^(.*?)UTC)",
        r"(?P<url>https?://\S+)",
    ]


_manager = LogManager()

def get_logger(name: str) -> logging.Logger:
    """
    Public accessor of the logging system.

    Args:
        name (str): The name of the module requesting the logger.

    Returns:
        logging.Logger: The configured logger instance.
    """
    return _manager.get_logger(name)

# Auto-configure on import to ensure immediate availability
_manager.configure()
