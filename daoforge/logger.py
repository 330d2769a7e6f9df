"""
DAOForge Logging
================

One process-wide logging setup built on the standard ``logging`` module with
a ``rich`` console handler. Every module obtains its logger through
``get_logger(__name__)``; the root logger is configured on first import.

Caller-supplied text (titles, descriptions, member ids) reaches log lines
verbatim, so all output passes through ``TerminalSafeFormatter``.

Usage:
    >>> from daoforge.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Engine started")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, Union

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_DATE_FORMAT,
    LOG_FORMAT,
    LOG_LEVEL,
    LOG_MAX_FILE_SIZE,
    LOG_TO_FILE,
)


DEFAULT_LOG_FILE = Path(__file__).resolve().parent.parent / "logs" / "daoforge.log"

_THEME = {
    "daoforge.arrow": "bold yellow",
    "daoforge.proposal_id": "cyan",
    "daoforge.member": "blue",
    "daoforge.pending": "bold yellow",
    "daoforge.accepted": "bold green",
    "daoforge.rejected": "bold red",
    "daoforge.error_kind": "bold magenta",
    "daoforge.level_debug": "dim",
    "daoforge.level_info": "green",
    "daoforge.level_warning": "bold yellow",
    "daoforge.level_error": "bold red",
    "daoforge.level_critical": "bold white on red",
    "daoforge.logger_name": "magenta",
    "daoforge.timestamp": "cyan",
}


def _level(value: Union[str, int, None]) -> int:
    if isinstance(value, int):
        return value
    name = str(value or LOG_LEVEL).upper()
    return logging.getLevelNamesMapping().get(name, logging.INFO)


class TerminalSafeFormatter(logging.Formatter):
    """Formatter that removes ANSI escapes and control characters (tab and newline survive)."""

    _escape_sequences = re.compile(r"\x1b(?:\[[0-?]*[ -/]*[@-~]|[@-Z\\-_])")
    _controls = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")

    @classmethod
    def sanitize(cls, text: str) -> str:
        if not text:
            return text
        return cls._controls.sub("", cls._escape_sequences.sub("", text))

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class DAOForgeLogHighlighter(RegexHighlighter):
    """Colours proposal ids, statuses and error kinds in console output."""

    base_style = "daoforge."
    highlights = [
        r"(?P<timestamp>^\S+ UTC)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_warning>\bWARNING\b)",
        r"(?P<level_error>\bERROR\b)",
        r"(?P<level_critical>\bCRITICAL\b)",
        r" - (?P<logger_name>daoforge[\w.]*) - ",
        r"(?P<proposal_id>id=[0-9a-fA-F-]{8,})",
        r"(?P<member>\bmember-[\w-]+)",
        r"(?P<arrow>→)",
        r"(?P<pending>\bPending\b)",
        r"(?P<accepted>\bAccepted\b)",
        r"(?P<rejected>\bRejected\b)",
        r"(?P<error_kind>\b(?:NotAMember|NotFound|VotingClosed|AlreadyFinalized"
        r"|QuorumNotMet|AlreadyVoted|Unauthorized)\b)",
    ]


class LogManager:
    """
    Process-wide logging configuration (singleton).

    ``configure`` installs handlers on the root logger once; later calls are
    no-ops. ``set_level`` adjusts the level afterwards, which is how the
    ``[node] log_level`` setting takes effect.
    """

    _instance: Optional["LogManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "LogManager":
        with cls._lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._configured = False
                instance._handlers = []
                cls._instance = instance
        return cls._instance

    @property
    def is_configured(self) -> bool:
        return self._configured

    @staticmethod
    def validate_log_format(log_format: str) -> str:
        """Return *log_format* if it can format a record, else the default format."""
        fallback = str(LOG_FORMAT.default())
        if not log_format:
            return fallback
        probe = logging.LogRecord("daoforge", logging.INFO, "", 0, "probe", (), None)
        try:
            logging.Formatter(fmt=str(log_format)).format(probe)
        except (ValueError, KeyError, TypeError) as e:
            sys.stderr.write(f"daoforge.logger: invalid LOG_FORMAT ({e}), using default\n")
            return fallback
        return str(log_format)

    def _formatter(self) -> TerminalSafeFormatter:
        formatter = TerminalSafeFormatter(
            fmt=self.validate_log_format(LOG_FORMAT),
            datefmt=f"{LOG_DATE_FORMAT} UTC",
        )
        formatter.converter = time.gmtime
        return formatter

    @staticmethod
    def _console_handler() -> logging.Handler:
        if not LOG_CONSOLE_HIGHLIGHTING:
            return logging.StreamHandler(sys.stdout)
        return RichHandler(
            console=Console(theme=Theme(_THEME), highlight=False),
            highlighter=DAOForgeLogHighlighter(),
            keywords=[],
            markup=False,
            rich_tracebacks=True,
            show_level=False,
            show_path=False,
            show_time=False,
        )

    @staticmethod
    def _file_handler(path: Path) -> logging.Handler:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            path,
            maxBytes=LOG_MAX_FILE_SIZE,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )

    def configure(
        self,
        log_level: Union[str, int, None] = None,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        file_output: Optional[bool] = None,
    ) -> None:
        """
        Install the root handlers.

        Args:
            log_level:      Level name or number; defaults to LOG_LEVEL
            log_file:       Rotating log file; defaults to logs/daoforge.log
            console_output: Attach the console handler
            file_output:    Attach the file handler; defaults to LOG_TO_FILE
        """
        with self._lock:
            if self._configured:
                return

            handlers: List[logging.Handler] = []
            if console_output:
                handlers.append(self._console_handler())
            if bool(LOG_TO_FILE) if file_output is None else file_output:
                handlers.append(self._file_handler(log_file or DEFAULT_LOG_FILE))

            formatter = self._formatter()
            root = logging.getLogger()
            root.handlers.clear()
            for handler in handlers:
                handler.setFormatter(formatter)
                root.addHandler(handler)

            self._handlers = handlers
            self._configured = True
        self.set_level(log_level)

    def set_level(self, log_level: Union[str, int, None]) -> None:
        level = _level(log_level)
        logging.getLogger().setLevel(level)
        for handler in self._handlers:
            handler.setLevel(level)

    def get_logger(self, name: str) -> logging.Logger:
        if not self._configured:
            self.configure()
        return logging.getLogger(name)


_manager = LogManager()


def get_logger(name: str) -> logging.Logger:
    """Return the named logger, configuring logging on first use."""
    return _manager.get_logger(name)


_manager.configure()
