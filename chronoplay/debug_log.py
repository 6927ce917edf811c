"""Category-filtered logging, optionally mirrored into a game session log file."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable

_logger = logging.getLogger("chronoplay")


class LogLevel(Enum):
    ERROR = logging.ERROR
    WARNING = logging.WARNING
    INFO = logging.INFO


class LogCategory(Enum):
    CRUCIAL = "crucial"
    OS_ACCESS = "os_access"
    VALUE_VALIDATION = "value_validation"
    REQUEST_NOT_FULFILLED = "request_not_fulfilled"
    TIME = "time"


class OsAccessLog(Enum):
    """Kinds of file-system events worth logging."""

    FOLDER_CREATED = "Folder created"
    FOLDER_EXISTS = "Folder exists"
    WROTE_TO_FILE = "Wrote to file"
    FILE_DELETED = "File deleted"
    FILE_CREATED = "File created"
    APPENDED_TO_FILE = "Appended to file"

    def describe(self, target: str) -> str:
        return f"{self.value}: {target}"


GAME_SESSION_LOG_FILE_NAME = "latest_game_session_log"
LOG_CATEGORIES_TO_PRINT = (LogCategory.CRUCIAL, LogCategory.REQUEST_NOT_FULFILLED)
LOG_CATEGORIES_TO_APPEND_TO_SESSION_LOG = (LogCategory.CRUCIAL,)
LOG_LEVELS_TO_PRINT = (LogLevel.ERROR, LogLevel.WARNING, LogLevel.INFO)


@dataclass(frozen=True)
class PrintConfig:
    print_message: bool
    append_message_to_session_log: bool
    level: LogLevel


def get_print_config(categories: Iterable[LogCategory], level: LogLevel) -> PrintConfig:
    """Decide where a message of these categories should go."""
    categories = list(categories)
    return PrintConfig(
        print_message=any(c in LOG_CATEGORIES_TO_PRINT for c in categories),
        append_message_to_session_log=any(
            c in LOG_CATEGORIES_TO_APPEND_TO_SESSION_LOG for c in categories
        ),
        level=level,
    )


def display_print_by_config(message: Any, config: PrintConfig) -> None:
    _print_by_config(str(message), config)


def debug_print_by_config(message: Any, config: PrintConfig) -> None:
    _print_by_config(repr(message), config)


def _print_by_config(log_message: str, config: PrintConfig) -> None:
    if config.print_message:
        _logger.log(config.level.value, log_message)
    if config.append_message_to_session_log:
        append_to_game_session_log_file(log_message)


def _print_log(message: Any, categories: Iterable[LogCategory], level: LogLevel) -> None:
    if level not in LOG_LEVELS_TO_PRINT:
        return
    display_print_by_config(message, get_print_config(categories, level))


def print_error(message: Any, categories: Iterable[LogCategory]) -> None:
    _print_log(message, categories, LogLevel.ERROR)


def print_warning(message: Any, categories: Iterable[LogCategory]) -> None:
    _print_log(message, categories, LogLevel.WARNING)


def print_info(message: Any, categories: Iterable[LogCategory]) -> None:
    _print_log(message, categories, LogLevel.INFO)


def stringify_vector(items: Iterable[Any]) -> str:
    """Render items as ``[ a, b ]`` using their ``repr``."""
    rendered = ", ".join(repr(item) for item in items)
    return f"[ {rendered} ]" if rendered else "[ ]"


def _print_vec(
    message: str, items: Iterable[Any], categories: Iterable[LogCategory], level: LogLevel
) -> None:
    if level not in LOG_LEVELS_TO_PRINT:
        return
    display_print_by_config(message + stringify_vector(items), get_print_config(categories, level))


def print_error_vec(message: str, items: Iterable[Any], categories: Iterable[LogCategory]) -> None:
    _print_vec(message, items, categories, LogLevel.ERROR)


def print_warning_vec(message: str, items: Iterable[Any], categories: Iterable[LogCategory]) -> None:
    _print_vec(message, items, categories, LogLevel.WARNING)


def print_info_vec(message: str, items: Iterable[Any], categories: Iterable[LogCategory]) -> None:
    _print_vec(message, items, categories, LogLevel.INFO)


def create_new_log_file() -> None:
    """Create (or truncate) the session log file in the game logs folder."""
    from .os_access import FolderToAccess, OsAccessError, create_file

    try:
        create_file(FolderToAccess.GAME_LOGS, GAME_SESSION_LOG_FILE_NAME)
    except OSError:
        print_error(
            OsAccessError.bad_folder_path(FolderToAccess.GAME_LOGS),
            [LogCategory.CRUCIAL, LogCategory.REQUEST_NOT_FULFILLED],
        )


def append_to_game_session_log_file(text: str) -> None:
    """Append a line to the session log, reporting (but not re-logging) failures."""
    from .os_access import (
        FolderToAccess,
        OsAccessError,
        SystemFileName,
        SystemFileType,
        append_to_file,
    )

    try:
        append_to_file(FolderToAccess.GAME_LOGS, GAME_SESSION_LOG_FILE_NAME, text + "\n")
    except OSError:
        error = OsAccessError.couldnt_find_file(
            SystemFileName.from_name(GAME_SESSION_LOG_FILE_NAME, SystemFileType.TEXT_FILE)
        )
        config = get_print_config(
            [LogCategory.CRUCIAL, LogCategory.REQUEST_NOT_FULFILLED], LogLevel.ERROR
        )
        # Reporting must not try the session log again, or a missing file loops forever.
        display_print_by_config(error, replace(config, append_message_to_session_log=False))