"""Text file access inside the game's known folders."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from .debug_log import LogCategory, OsAccessLog, print_info
from .validation import MismatchError


class FolderToAccess(Enum):
    SAVED_LAYOUTS = "saved_layouts"
    GAME_LOGS = "game_logs"

    def __str__(self) -> str:
        return self.value


class SystemFileType(Enum):
    TEXT_FILE = ".txt"

    def to_postfix(self) -> str:
        return self.value


@dataclass(frozen=True)
class SystemFileName:
    name_with_postfix: str
    file_type: SystemFileType

    @classmethod
    def from_name(cls, name: str, file_type: SystemFileType) -> "SystemFileName":
        return cls(name + file_type.to_postfix(), file_type)

    @classmethod
    def try_from_file_name(cls, file_name: str) -> Optional["SystemFileName"]:
        """Recognise a file name by its postfix, or return None."""
        for file_type in SystemFileType:
            if file_name.endswith(file_type.to_postfix()):
                return cls(file_name, file_type)
        return None

    def to_name(self) -> str:
        return self.name_with_postfix[: -len(self.file_type.to_postfix())]

    def __str__(self) -> str:
        return self.name_with_postfix


class OsAccessError(Exception):
    """A failure to reach or understand a file or folder."""

    def __init__(self, message: str, subject: object) -> None:
        super().__init__(message)
        self.message = message
        self.subject = subject

    @classmethod
    def couldnt_find_file(cls, file_name: SystemFileName) -> "OsAccessError":
        return cls(f"couldn't find file {file_name.name_with_postfix}", file_name)

    @classmethod
    def bad_folder_path(cls, folder: FolderToAccess) -> "OsAccessError":
        return cls(f"bad folder file for {folder}", folder)

    @classmethod
    def couldnt_parse_file(cls, file_name: SystemFileName) -> "OsAccessError":
        return cls(f"couldn't parse {file_name.name_with_postfix}", file_name)

    @classmethod
    def mismatching_postfix(cls, mismatch: MismatchError) -> "OsAccessError":
        return cls(str(mismatch), mismatch)

    def __str__(self) -> str:
        return self.message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OsAccessError):
            return NotImplemented
        return (self.message, self.subject) == (other.message, other.subject)

    def __hash__(self) -> int:
        return hash(self.message)


def _text_file(folder: FolderToAccess, file_name: str) -> tuple[SystemFileName, Path]:
    full_name = SystemFileName.from_name(file_name, SystemFileType.TEXT_FILE)
    return full_name, Path(str(folder)) / full_name.name_with_postfix


def create_folder_if_none_exists_yet(folder: FolderToAccess) -> bool:
    """Create the folder if missing; return whether it was created."""
    try:
        os.mkdir(str(folder))
    except OSError:
        return False
    print_info(
        OsAccessLog.FOLDER_CREATED.describe(str(folder)),
        [LogCategory.OS_ACCESS, LogCategory.CRUCIAL],
    )
    return True


def create_file(folder: FolderToAccess, file_name: str) -> Path:
    """Create an empty text file, truncating any existing one."""
    create_folder_if_none_exists_yet(folder)
    full_name, path = _text_file(folder, file_name)
    path.write_bytes(b"")
    print_info(OsAccessLog.FILE_CREATED.describe(full_name.name_with_postfix), [LogCategory.OS_ACCESS])
    return path


def write_to_file(folder: FolderToAccess, file_name: str, content: str) -> Path:
    """Write the content to a text file, replacing what was there."""
    create_folder_if_none_exists_yet(folder)
    full_name, path = _text_file(folder, file_name)
    path.write_bytes(content.encode("utf-8"))
    print_info(OsAccessLog.WROTE_TO_FILE.describe(full_name.name_with_postfix), [LogCategory.OS_ACCESS])
    return path


def append_to_file(folder: FolderToAccess, file_name: str, text: str) -> Path:
    """Append to an existing text file; raise FileNotFoundError if it is missing."""
    create_folder_if_none_exists_yet(folder)
    full_name, path = _text_file(folder, file_name)
    with open(path, "r+b") as data_file:
        data_file.seek(0, os.SEEK_END)
        data_file.write(text.encode("utf-8"))
    print_info(
        OsAccessLog.APPENDED_TO_FILE.describe(full_name.name_with_postfix), [LogCategory.OS_ACCESS]
    )
    return path


def delete_text_file(folder: FolderToAccess, file_name: str) -> None:
    full_name, path = _text_file(folder, file_name)
    path.unlink()
    print_info(OsAccessLog.FILE_DELETED.describe(full_name.name_with_postfix), [LogCategory.OS_ACCESS])


def get_all_valid_text_file_names_in_folder(folder: FolderToAccess) -> Iterator[SystemFileName]:
    """Yield the text files in the folder; raise at once if the folder is missing."""
    entries = os.listdir(str(folder))
    recognised = (SystemFileName.try_from_file_name(entry) for entry in entries)
    return (
        name
        for name in recognised
        if name is not None and name.file_type is SystemFileType.TEXT_FILE
    )