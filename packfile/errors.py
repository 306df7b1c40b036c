from __future__ import annotations

import enum


class ErrorCode(enum.Enum):
    NO_ERROR = 0
    OPEN_FAILED = 1
    INVALID_HEADER = 2
    INVALID_FILE_ENTRY = 3
    NOT_FOUND = 4
    WRITE_FAILED = 5
    NAME_TOO_LONG = 6
    SIZE_TOO_LARGE = 7
    SHORT_READ = 8


class PakError(Exception):
    """Base class for packfile-specific errors."""

    code = ErrorCode.NO_ERROR


# Reader: open/validation
class OpenFailed(PakError):
    code = ErrorCode.OPEN_FAILED


class InvalidHeader(PakError):
    code = ErrorCode.INVALID_HEADER


class InvalidFileEntry(PakError):
    code = ErrorCode.INVALID_FILE_ENTRY


# Reader: lookup/data
class NotFound(PakError, KeyError):
    code = ErrorCode.NOT_FOUND

    def __str__(self) -> str:
        # KeyError would repr() the message
        return PakError.__str__(self)


class ShortRead(PakError):
    code = ErrorCode.SHORT_READ


# Builder
class WriteFailed(PakError):
    code = ErrorCode.WRITE_FAILED


class NameTooLong(PakError):
    code = ErrorCode.NAME_TOO_LONG


class SizeTooLarge(PakError):
    code = ErrorCode.SIZE_TOO_LARGE
