from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO, Dict, Iterator, List, Optional, Tuple

from .constants import DEFAULT_CHUNK_SIZE, ENTRY_SIZE, HEADER_SIZE, PAK_MAGIC
from .errors import (
    ErrorCode,
    PakError,
    OpenFailed,
    InvalidHeader,
    InvalidFileEntry,
    NotFound,
    ShortRead,
    WriteFailed,
)
from .records import EntryRecord, iter_entries, unpack_header


@dataclass(frozen=True)
class FileDetail:
    offset: int
    size: int


class ArchiveReader:
    """Read-only view of a PAK archive.

    The header and the whole entry table are loaded on open; file data is read
    on demand with positioned reads against the open handle.
    """

    def __init__(self, path: Optional[str] = None, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.path = path
        self.chunk_size = chunk_size
        self.f: Optional[BinaryIO] = None
        self.archive_size: int = 0
        self.entries: List[EntryRecord] = []
        self.last_error: ErrorCode = ErrorCode.NO_ERROR
        self._lookup: Dict[str, int] = {}

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __iter__(self) -> Iterator[Tuple[str, FileDetail]]:
        return self.items()

    def __contains__(self, name: object) -> bool:
        return name in self._lookup

    def __len__(self) -> int:
        return self.file_count()

    def good(self) -> bool:
        return self.f is not None and self.last_error is ErrorCode.NO_ERROR

    def file_count(self) -> int:
        return len(self.entries)

    def open(self, path: Optional[str] = None):
        """Open an archive, validate its header and load the entry table.

        Any previously open archive is closed first. On failure the reader is
        left closed with `last_error` set, and the matching PakError is raised.
        """
        self.close()
        if path is not None:
            self.path = path
        if self.path is None:
            raise ValueError("No archive path given")
        self.last_error = ErrorCode.NO_ERROR
        try:
            try:
                self.f = open(self.path, "rb")
            except OSError as exc:
                raise OpenFailed(f"Unable to open archive {self.path}: {exc}") from exc
            self.archive_size = os.fstat(self.f.fileno()).st_size
            self._load_table()
        except PakError as exc:
            self.close()
            self.last_error = exc.code
            raise
        except OSError as exc:
            self.close()
            self.last_error = ErrorCode.OPEN_FAILED
            raise OpenFailed(f"I/O error reading {self.path}: {exc}") from exc

    def close(self):
        if self.f is not None:
            self.f.close()
            self.f = None
        self.archive_size = 0
        self.entries = []
        self._lookup = {}

    def stat(self, name: str) -> FileDetail:
        e = self._find(name)
        return FileDetail(offset=e.offset, size=e.size)

    def items(self) -> Iterator[Tuple[str, FileDetail]]:
        """Yield (name, detail) for every entry in table order."""
        for e in self.entries:
            yield e.name, FileDetail(offset=e.offset, size=e.size)

    def list(self) -> List[EntryRecord]:
        return self.entries

    def read_file(self, name: str, max_size: Optional[int] = None) -> bytes:
        """Return the entry's bytes, truncated to max_size when given."""
        e = self._find(name)
        want = e.size if max_size is None else min(e.size, max(0, max_size))
        self.f.seek(e.offset)
        data = self.f.read(want)
        if len(data) != want:
            raise ShortRead(f"Archive data for {name!r} ends after {len(data)} of {want} bytes")
        return data

    def read_file_into(self, name: str, buffer) -> int:
        """Fill `buffer` with at most len(buffer) bytes of the entry.

        Returns the number of bytes written into the buffer.
        """
        e = self._find(name)
        view = memoryview(buffer).cast("B")
        want = min(e.size, len(view))
        self.f.seek(e.offset)
        got = self.f.readinto(view[:want])
        if got != want:
            raise ShortRead(f"Archive data for {name!r} ends after {got} of {want} bytes")
        return want

    def extract_file(self, name: str, out_path: str):
        e = self._find(name)
        try:
            os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
            wf = open(out_path, "wb")
        except OSError as exc:
            raise WriteFailed(f"Unable to create {out_path}: {exc}") from exc
        try:
            with wf:
                self.f.seek(e.offset)
                remaining = e.size
                while remaining > 0:
                    n = min(self.chunk_size, remaining)
                    buf = self.f.read(n)
                    if len(buf) != n:
                        raise ShortRead(f"Archive data for {name!r} ends {remaining - len(buf)} bytes early")
                    wf.write(buf)
                    remaining -= n
        except ShortRead:
            # Leave no truncated output behind
            os.remove(out_path)
            raise

    # internals
    def _find(self, name: str) -> EntryRecord:
        idx = self._lookup.get(name)
        if idx is None:
            raise NotFound(f"{name} not found in archive")
        return self.entries[idx]

    def _load_table(self):
        assert self.f is not None
        if self.archive_size < HEADER_SIZE:
            raise InvalidHeader("File is too short to hold a PAK header")
        self.f.seek(0)
        raw = self.f.read(HEADER_SIZE)
        if len(raw) != HEADER_SIZE:
            raise InvalidHeader("PAK header truncated")
        hdr = unpack_header(raw)
        if hdr.magic != PAK_MAGIC:
            raise InvalidHeader("Bad PAK magic")
        if hdr.table_size % ENTRY_SIZE:
            raise InvalidFileEntry("Entry table size is not a multiple of the record size")
        if hdr.table_offset + hdr.table_size > self.archive_size:
            raise InvalidFileEntry("Entry table extends past end of archive")

        # An empty table is valid; skip the read entirely
        table = b""
        if hdr.table_size:
            self.f.seek(hdr.table_offset)
            table = self.f.read(hdr.table_size)
            if len(table) != hdr.table_size:
                raise InvalidFileEntry("Entry table truncated")

        entries: List[EntryRecord] = []
        lookup: Dict[str, int] = {}
        for i, e in enumerate(iter_entries(table)):
            if e.end > self.archive_size:
                raise InvalidFileEntry(f"Entry {e.name!r} data out of range")
            entries.append(e)
            # Later duplicates shadow earlier ones
            lookup[e.name] = i
        self.entries = entries
        self._lookup = lookup
