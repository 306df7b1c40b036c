from __future__ import annotations

import io
import os
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Sequence

from .constants import (
    DEFAULT_CHUNK_SIZE,
    ENTRY_SIZE,
    HEADER_SIZE,
    MAX_ENTRY_SIZE,
    MAX_NAME_LEN,
    MAX_OFFSET,
)
from .errors import NameTooLong, OpenFailed, SizeTooLarge, WriteFailed
from .records import EntryRecord, Header, encode_name


@dataclass
class PendingFile:
    """A file registered with the builder but not yet written.

    Exactly one of `src_path` or `data` is set. `size` is captured at
    registration and is what the layout uses.
    """
    name: str
    size: int
    src_path: Optional[str] = None
    data: Optional[bytes] = None

    def open(self) -> BinaryIO:
        if self.data is not None:
            return io.BytesIO(self.data)
        return open(self.src_path, "rb")

    def describe(self) -> str:
        return self.src_path if self.src_path is not None else f"<{self.size} bytes in memory>"


def compute_layout(pending: Sequence[PendingFile]) -> List[EntryRecord]:
    """Assign every pending file its absolute data offset.

    Data starts right after the entry table and files follow one another in
    registration order with no gaps.
    """
    cur = HEADER_SIZE + len(pending) * ENTRY_SIZE
    layout: List[EntryRecord] = []
    for pf in pending:
        if cur > MAX_OFFSET:
            raise SizeTooLarge(f"{pf.name} would start past the 32-bit offset limit")
        layout.append(EntryRecord(name=pf.name, offset=cur, size=pf.size))
        cur += pf.size
    return layout


class ArchiveBuilder:
    """Builds a new PAK archive from registered files.

    Files are only measured on registration; their bytes are streamed when
    `write` runs.
    """
    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.chunk_size = chunk_size
        self.pending: List[PendingFile] = []

    def __len__(self) -> int:
        return len(self.pending)

    def file_count(self) -> int:
        return len(self.pending)

    def add_file(self, src_path: str, name: str) -> PendingFile:
        self._check_name(name)
        if os.path.exists(src_path) and not os.path.isfile(src_path):
            raise OpenFailed(f"{src_path} is not a regular file")
        try:
            size = os.path.getsize(src_path)
        except OSError as exc:
            raise OpenFailed(f"Unable to stat {src_path}: {exc}") from exc
        self._check_size(name, size)
        pf = PendingFile(name=name, size=size, src_path=str(src_path))
        self.pending.append(pf)
        return pf

    def add_bytes(self, data: bytes, name: str) -> PendingFile:
        self._check_name(name)
        data = bytes(data)
        self._check_size(name, len(data))
        pf = PendingFile(name=name, size=len(data), data=data)
        self.pending.append(pf)
        return pf

    def write(self, out_path: str) -> List[EntryRecord]:
        """Write the archive to out_path and return its entry table.

        On failure the output may be left partially written.
        """
        layout = compute_layout(self.pending)
        hdr = Header(table_offset=HEADER_SIZE, table_size=len(layout) * ENTRY_SIZE)
        try:
            f = open(out_path, "wb")
        except OSError as exc:
            raise WriteFailed(f"Unable to create {out_path}: {exc}") from exc
        with f:
            try:
                f.write(hdr.pack())
                # Pass 1: entry table
                for ent in layout:
                    f.write(ent.pack())
                # Pass 2: file data
                for pf, ent in zip(self.pending, layout):
                    f.seek(ent.offset)
                    self._copy_source(f, pf)
            except OSError as exc:
                raise WriteFailed(f"Error writing {out_path}: {exc}") from exc
        self.pending = []
        return layout

    # internals
    def _copy_source(self, f: BinaryIO, pf: PendingFile):
        try:
            src = pf.open()
        except OSError as exc:
            raise WriteFailed(f"Unable to open {pf.describe()}: {exc}") from exc
        with src:
            remaining = pf.size
            while remaining > 0:
                buf = src.read(min(self.chunk_size, remaining))
                if not buf:
                    raise WriteFailed(f"{pf.describe()} shrank by {remaining} bytes since it was added")
                f.write(buf)
                remaining -= len(buf)

    @staticmethod
    def _check_name(name: str):
        raw = encode_name(name)
        if len(raw) > MAX_NAME_LEN:
            raise NameTooLong(f"Archive name is {len(raw)} bytes; limit is {MAX_NAME_LEN}: {name}")
        if b"\x00" in raw:
            raise ValueError("Archive name may not contain NUL")

    @staticmethod
    def _check_size(name: str, size: int):
        if size > MAX_ENTRY_SIZE:
            raise SizeTooLarge(f"{name} is {size} bytes; limit is {MAX_ENTRY_SIZE}")
