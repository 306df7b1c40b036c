from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterator

from .constants import ENTRY_SIZE, HEADER_SIZE, MAX_NAME_LEN, PAK_MAGIC


# Header (fixed 12 bytes)
# struct: <4s I I
#  - magic[4]
#  - table_offset u32 (absolute)
#  - table_size u32 (bytes, multiple of ENTRY_SIZE)
_HEADER_STRUCT = struct.Struct("<4sII")
# Entry (fixed 64 bytes, no padding)
# struct: <56s I I
#  - name[56] (zero-filled; no terminator when full)
#  - offset u32 (absolute)
#  - size u32
_ENTRY_STRUCT = struct.Struct("<%dsII" % MAX_NAME_LEN)

assert _HEADER_STRUCT.size == HEADER_SIZE
assert _ENTRY_STRUCT.size == ENTRY_SIZE


def encode_name(name: str) -> bytes:
    return name.encode("utf-8", "surrogateescape")


def decode_name(field: bytes) -> str:
    # Hard bound at the field width; stop at the first NUL if there is one
    raw = field[:MAX_NAME_LEN].split(b"\x00", 1)[0]
    return raw.decode("utf-8", "surrogateescape")


@dataclass
class Header:
    table_offset: int
    table_size: int
    magic: bytes = PAK_MAGIC

    @property
    def entry_count(self) -> int:
        return self.table_size // ENTRY_SIZE

    def pack(self) -> bytes:
        return _HEADER_STRUCT.pack(self.magic, self.table_offset, self.table_size)


@dataclass
class EntryRecord:
    name: str
    offset: int
    size: int

    @property
    def end(self) -> int:
        return self.offset + self.size

    def pack(self) -> bytes:
        # struct pads the name field with zeros
        return _ENTRY_STRUCT.pack(encode_name(self.name), self.offset, self.size)


def unpack_header(raw: bytes) -> Header:
    if len(raw) != HEADER_SIZE:
        raise ValueError("Header too short")
    magic, table_offset, table_size = _HEADER_STRUCT.unpack(raw)
    return Header(table_offset=table_offset, table_size=table_size, magic=magic)


def unpack_entry(raw: bytes, pos: int = 0) -> EntryRecord:
    name_field, offset, size = _ENTRY_STRUCT.unpack_from(raw, pos)
    return EntryRecord(name=decode_name(name_field), offset=offset, size=size)


def iter_entries(table: bytes) -> Iterator[EntryRecord]:
    """Decode a raw entry table one fixed-size record at a time.

    The table length must be a whole number of records.
    """
    if len(table) % ENTRY_SIZE:
        raise ValueError("Entry table size is not a multiple of the record size")
    for pos in range(0, len(table), ENTRY_SIZE):
        yield unpack_entry(table, pos)
