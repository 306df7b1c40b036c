"""
packfile: reader, builder and CLI for flat PAK archives.

A PAK archive is a 12-byte header ("PACK", table offset, table size), a table
of 64-byte entry records (56-byte name, data offset, data size) and a data
region holding each file's raw bytes at its recorded offset. All integers are
little-endian uint32.

- ArchiveReader validates the header and table on open, indexes entries by
  name, and serves reads, extraction and in-order enumeration.
- ArchiveBuilder measures registered files, lays them out after the table in
  registration order, and streams the table then the data to the output.

No compression, encryption or in-place updates.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "errors",
    "records",
    "reader",
    "writer",
    "pathutil",
]

# Programmatic API: packfile.reader.ArchiveReader / packfile.writer.ArchiveBuilder,
# plus the CLI functions in packfile.cli (cmd_create/cmd_extract) which take normal parameters.
