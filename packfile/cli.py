from __future__ import annotations

import os
import sys
import argparse

from typing import List, Optional

from packfile.reader import ArchiveReader
from packfile.writer import ArchiveBuilder
from packfile.pathutil import collect_files, norm_path
from packfile.errors import PakError


def _default_outdir(archive: str) -> str:
    """Extraction directory used when none is given: the archive path minus its extension."""
    base, _ext = os.path.splitext(archive)
    return base if base != archive else archive + ".d"


def cmd_create(output: str, inputs: list[str], *, verbose: bool = False) -> bool:
    """Create a new archive from filesystem paths.

    Args:
        output: Path to the .pak file to write.
        inputs: Files and/or directories to store. Directory contents are
            named relative to the directory itself.
        verbose: Print each file as it is added.
    """
    builder = ArchiveBuilder()
    for inp in inputs:
        for full, arc in collect_files(inp):
            builder.add_file(full, arc)
            if verbose:
                print(f"Added {full} as {arc}")
    n_files = builder.file_count()
    builder.write(output)
    print(f"Wrote archive '{output}' with {n_files} files")
    return True


def cmd_extract(archive: str, *, outdir: Optional[str] = None, verbose: bool = False) -> bool:
    """Extract every entry of an archive into a directory.

    Returns:
        True when all entries were extracted, False if any failed.
    """
    outdir = outdir or _default_outdir(archive)
    failed = 0
    with ArchiveReader(archive) as r:
        os.makedirs(outdir, exist_ok=True)
        for name, _detail in r:
            try:
                rel = norm_path(name)
            except ValueError as exc:
                print(f"Warning: skipping unsafe name {name!r}: {exc}", file=sys.stderr)
                failed += 1
                continue
            dst = os.path.join(outdir, *rel.split("/"))
            try:
                r.extract_file(name, dst)
            except (PakError, OSError) as exc:
                print(f"Unable to extract {name}")
                print(f"  {exc}", file=sys.stderr)
                failed += 1
                continue
            if verbose:
                print(f"{name} -> {dst}")
    return failed == 0


def cmd_list(archives: list[str], *, details: bool = False) -> bool:
    """List entry names in table order.

    Args:
        archives: Paths of .pak files.
        details: Also print each entry's size and offset.
    """
    for archive in archives:
        with ArchiveReader(archive) as r:
            for name, det in r:
                print(name)
                if details:
                    print(f"  size:   {det.size} ({det.size // 1024} KiB)")
                    print(f"  offset: 0x{det.offset:X}")
    return True


def cmd_info(archives: list[str]) -> bool:
    for archive in archives:
        with ArchiveReader(archive) as r:
            print(f"{archive}: PACK archive, {r.file_count()} files")
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="packfile",
        description="PAK archive tool",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_create = sub.add_parser("create", help="Create a PAK archive")
    ap_create.add_argument("output", help="Output .pak path")
    ap_create.add_argument("inputs", nargs="+", help="Input files/directories")
    ap_create.add_argument("-v", "--verbose", action="store_true", help="Print each file as it is added")

    ap_extract = sub.add_parser("extract", help="Extract all files from an archive")
    ap_extract.add_argument("archive", help="Archive path")
    ap_extract.add_argument("-o", "--outdir", help="Output directory (default: archive path without extension)")
    ap_extract.add_argument("-v", "--verbose", action="store_true", help="Print what is extracted where")

    ap_list = sub.add_parser("list", help="List archive contents")
    ap_list.add_argument("archives", nargs="+", help="Archive paths")
    ap_list.add_argument("-d", "--details", action="store_true", help="Show size and offset of each file")

    ap_info = sub.add_parser("info", help="Show basic archive information")
    ap_info.add_argument("archives", nargs="+", help="Archive paths")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "create":
            cmd_create(args.output, args.inputs, verbose=args.verbose)
        elif args.cmd == "extract":
            if not cmd_extract(args.archive, outdir=args.outdir, verbose=args.verbose):
                sys.exit(1)
        elif args.cmd == "list":
            cmd_list(args.archives, details=args.details)
        elif args.cmd == "info":
            cmd_info(args.archives)
        else:
            raise RuntimeError("Unknown command")
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (PakError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
