from __future__ import annotations

import os
from typing import Iterator, Tuple


def norm_path(p: str) -> str:
    """Normalize archive paths to a canonical forward-slash form.

    Rules:
    - Convert backslashes to slashes
    - Strip leading/trailing slashes
    - Remove empty and '.' segments
    - Reject '..' segments
    """
    p = p.replace("\\", "/").strip("/")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    for q in parts:
        if q == "..":
            raise ValueError("Path may not contain '..'")
    return "/".join(parts)


def collect_files(root: str) -> Iterator[Tuple[str, str]]:
    """Yield (filesystem path, archive name) for every file under root.

    Names are relative to root itself. A plain file yields its base name.
    Walk order is sorted so repeated runs produce the same archive.
    """
    if not os.path.isdir(root):
        yield root, norm_path(os.path.basename(root))
        return
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for fn in sorted(filenames):
            full = os.path.join(dirpath, fn)
            yield full, norm_path(os.path.relpath(full, start=root))
