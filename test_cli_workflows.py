from __future__ import annotations

import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from typing import Dict

from packfile.reader import ArchiveReader
from packfile.writer import ArchiveBuilder


def _random_bytes(size: int) -> bytes:
    return os.urandom(size)


def _build_fixture_tree(root: Path) -> Dict[str, bytes]:
    files: Dict[str, bytes] = {}
    (root / "docs" / "notes").mkdir(parents=True)
    content = b"hello world\n" * 20
    (root / "docs" / "readme.txt").write_bytes(content)
    files["docs/readme.txt"] = content

    bin_data = _random_bytes(20000)
    (root / "docs" / "notes" / "binary.bin").write_bytes(bin_data)
    files["docs/notes/binary.bin"] = bin_data

    (root / "docs" / "notes" / "empty.txt").write_bytes(b"")
    files["docs/notes/empty.txt"] = b""

    (root / "top.txt").write_bytes(b"top level")
    files["top.txt"] = b"top level"
    return files


def _read_tree(root: Path) -> Dict[str, bytes]:
    out: Dict[str, bytes] = {}
    for dirpath, _dirs, filenames in os.walk(root):
        for fn in filenames:
            full = Path(dirpath) / fn
            out[full.relative_to(root).as_posix()] = full.read_bytes()
    return out


class CLIIntegrationTests(unittest.TestCase):
    def run_cli(self, args, *, expect: int | None = 0, cwd: Path | None = None):
        cmd = [sys.executable, "-m", "packfile.cli"] + list(args)
        env = os.environ.copy()
        repo_root = Path(__file__).resolve().parent
        existing = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = str(repo_root) if not existing else f"{repo_root}{os.pathsep}{existing}"
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=env,
        )
        if expect is not None and proc.returncode != expect:
            raise AssertionError(
                f"CLI exited {proc.returncode}, expected {expect}\nCommand: {' '.join(cmd)}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}"
            )
        return proc

    def test_create_list_extract_roundtrip(self):
        tmp_src = tempfile.TemporaryDirectory()
        tmp_workspace = tempfile.TemporaryDirectory()
        self.addCleanup(tmp_src.cleanup)
        self.addCleanup(tmp_workspace.cleanup)

        src_root = Path(tmp_src.name)
        workspace = Path(tmp_workspace.name)
        files = _build_fixture_tree(src_root)

        archive = workspace / "archive.pak"
        create_proc = self.run_cli(["create", str(archive), str(src_root), "--verbose"])
        self.assertIn(f"Wrote archive '{archive}' with {len(files)} files", create_proc.stdout)
        self.assertIn("as docs/readme.txt", create_proc.stdout)

        with ArchiveReader(str(archive)) as r:
            self.assertEqual(sorted(files), sorted(name for name, _ in r))

        list_proc = self.run_cli(["list", str(archive)])
        self.assertEqual(sorted(files), sorted(list_proc.stdout.split()))

        details_proc = self.run_cli(["list", "-d", str(archive)])
        self.assertIn("  size:   20000 (19 KiB)", details_proc.stdout)
        self.assertIn("  offset: 0x", details_proc.stdout)

        info_proc = self.run_cli(["info", str(archive)])
        self.assertIn(f"PACK archive, {len(files)} files", info_proc.stdout)

        # Default output directory: archive path without extension
        extract_proc = self.run_cli(["extract", str(archive), "-v"])
        self.assertIn("top.txt -> ", extract_proc.stdout)
        self.assertEqual(files, _read_tree(workspace / "archive"))

        outdir = workspace / "elsewhere"
        self.run_cli(["extract", str(archive), "--outdir", str(outdir)])
        self.assertEqual(files, _read_tree(outdir))

    def test_create_deterministic(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            src = root / "src"
            _build_fixture_tree(src)
            self.run_cli(["create", str(root / "a.pak"), str(src)])
            self.run_cli(["create", str(root / "b.pak"), str(src)])
            self.assertEqual((root / "a.pak").read_bytes(), (root / "b.pak").read_bytes())

    def test_plain_file_input_uses_base_name(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            f = root / "single.dat"
            f.write_bytes(b"single")
            archive = root / "one.pak"
            self.run_cli(["create", str(archive), str(f)])
            with ArchiveReader(str(archive)) as r:
                self.assertEqual(["single.dat"], [n for n, _ in r])

    def test_unsafe_names_are_skipped_on_extract(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            archive = root / "evil.pak"
            b = ArchiveBuilder()
            b.add_bytes(b"nope", "../escape.txt")
            b.add_bytes(b"fine", "safe/ok.txt")
            b.write(str(archive))
            outdir = root / "out"
            proc = self.run_cli(["extract", str(archive), "-o", str(outdir)], expect=1)
            self.assertIn("skipping unsafe name", proc.stderr)
            self.assertFalse((root / "escape.txt").exists())
            self.assertEqual(b"fine", (outdir / "safe" / "ok.txt").read_bytes())

    def test_errors_exit_with_status_2(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            bad = root / "bad.pak"
            bad.write_bytes(b"not a pak file at all")
            proc = self.run_cli(["info", str(bad)], expect=2)
            self.assertIn("Error:", proc.stderr)

            proc = self.run_cli(["list", str(root / "missing.pak")], expect=2)
            self.assertIn("Error:", proc.stderr)

            src = root / "src"
            src.mkdir()
            (src / ("n" * 57)).write_bytes(b"x")
            proc = self.run_cli(["create", str(root / "long.pak"), str(src)], expect=2)
            self.assertIn("limit is 56", proc.stderr)
            self.assertFalse((root / "long.pak").exists())


if __name__ == "__main__":
    unittest.main()
