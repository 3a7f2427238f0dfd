import os
import unittest
from datetime import datetime, timezone

from backup_sync.core.exceptions import ScanError
from backup_sync.core.models import FileKind
from backup_sync.core.scanner import TreeScanner

from helpers import TempDirTestCase, create_file_structure


class TestTreeScanner(TempDirTestCase):
    def test_flattens_tree_into_files(self):
        create_file_structure(self.tmp / "src", {
            "a.txt": ("a", 100),
            "b": {
                "c.txt": ("c", 200),
                "d": {"e.txt": ("e", 300)},
            },
            "empty": {},
        })
        records = TreeScanner().scan(str(self.tmp / "src"))

        self.assertEqual([r.relative_path for r in records], ["a.txt", "b/c.txt", "b/d/e.txt"])
        self.assertTrue(all(r.kind is FileKind.FILE for r in records))
        self.assertEqual([r.name for r in records], ["a.txt", "c.txt", "e.txt"])

    def test_records_metadata(self):
        create_file_structure(self.tmp / "src", {"b": {"c.txt": ("c", 200)}})
        record = TreeScanner().scan(str(self.tmp / "src"))[0]

        self.assertEqual(record.modified_time, datetime.fromtimestamp(200, timezone.utc))
        self.assertEqual(record.path, os.path.join(str(self.tmp / "src"), "b", "c.txt"))
        self.assertIsNone(record.reason)

    def test_rescan_reads_filesystem_again(self):
        create_file_structure(self.tmp / "src", {"a.txt": ("a", 100)})
        scanner = TreeScanner()
        self.assertEqual(len(scanner.scan(str(self.tmp / "src"))), 1)

        create_file_structure(self.tmp / "src", {"b.txt": ("b", 100)})
        self.assertEqual(len(scanner.scan(str(self.tmp / "src"))), 2)

    def test_missing_root(self):
        with self.assertRaises(ScanError):
            TreeScanner().scan(str(self.tmp / "missing"))

    def test_root_is_a_file(self):
        create_file_structure(self.tmp, {"file.txt": "x"})
        with self.assertRaises(ScanError):
            TreeScanner().scan(str(self.tmp / "file.txt"))

    @unittest.skipIf(hasattr(os, "geteuid") and os.geteuid() == 0, "root can read any directory")
    def test_unreadable_directory(self):
        create_file_structure(self.tmp / "src", {"locked": {"a.txt": "a"}})
        locked = self.tmp / "src" / "locked"
        os.chmod(locked, 0)
        try:
            with self.assertRaises(ScanError):
                TreeScanner().scan(str(self.tmp / "src"))
        finally:
            os.chmod(locked, 0o755)

    def test_symlinks_skipped_by_default(self):
        create_file_structure(self.tmp / "src", {"a.txt": "a", "dir": {"b.txt": "b"}})
        os.symlink(self.tmp / "src" / "a.txt", self.tmp / "src" / "link.txt")
        os.symlink(self.tmp / "src" / "dir", self.tmp / "src" / "linkdir")

        records = TreeScanner().scan(str(self.tmp / "src"))
        self.assertEqual([r.relative_path for r in records], ["a.txt", "dir/b.txt"])

    def test_symlinks_followed(self):
        create_file_structure(self.tmp / "other", {"b.txt": "b"})
        create_file_structure(self.tmp / "src", {"a.txt": "a"})
        os.symlink(self.tmp / "other", self.tmp / "src" / "linkdir")
        os.symlink(self.tmp / "src" / "a.txt", self.tmp / "src" / "link.txt")
        os.symlink(self.tmp / "nowhere", self.tmp / "src" / "broken")

        records = TreeScanner(follow_symlinks=True).scan(str(self.tmp / "src"))
        self.assertEqual([r.relative_path for r in records], ["a.txt", "link.txt", "linkdir/b.txt"])

    def test_symlink_cycle_visited_once(self):
        create_file_structure(self.tmp / "src", {"a.txt": "a"})
        os.symlink(self.tmp / "src", self.tmp / "src" / "loop")

        records = TreeScanner(follow_symlinks=True).scan(str(self.tmp / "src"))
        self.assertEqual([r.relative_path for r in records], ["a.txt"])


if __name__ == "__main__":
    unittest.main()
