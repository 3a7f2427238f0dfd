import os
import tempfile
import unittest
from pathlib import Path


def create_file_structure(root_dir: Path, structure: dict):
    '''Recursively creates a directory structure with files.

    Values are a dict (subdirectory), a (content, mtime) tuple, None (empty
    file) or a string (file content).
    '''
    root_dir.mkdir(parents=True, exist_ok=True)
    for name, content in structure.items():
        file_path = root_dir / name
        if isinstance(content, dict):
            create_file_structure(file_path, content)
        elif isinstance(content, (tuple, list)):
            file_path.write_text(content[0] or "")
            mtime = float(content[1])
            os.utime(file_path, (mtime, mtime))
        elif content is None:
            file_path.touch()
        else:
            file_path.write_text(content)


def list_files(root: Path) -> list:
    '''Relative paths of every file under root, sorted.'''
    return sorted(
        p.relative_to(root).as_posix()
        for p in root.rglob("*")
        if p.is_file()
    )


class TempDirTestCase(unittest.TestCase):
    '''Provides self.tmp, a fresh temporary directory per test.'''

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()
