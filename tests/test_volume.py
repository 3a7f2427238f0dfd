import errno
import unittest
from unittest import mock

from backup_sync.core.exceptions import EraseError, ErrorKind, MarkError
from backup_sync.core.models import VolumeState
from backup_sync.core.volume import VolumeManager

from helpers import TempDirTestCase, create_file_structure, list_files


class ConfirmRecorder:
    '''Erase confirmation callback that records its calls.'''

    def __init__(self, answer):
        self.answer = answer
        self.calls = []

    def __call__(self, root):
        self.calls.append(root)
        return self.answer


class TestVolumeManager(TempDirTestCase):
    def setUp(self):
        super().setUp()
        self.disk = self.tmp / "disk"
        self.disk.mkdir()
        self.volume = VolumeManager(str(self.disk), "test.signature")

    def fill_disk(self):
        create_file_structure(self.disk, {
            "old.txt": "old",
            "photos": {"img.jpg": "jpg", "nested": {"deep.txt": "deep"}},
        })

    def test_signature_makes_volume_valid(self):
        self.assertFalse(self.volume.is_valid())
        (self.disk / "test.signature").write_text("")
        self.assertTrue(self.volume.is_valid())

    def test_valid_volume_left_untouched(self):
        self.fill_disk()
        (self.disk / "test.signature").write_text("marker")
        confirm = ConfirmRecorder(True)

        state = self.volume.initialize(confirm_erase=confirm)

        self.assertIs(state, VolumeState.CONFIRMED)
        self.assertEqual(confirm.calls, [])
        self.assertIn("old.txt", list_files(self.disk))
        self.assertEqual((self.disk / "test.signature").read_text(), "marker")

    def test_empty_new_volume_marked_without_prompt(self):
        confirm = ConfirmRecorder(False)

        state = self.volume.initialize(confirm_erase=confirm)

        self.assertIs(state, VolumeState.CONFIRMED)
        self.assertEqual(confirm.calls, [])
        self.assertTrue(self.volume.is_valid())

    def test_force_erase(self):
        self.fill_disk()
        confirm = ConfirmRecorder(False)

        self.volume.initialize(force_erase=True, confirm_erase=confirm)

        self.assertEqual(confirm.calls, [])
        self.assertEqual(list_files(self.disk), ["test.signature"])
        # Directories remain, only files are removed
        self.assertTrue((self.disk / "photos" / "nested").is_dir())

    def test_declined_erase_keeps_contents(self):
        self.fill_disk()
        confirm = ConfirmRecorder(False)

        state = self.volume.initialize(force_erase=False, confirm_erase=confirm)

        self.assertEqual(confirm.calls, [str(self.disk)])
        self.assertEqual(list_files(self.disk), ["old.txt", "photos/img.jpg", "photos/nested/deep.txt", "test.signature"])
        self.assertIs(state, VolumeState.CONFIRMED)

    def test_missing_callback_counts_as_refusal(self):
        self.fill_disk()
        self.volume.initialize()
        self.assertIn("old.txt", list_files(self.disk))

    def test_confirmed_erase(self):
        self.fill_disk()
        self.volume.initialize(confirm_erase=ConfirmRecorder(True))
        self.assertEqual(list_files(self.disk), ["test.signature"])

    def test_mark_content(self):
        self.volume.mark()
        content = (self.disk / "test.signature").read_text()
        self.assertTrue(content.startswith("backup-sync - disk cleared on "))
        self.assertIn("Do not remove this file", content)

    def test_erase_permission_denied(self):
        self.fill_disk()
        denied = PermissionError(errno.EACCES, "Permission denied", "old.txt")
        with mock.patch("backup_sync.core.volume.os.unlink", side_effect=denied):
            with self.assertRaises(EraseError) as ctx:
                self.volume.erase()
        self.assertIs(ctx.exception.kind, ErrorKind.PERMISSION_DENIED)
        self.assertTrue(ctx.exception.permission_denied)

    def test_erase_other_error(self):
        self.fill_disk()
        busy = OSError(errno.EBUSY, "Device or resource busy", "old.txt")
        with mock.patch("backup_sync.core.volume.os.unlink", side_effect=busy):
            with self.assertRaises(EraseError) as ctx:
                self.volume.erase()
        self.assertIs(ctx.exception.kind, ErrorKind.OTHER)

    def test_mark_permission_denied(self):
        denied = PermissionError(errno.EACCES, "Permission denied")
        with mock.patch("backup_sync.core.volume.open", side_effect=denied, create=True):
            with self.assertRaises(MarkError) as ctx:
                self.volume.mark()
        self.assertTrue(ctx.exception.permission_denied)

    def test_mark_missing_volume(self):
        volume = VolumeManager(str(self.tmp / "unplugged"))
        with self.assertRaises(MarkError) as ctx:
            volume.mark()
        self.assertIs(ctx.exception.kind, ErrorKind.OTHER)


if __name__ == "__main__":
    unittest.main()
