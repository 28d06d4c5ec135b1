import os
import tempfile
import unittest

from gdriveproxy.errors import ErrorCode, create_app_error
from gdriveproxy.models import DownloadResult


class TestDownloadResult(unittest.TestCase):
    def test_defaults(self) -> None:
        r = DownloadResult(resource_id="R1", success=False)
        self.assertIsNone(r.content)
        self.assertIsNone(r.error)
        self.assertFalse(r.cancelled)

    def test_save_writes_bytes(self) -> None:
        r = DownloadResult(
            resource_id="R1", success=True, content=b"hello", file_name="a.txt"
        )
        with tempfile.TemporaryDirectory() as tmp:
            target = os.path.join(tmp, "out")
            path = r.save(target)
            self.assertEqual(path, os.path.join(target, "a.txt"))
            with open(path, "rb") as f:
                self.assertEqual(f.read(), b"hello")

    def test_save_refuses_to_overwrite(self) -> None:
        r = DownloadResult(resource_id="R1", success=True, content=b"x", file_name="a.txt")
        with tempfile.TemporaryDirectory() as tmp:
            r.save(tmp)
            with self.assertRaises(FileExistsError):
                r.save(tmp)
            r.save(tmp, overwrite=True)

    def test_save_strips_directories_from_name(self) -> None:
        r = DownloadResult(
            resource_id="R1", success=True, content=b"x", file_name="../../etc/a.txt"
        )
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(r.save(tmp), os.path.join(tmp, "a.txt"))

    def test_save_failed_download_raises(self) -> None:
        r = DownloadResult(
            resource_id="R1", success=False, error=create_app_error(ErrorCode.API_ERROR)
        )
        with self.assertRaises(ValueError):
            r.save("unused")


if __name__ == "__main__":
    unittest.main()
