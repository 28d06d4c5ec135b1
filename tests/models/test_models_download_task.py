import unittest

from gdriveproxy.errors import ErrorCode, create_app_error
from gdriveproxy.models import DownloadStatus, DownloadTask


class TestDownloadTask(unittest.TestCase):
    def test_defaults(self) -> None:
        task = DownloadTask(resource_id="R1", file_name="a")
        self.assertEqual(task.status, DownloadStatus.PENDING)
        self.assertEqual(task.progress_percent, 0.0)
        self.assertFalse(task.is_terminal)

    def test_progress_only_applies_while_in_progress(self) -> None:
        task = DownloadTask(resource_id="R1", file_name="a")
        self.assertFalse(task.update_progress(50, 10))
        self.assertEqual(task.progress_percent, 0.0)

        task.start()
        self.assertTrue(task.update_progress(50, 10))
        self.assertEqual(task.progress_percent, 50)

    def test_progress_is_monotonic_and_capped(self) -> None:
        task = DownloadTask(resource_id="R1", file_name="a")
        task.start()
        task.update_progress(60, 1)
        task.update_progress(40, 1)
        self.assertEqual(task.progress_percent, 60)
        task.update_progress(150, 1)
        self.assertEqual(task.progress_percent, 100)

    def test_complete_sets_full_progress(self) -> None:
        task = DownloadTask(resource_id="R1", file_name="a")
        task.start()
        task.update_progress(30, 100)
        task.complete("a.pdf")
        self.assertEqual(task.status, DownloadStatus.COMPLETED)
        self.assertEqual(task.progress_percent, 100)
        self.assertEqual(task.speed_bytes_per_sec, 0)
        self.assertEqual(task.file_name, "a.pdf")
        self.assertTrue(task.is_terminal)
        self.assertIsNotNone(task.finished_at)

    def test_fail_keeps_progress(self) -> None:
        task = DownloadTask(resource_id="R1", file_name="a")
        task.start()
        task.update_progress(45, 100)
        task.fail(create_app_error(ErrorCode.NETWORK_ERROR))
        self.assertEqual(task.status, DownloadStatus.FAILED)
        self.assertEqual(task.progress_percent, 45)
        assert task.last_error is not None
        self.assertTrue(task.last_error.message)
        self.assertTrue(task.last_error.suggestion)

    def test_cancel_is_terminal(self) -> None:
        task = DownloadTask(resource_id="R1", file_name="a")
        task.start()
        task.cancel()
        self.assertEqual(task.status, DownloadStatus.CANCELLED)
        self.assertTrue(task.is_terminal)
        self.assertFalse(task.update_progress(90, 1))


if __name__ == "__main__":
    unittest.main()
