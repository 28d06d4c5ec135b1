import unittest
from datetime import datetime, timezone

from gdriveproxy.models import FileDescriptor, FolderDescriptor, KnownMetadata


class TestFileDescriptor(unittest.TestCase):
    def test_to_dict(self) -> None:
        f = FileDescriptor(
            id="F1",
            name="a.txt",
            mime_type="text/plain",
            size_bytes=12,
            modified_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
            icon_url="https://icon",
        )
        self.assertEqual(
            f.to_dict(),
            {
                "id": "F1",
                "name": "a.txt",
                "mimeType": "text/plain",
                "size": 12,
                "modifiedTime": "2025-01-01T00:00:00.000Z",
                "iconLink": "https://icon",
            },
        )

    def test_to_dict_without_optional_fields(self) -> None:
        data = FileDescriptor(id="F1", name="a", mime_type="text/plain", size_bytes=0).to_dict()
        self.assertIsNone(data["modifiedTime"])
        self.assertNotIn("iconLink", data)

    def test_negative_size_rejected(self) -> None:
        with self.assertRaises(ValueError):
            FileDescriptor(id="F1", name="a", mime_type="text/plain", size_bytes=-1)


class TestFolderDescriptor(unittest.TestCase):
    def test_total_size_is_sum_of_members(self) -> None:
        members = [
            FileDescriptor(id="A", name="a", mime_type="text/plain", size_bytes=10),
            FileDescriptor(id="B", name="b", mime_type="text/plain", size_bytes=20),
        ]
        folder = FolderDescriptor(id="D", name="dir", members=members)
        self.assertEqual(folder.total_size_bytes, 30)

        listing = folder.to_listing_dict()
        self.assertEqual(listing["folderId"], "D")
        self.assertEqual(listing["folderName"], "dir")
        self.assertEqual(listing["totalSize"], 30)
        self.assertEqual([m["id"] for m in listing["files"]], ["A", "B"])

    def test_empty_folder(self) -> None:
        folder = FolderDescriptor(id="D", name="dir")
        self.assertEqual(folder.total_size_bytes, 0)
        self.assertEqual(folder.to_dict()["files"], [])


class TestKnownMetadata(unittest.TestCase):
    def test_from_query_requires_all_three(self) -> None:
        self.assertIsNone(KnownMetadata.from_query(None, "text/plain", "1"))
        self.assertIsNone(KnownMetadata.from_query("a", None, "1"))
        self.assertIsNone(KnownMetadata.from_query("a", "text/plain", None))
        self.assertIsNone(KnownMetadata.from_query("a", "text/plain", ""))

    def test_from_query_rejects_bad_size(self) -> None:
        self.assertIsNone(KnownMetadata.from_query("a", "text/plain", "abc"))
        self.assertIsNone(KnownMetadata.from_query("a", "text/plain", "-5"))

    def test_from_query_parses_size(self) -> None:
        meta = KnownMetadata.from_query("a.txt", "text/plain", "42")
        self.assertEqual(meta, KnownMetadata(name="a.txt", mime_type="text/plain", size_bytes=42))


if __name__ == "__main__":
    unittest.main()
