"""Unit tests for the file storage seam"""
import pytest

from teachhub.services.storage import LocalStorageBackend, StorageBackend, purge_files


class FlakyStorage(StorageBackend):
    def __init__(self, failing):
        self.failing = set(failing)
        self.deleted = []

    async def delete(self, storage_key: str) -> None:
        if storage_key in self.failing:
            raise OSError("permission denied")
        self.deleted.append(storage_key)


class TestLocalStorageBackend:
    async def test_delete_removes_file(self, tmp_path):
        (tmp_path / "notes").mkdir()
        target = tmp_path / "notes" / "a.pdf"
        target.write_bytes(b"%PDF")

        await LocalStorageBackend(root=str(tmp_path)).delete("notes/a.pdf")

        assert not target.exists()

    async def test_delete_missing_file_is_noop(self, tmp_path):
        await LocalStorageBackend(root=str(tmp_path)).delete("videos/missing.mp4")

    async def test_key_cannot_escape_root(self, tmp_path):
        backend = LocalStorageBackend(root=str(tmp_path / "uploads"))
        with pytest.raises(ValueError):
            await backend.delete("../secrets.txt")


class TestPurgeFiles:
    async def test_skips_empty_keys(self):
        backend = FlakyStorage(failing=[])
        failed = await purge_files(["a", None, "", "b"], backend=backend)

        assert failed == []
        assert backend.deleted == ["a", "b"]

    async def test_failures_are_collected(self):
        backend = FlakyStorage(failing=["b"])
        failed = await purge_files(["a", "b", "c"], backend=backend)

        assert failed == ["b"]
        assert backend.deleted == ["a", "c"]
