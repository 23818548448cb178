"""
Tests for project file access
"""

import pytest

from fractal_prose.errors import FileAccessError
from fractal_prose.store import NullVersionStore, ProjectStore


class TestProjectStore:
    """Tests for ProjectStore."""

    def test_escape_refused(self, tmp_path):
        """Test paths outside the root are refused."""
        store = ProjectStore(tmp_path / "project")
        with pytest.raises(FileAccessError):
            store.resolve("../secrets.txt")

    def test_line_endings_preserved(self, tmp_path):
        """Test CRLF text reads and writes back unchanged."""
        store = ProjectStore(tmp_path)
        store.write_text("ch.md", "One.\r\nTwo.\r\n")
        assert store.read_text("ch.md") == "One.\r\nTwo.\r\n"
        assert (tmp_path / "ch.md").read_bytes() == b"One.\r\nTwo.\r\n"

    def test_write_creates_directories_and_leaves_no_temp_files(self, tmp_path):
        """Test atomic writes leave only the target behind."""
        store = ProjectStore(tmp_path)
        store.write_text("a/b/ch.md", "Text.\n")
        assert [p.name for p in (tmp_path / "a" / "b").iterdir()] == ["ch.md"]

    def test_invalid_json(self, tmp_path):
        """Test malformed JSON is a file error."""
        (tmp_path / "meta.json").write_text("{", encoding="utf-8")
        with pytest.raises(FileAccessError) as exc:
            ProjectStore(tmp_path).read_json("meta.json")
        assert exc.value.path == "meta.json"

    @pytest.mark.asyncio
    async def test_null_version_store(self):
        """Test the default version store records nothing."""
        assert await NullVersionStore().commit(["ch.md"], "message") is None
