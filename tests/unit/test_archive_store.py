"""
Unit tests for the in-memory package archive.
"""

import io
import zipfile

import pytest

from longlist.contexts.rendering.archive_store import PackageArchive
from longlist.contexts.templating.exceptions import SerializationError, TemplateLoadError


def make_zip(entries):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as container:
        for name, data in entries:
            info = zipfile.ZipInfo(name, date_time=(2023, 5, 6, 7, 8, 10))
            info.compress_type = zipfile.ZIP_DEFLATED
            container.writestr(info, data)
    return buffer.getvalue()


@pytest.fixture
def archive():
    data = make_zip([("a.xml", b"<a/>"), ("media/image1.png", b"\x89PNG\x00\x01"), ("b.xml", b"<b/>")])
    return PackageArchive.from_bytes(data)


@pytest.mark.unit
class TestLoading:
    def test_entries_in_container_order(self, archive):
        assert archive.names() == ["a.xml", "media/image1.png", "b.xml"]
        assert archive.read_text("b.xml") == "<b/>"

    def test_not_a_zip(self):
        with pytest.raises(TemplateLoadError):
            PackageArchive.from_bytes(b"plain text")

    def test_missing_file(self, tmp_path):
        with pytest.raises(TemplateLoadError, match="Cannot read template"):
            PackageArchive.from_path(tmp_path / "missing.pptx")

    def test_missing_part(self, archive):
        with pytest.raises(TemplateLoadError) as exc_info:
            archive.read_bytes("c.xml")
        assert exc_info.value.part_name == "c.xml"

    def test_binary_part_is_not_text(self, archive):
        with pytest.raises(TemplateLoadError):
            archive.read_text("media/image1.png")


@pytest.mark.unit
class TestWriting:
    def test_unchanged_round_trip_keeps_bytes(self, archive):
        with zipfile.ZipFile(io.BytesIO(archive.to_bytes())) as container:
            assert container.namelist() == ["a.xml", "media/image1.png", "b.xml"]
            assert container.read("media/image1.png") == b"\x89PNG\x00\x01"
            assert container.getinfo("a.xml").date_time == (2023, 5, 6, 7, 8, 10)

    def test_replace_keeps_position(self, archive):
        archive.write_text("a.xml", "<a>new</a>")

        assert archive.names()[0] == "a.xml"
        assert archive.modified_parts == ["a.xml"]

    def test_new_part_appended(self, archive):
        archive.write_text("c.xml", "<c/>")

        with zipfile.ZipFile(io.BytesIO(archive.to_bytes())) as container:
            assert container.namelist()[-1] == "c.xml"
            assert container.getinfo("c.xml").date_time == (2023, 5, 6, 7, 8, 10)

    def test_serialization_is_deterministic(self, archive):
        archive.write_text("c.xml", "<c/>")

        assert archive.to_bytes() == archive.to_bytes()

    def test_save_creates_parent(self, archive, tmp_path):
        destination = tmp_path / "nested" / "deck.pptx"

        size = archive.save(destination)

        assert destination.read_bytes() == archive.to_bytes()
        assert size == destination.stat().st_size

    def test_save_into_file_path_fails(self, archive, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(SerializationError):
            archive.save(blocker / "deck.pptx")
