"""Tests for clipboard and file-drop capture sources."""

from datetime import datetime

from PIL import Image

from core.capture import ClipboardSource, FileDropSource, is_image_path


def test_is_image_path(tmp_path):
    assert is_image_path(tmp_path / "a.PNG")
    assert is_image_path(tmp_path / "photo.jpeg")
    assert not is_image_path(tmp_path / "notes.txt")
    assert not is_image_path(tmp_path / "archive")


class TestFileDropSource:
    def test_reads_existing_files(self, tmp_path):
        image_path = tmp_path / "pic.png"
        Image.new("RGB", (4, 4)).save(image_path)
        text_path = tmp_path / "notes.txt"
        text_path.write_text("x", encoding="utf-8")

        image_clip, text_clip = FileDropSource().read([image_path, text_path])

        assert (image_clip.name, image_clip.is_image, image_clip.is_file) == ("pic.png", True, True)
        assert (text_clip.name, text_clip.is_image, text_clip.is_file) == ("notes.txt", False, True)
        assert text_clip.path == text_path.resolve()

    def test_skips_missing_paths_and_directories(self, tmp_path):
        source = FileDropSource()
        assert source.read_path(tmp_path / "missing.png") is None
        assert source.read_path(tmp_path) is None
        assert source.read([tmp_path, tmp_path / "missing.png"]) == []


class TestClipboardSource:
    def test_image_becomes_timestamped_png_clip(self):
        image = Image.new("RGB", (8, 8), "blue")
        source = ClipboardSource(grab=lambda: image, clock=lambda: datetime(2024, 5, 1, 9, 30, 5))

        [clip] = source.read()

        assert clip.name == "20240501093005.png"
        assert clip.is_image and not clip.is_file
        assert clip.image is image

    def test_file_list_becomes_file_clips(self, tmp_path):
        path = tmp_path / "doc.txt"
        path.write_text("x", encoding="utf-8")
        source = ClipboardSource(grab=lambda: [str(path), str(tmp_path / "gone.txt")])

        [clip] = source.read()

        assert clip.name == "doc.txt"
        assert clip.is_file

    def test_empty_clipboard(self):
        assert ClipboardSource(grab=lambda: None).read() == []

    def test_clipboard_image_ingests(self, archive):
        image = Image.new("RGB", (8, 8), "green")
        image.info["phash"] = 9
        [clip] = archive.clips.ingest(ClipboardSource(grab=lambda: image).read())
        assert archive.clips.find_by_id(clip.id).phash == 9

    def test_write_text_uses_copy_function(self):
        copied = []
        ClipboardSource(grab=lambda: None, copy=copied.append).write_text("file:///tmp/1-shot.jpg")
        assert copied == ["file:///tmp/1-shot.jpg"]
