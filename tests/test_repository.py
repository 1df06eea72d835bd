"""Tests for ClipRepository: ingestion, lookup, update, and cascading deletes."""

from datetime import datetime

import pytest
from PIL import Image

from core.archive import ClipArchive
from core.errors import NotFound
from core.hashing import ImageHashHasher, open_thumbnail
from core.models.domain import Clip, RawClip, Server


class TestIngest:
    def test_assigns_monotonic_ids(self, archive, make_image_clip, make_file_clip):
        clips = archive.clips.ingest([make_image_clip("a.png"), make_file_clip("b.txt"), make_image_clip("c.png")])
        ids = [clip.id for clip in clips]
        assert all(clip_id > 0 for clip_id in ids)
        assert ids == sorted(ids)
        assert len(set(ids)) == 3

    def test_shared_tags_and_description(self, archive, make_image_clip, make_file_clip):
        clips = archive.clips.ingest(
            [make_image_clip(), make_file_clip()], tags=["work", "ideas"], description="sprint notes"
        )
        for clip in clips:
            stored = archive.clips.find_by_id(clip.id)
            assert stored.description == "sprint notes"
            assert stored.tags == {"work", "ideas"}
            assert clip.tags == {"work", "ideas"}

    def test_tags_resolved_once_per_batch(self, archive, make_image_clip):
        archive.clips.ingest([make_image_clip("a.png"), make_image_clip("b.png")], tags=["shared"])
        assert archive.tags.all_names() == ["shared"]

    def test_without_create_skips_unknown_tags(self, archive, make_image_clip):
        archive.tags.resolve(["known"], create_if_missing=True)
        [clip] = archive.clips.ingest([make_image_clip()], tags=["known", "new"], create_missing_tags=False)
        assert archive.clips.find_by_id(clip.id).tags == {"known"}
        assert archive.tags.all_names() == ["known"]

    def test_image_clip_gets_hash_and_thumbnail(self, archive, hasher, make_image_clip):
        [clip] = archive.clips.ingest([make_image_clip(phash=0xABCDEF)])
        stored = archive.clips.find_by_id(clip.id)
        assert stored.phash == 0xABCDEF
        assert stored.thumbnail.startswith(b"\xff\xd8")
        assert hasher.calls == 1

    def test_file_clip_is_not_hashed(self, archive, hasher, make_file_clip):
        [clip] = archive.clips.ingest([make_file_clip()])
        stored = archive.clips.find_by_id(clip.id)
        assert stored.phash == 0
        assert stored.thumbnail == b""
        assert stored.is_file and not stored.is_image
        assert hasher.calls == 0

    def test_high_bit_hash_survives_storage(self, archive, make_image_clip):
        top = (1 << 64) - 1
        [clip] = archive.clips.ingest([make_image_clip(phash=top)])
        assert archive.clips.find_by_id(clip.id).phash == top

    def test_created_at_from_clock_truncated_to_seconds(self, archive, clock, make_image_clip):
        clock.now = datetime(2024, 6, 2, 14, 5, 7, 123456)
        [clip] = archive.clips.ingest([make_image_clip()])
        assert archive.clips.find_by_id(clip.id).created_at == datetime(2024, 6, 2, 14, 5, 7)

    def test_created_at_stored_as_second_precision_text(self, archive, clock, make_file_clip):
        clock.now = datetime(2024, 6, 2, 14, 5, 7, 999999)
        [clip] = archive.clips.ingest([make_file_clip()])
        [row] = archive.store.run("SELECT created_at FROM clips WHERE id = :id", {"id": clip.id}).rows
        assert row["created_at"] == "2024-06-02 14:05:07"

    def test_source_path_kept_for_file_clips(self, archive, make_file_clip, make_image_clip):
        file_clip, image_clip = archive.clips.ingest([make_file_clip("doc.txt"), make_image_clip()])
        assert archive.clips.find_by_id(file_clip.id).path == file_clip.path
        assert archive.clips.find_by_id(image_clip.id).path is None

    def test_image_file_on_disk_is_hashed(self, clock, tmp_path, noise_image):
        path = tmp_path / "photo.png"
        noise_image(seed=3).save(path)
        with ClipArchive.open(clock=clock) as archive:
            [clip] = archive.clips.ingest([RawClip(name="photo.png", is_image=True, is_file=True, path=path)])
            assert clip.phash == ImageHashHasher().hash(noise_image(seed=3))
            assert archive.clips.find_by_id(clip.id).thumbnail

    def test_unreadable_image_file_stored_without_hash(self, archive, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")
        [clip] = archive.clips.ingest([RawClip(name="broken.png", is_image=True, is_file=True, path=path)])
        stored = archive.clips.find_by_id(clip.id)
        assert stored.is_image
        assert stored.phash == 0

    def test_failure_mid_batch_stores_nothing(self, archive, hasher, make_image_clip, rows):
        original = hasher.hash

        def flaky(image: Image.Image) -> int:
            if hasher.calls >= 1:
                raise RuntimeError("hash backend down")
            return original(image)

        hasher.hash = flaky
        with pytest.raises(RuntimeError):
            archive.clips.ingest([make_image_clip("a.png"), make_image_clip("b.png")], tags=["t"])
        assert archive.clips.count() == 0
        assert rows(archive, "clips_tags") == 0
        assert archive.tags.all_names() == []

    def test_empty_batch(self, archive):
        assert archive.clips.ingest([], tags=["unused"]) == []
        assert archive.clips.count() == 0


class TestFindById:
    def test_missing_id_raises_not_found(self, archive):
        with pytest.raises(NotFound) as excinfo:
            archive.clips.find_by_id(404)
        assert excinfo.value.operation == "find_by_id"
        assert excinfo.value.target == 404

    def test_not_found_is_a_lookup_error(self, archive):
        with pytest.raises(LookupError):
            archive.clips.find_by_id(1)


class TestUpdate:
    def test_replaces_tag_set_exactly(self, archive, make_image_clip, rows):
        [clip] = archive.clips.ingest([make_image_clip()], tags=["old", "keep"])
        clip.tags = {"keep", "new"}
        clip.description = "changed"
        archive.clips.update(clip)

        stored = archive.clips.find_by_id(clip.id)
        assert stored.tags == {"keep", "new"}
        assert stored.description == "changed"
        assert rows(archive, "clips_tags", clip_id=clip.id) == 2

    def test_empty_tag_set_clears_tags(self, archive, make_image_clip):
        [clip] = archive.clips.ingest([make_image_clip()], tags=["a"])
        clip.tags = set()
        archive.clips.update(clip)
        assert archive.clips.find_by_id(clip.id).tags == set()

    def test_update_leaves_other_fields(self, archive, make_image_clip):
        [clip] = archive.clips.ingest([make_image_clip(phash=42)])
        before = archive.clips.find_by_id(clip.id)
        clip.description = "new"
        archive.clips.update(clip)
        after = archive.clips.find_by_id(clip.id)
        assert (after.name, after.phash, after.created_at) == (before.name, before.phash, before.created_at)

    def test_failure_after_unlink_rolls_back(self, archive, make_image_clip, monkeypatch):
        [clip] = archive.clips.ingest([make_image_clip()], tags=["a", "b"], description="before")

        def broken_link(clip_id, tag_ids):
            raise RuntimeError("store went away")

        monkeypatch.setattr(archive.associations, "link", broken_link)
        clip.tags = {"c"}
        clip.description = "after"
        with pytest.raises(RuntimeError):
            archive.clips.update(clip)

        stored = archive.clips.find_by_id(clip.id)
        assert stored.tags == {"a", "b"}
        assert stored.description == "before"

    def test_unknown_clip_raises_not_found(self, archive):
        with pytest.raises(NotFound):
            archive.clips.update(Clip(id=77, tags={"x"}))
        assert archive.tags.all_names() == []


class TestRemove:
    def test_remove_missing_id_is_noop(self, archive, make_image_clip, rows):
        archive.clips.ingest([make_image_clip()], tags=["a"])
        archive.clips.remove(999)
        assert archive.clips.count() == 1
        assert rows(archive, "clips_tags") == 1

    def test_remove_cascades_associations_and_uploads(self, archive, make_image_clip, rows):
        [clip, other] = archive.clips.ingest([make_image_clip("a.png"), make_image_clip("b.png")], tags=["a", "b"])
        server = archive.servers.append(Server(name="disk", protocol="local"))
        archive.servers.upload(clip, server)

        archive.clips.remove(clip.id)

        assert rows(archive, "clips_tags", clip_id=clip.id) == 0
        assert rows(archive, "uploads", clip_id=clip.id) == 0
        assert rows(archive, "clips_tags", clip_id=other.id) == 2
        with pytest.raises(NotFound):
            archive.clips.find_by_id(clip.id)

    def test_clean_wipes_everything(self, archive, make_image_clip, make_file_clip, rows):
        clips = archive.clips.ingest([make_image_clip(), make_file_clip()], tags=["a"])
        server = archive.servers.append(Server(name="disk", protocol="local"))
        archive.servers.upload(clips[0], server)

        archive.clips.clean()

        assert archive.clips.count() == 0
        assert rows(archive, "clips_tags") == 0
        assert rows(archive, "uploads") == 0
        assert archive.tags.all_names() == ["a"]
        assert len(archive.servers.get_all()) == 1

    def test_ids_keep_increasing_after_clean(self, archive, make_image_clip):
        [first] = archive.clips.ingest([make_image_clip()])
        archive.clips.clean()
        [second] = archive.clips.ingest([make_image_clip()])
        assert second.id > first.id


class TestThumbnails:
    def test_thumbnail_bounded_by_configured_size(self, clock, hasher):
        big = Image.new("RGB", (800, 400), "white")
        with ClipArchive.open(hasher=hasher, clock=clock, thumbnail_size=64) as archive:
            [clip] = archive.clips.ingest([RawClip(name="big.png", is_image=True, is_file=False, image=big)])
            preview = open_thumbnail(archive.clips.find_by_id(clip.id).thumbnail)
        assert preview.size == (64, 32)

    def test_open_thumbnail_rejects_empty_and_garbage(self):
        assert open_thumbnail(b"") is None
        assert open_thumbnail(b"garbage") is None
