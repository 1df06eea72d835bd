"""
Shared pytest fixtures for clip archive tests.

Provides an in-memory archive, a controllable clock, and a deterministic
hasher so similarity tests do not depend on real image content.
"""

from datetime import datetime, timedelta

import numpy as np
import pytest
from PIL import Image

from core.archive import ClipArchive
from core.hashing.phash import PerceptualHasher
from core.models.domain import RawClip
from core.uploads import LocalDirectoryProtocol


class FakeClock:
    """Callable clock returning a settable instant."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> datetime:
        self.now += timedelta(**delta)
        return self.now


class InfoHasher(PerceptualHasher):
    """Reads the hash from ``image.info["phash"]`` (0 when absent)."""

    name = "info"

    def __init__(self):
        self.calls = 0

    def hash(self, image: Image.Image) -> int:
        self.calls += 1
        return int(image.info.get("phash", 0))


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 9, 30, 0))


@pytest.fixture
def hasher():
    return InfoHasher()


@pytest.fixture
def archive(clock, hasher, tmp_path):
    """In-memory archive using the fake clock and info hasher."""
    archive = ClipArchive.open(
        hasher=hasher,
        clock=clock,
        protocols=[LocalDirectoryProtocol(tmp_path / "uploads")],
    )
    yield archive
    archive.close()


@pytest.fixture
def real_archive(clock, tmp_path):
    """In-memory archive using the imagehash-backed hasher."""
    archive = ClipArchive.open(clock=clock, protocols=[LocalDirectoryProtocol(tmp_path / "uploads")])
    yield archive
    archive.close()


def _tagged_image(phash=None, color=(200, 30, 30)) -> Image.Image:
    image = Image.new("RGB", (32, 32), color)
    if phash is not None:
        image.info["phash"] = phash
    return image


@pytest.fixture
def make_image_clip():
    """Factory for in-memory image clips carrying a fake hash."""

    def factory(name="shot.png", phash=None, color=(200, 30, 30)) -> RawClip:
        return RawClip(name=name, is_image=True, is_file=False, image=_tagged_image(phash, color))

    return factory


@pytest.fixture
def make_file_clip(tmp_path):
    """Factory for non-image file clips backed by a real file."""

    def factory(name="notes.txt", content="hello") -> RawClip:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return RawClip(name=name, is_image=False, is_file=True, path=path)

    return factory


@pytest.fixture
def noise_image():
    """Factory for deterministic noise images; equal seeds give equal pixels."""

    def factory(seed=0, size=64) -> Image.Image:
        rng = np.random.default_rng(seed)
        pixels = rng.integers(0, 256, size=(size, size, 3), dtype=np.uint8)
        return Image.fromarray(pixels)

    return factory


def count_rows(archive, table, **where):
    """Count rows in ``table`` matching equality constraints."""
    clause = " AND ".join(f"{column} = :{column}" for column in where) or "1"
    rows = archive.store.run(f"SELECT COUNT(*) AS total FROM {table} WHERE {clause}", where).rows
    return int(rows[0]["total"])


@pytest.fixture
def rows():
    return count_rows
