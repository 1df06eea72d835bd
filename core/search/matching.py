# Path: core/search/matching.py
# Purpose: Narrow search candidates by perceptual-hash similarity to a query image.
# Layer: core/search.
# Details: Runs in memory over the already-filtered candidate list; cost is linear in candidate count.

from __future__ import annotations

from typing import Iterable, List

from PIL import Image

from core.errors import InvalidFilter
from core.hashing.phash import PerceptualHasher
from core.models.domain import DEFAULT_DISTANCE_THRESHOLD, Clip


class PerceptualMatchFilter:
    """Keep candidates whose stored phash is within a Hamming threshold of a query hash.

    This is a full scan over the candidates pulled from the store; it is never pushed
    into SQL, so it only suits candidate sets small enough to hold in memory. Clips
    with ``phash == 0`` are compared like any other hash.
    """

    def __init__(self, hasher: PerceptualHasher) -> None:
        self._hasher = hasher

    def hash_query(self, image: Image.Image) -> int:
        return self._hasher.hash(image)

    def filter(
        self,
        candidates: Iterable[Clip],
        query_hash: int,
        threshold: int = DEFAULT_DISTANCE_THRESHOLD,
    ) -> List[Clip]:
        """Return candidates with ``distance <= threshold``, preserving order."""

        if threshold < 0:
            raise InvalidFilter(f"distance threshold must be >= 0, got {threshold}", operation="match")
        return [
            clip for clip in candidates if self._hasher.distance(clip.phash, query_hash) <= threshold
        ]

    def filter_by_image(
        self,
        candidates: Iterable[Clip],
        image: Image.Image,
        threshold: int = DEFAULT_DISTANCE_THRESHOLD,
    ) -> List[Clip]:
        return self.filter(candidates, self.hash_query(image), threshold)
