# Path: core/hashing/__init__.py
# Purpose: Package initializer for perceptual hashing and thumbnail helpers.
# Layer: core/hashing.
# Details: Exposes the hasher interface, the imagehash-backed implementation, and encoding helpers.

from .phash import (
    HASH_BITS,
    ImageHashHasher,
    PerceptualHasher,
    hamming_distance,
    to_signed64,
    to_unsigned64,
)
from .thumbnails import open_thumbnail, thumbnailize

__all__ = [
    "HASH_BITS",
    "ImageHashHasher",
    "PerceptualHasher",
    "hamming_distance",
    "to_signed64",
    "to_unsigned64",
    "open_thumbnail",
    "thumbnailize",
]
