# Path: core/hashing/phash.py
# Purpose: Compute 64-bit perceptual hashes and Hamming distances for image clips.
# Layer: core/hashing.
# Details: Wraps imagehash.phash and packs its boolean DCT matrix into a plain integer.

from __future__ import annotations

from abc import ABC, abstractmethod

import imagehash
import numpy as np
from PIL import Image

HASH_BITS = 64
_UINT64_MASK = (1 << HASH_BITS) - 1
_INT64_SIGN = 1 << (HASH_BITS - 1)


class PerceptualHasher(ABC):
    """Interface for perceptual hashing backends."""

    name: str
    bits: int = HASH_BITS

    @abstractmethod
    def hash(self, image: Image.Image) -> int:
        """Return an unsigned perceptual hash for ``image``."""

    def distance(self, a: int, b: int) -> int:
        """Return the Hamming distance between two hashes."""

        return hamming_distance(a, b)


class ImageHashHasher(PerceptualHasher):
    """DCT perceptual hash using imagehash.

    With the default ``hash_size`` of 8 the hash is an 8x8 low-frequency DCT
    region, i.e. exactly 64 bits.
    """

    name = "phash"

    def __init__(self, hash_size: int = 8) -> None:
        if hash_size * hash_size > HASH_BITS:
            raise ValueError(f"hash_size {hash_size} does not fit in {HASH_BITS} bits.")
        self.hash_size = hash_size
        self.bits = hash_size * hash_size

    def hash(self, image: Image.Image) -> int:
        rgb = image.convert("RGB")
        ph = imagehash.phash(rgb, hash_size=self.hash_size)

        # ph.hash is a hash_size x hash_size boolean numpy array.
        bits = ph.hash.astype(np.uint8).flatten()
        bit_string = "".join("1" if b else "0" for b in bits)
        return int(bit_string, 2)


def hamming_distance(a: int, b: int) -> int:
    """Count differing bits between two 64-bit hashes."""

    return bin((a ^ b) & _UINT64_MASK).count("1")


def to_signed64(value: int) -> int:
    """Map an unsigned 64-bit hash onto SQLite's signed INTEGER range."""

    value &= _UINT64_MASK
    return value - (1 << HASH_BITS) if value & _INT64_SIGN else value


def to_unsigned64(value: int) -> int:
    """Inverse of :func:`to_signed64`."""

    return value & _UINT64_MASK
