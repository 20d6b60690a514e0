"""
Streaming content digests for downloaded archives.
"""
from __future__ import annotations

import hashlib
from typing import Iterable

# Solder publishes MD5 sums for every mod archive.
DEFAULT_ALGORITHM = "md5"


class ChecksumVerifier:
    """Accumulates a digest over chunks as they arrive from the network."""

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM):
        self.algorithm = algorithm
        self._hasher = hashlib.new(algorithm)

    def update(self, chunk: bytes) -> None:
        self._hasher.update(chunk)

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()

    def matches(self, expected: str) -> bool:
        return self.hexdigest().lower() == (expected or "").strip().lower()


def compute_checksum(chunks: Iterable[bytes], algorithm: str = DEFAULT_ALGORITHM) -> str:
    verifier = ChecksumVerifier(algorithm)
    for chunk in chunks:
        verifier.update(chunk)
    return verifier.hexdigest()
