"""
Deterministic entropy source for RSA key generation.

RSA generation draws random bytes many times and in amounts that depend on
how quickly primes are found, far more than the HKDF stream can provide. This
module turns a single 32-byte seed taken from the stream into an unbounded
counter-mode byte stream:

    block(i) = SHA-256(seed | uint64_le(i))    i = 0, 1, 2, ...

Blocks are computed ``BUFFER_SIZE // 32`` at a time into a refillable buffer.
Output is the plain concatenation of the blocks, so the bytes at any offset do
not depend on how the reads were split.
"""
import hashlib
import logging
import struct
from typing import Protocol

from .exceptions import ExpansionReadFailure

logger = logging.getLogger("detkey.derivation")

SEED_SIZE = 32
BLOCK_SIZE = 32  # SHA-256 digest size
BUFFER_SIZE = 8192
_MAX_COUNTER = 2 ** 64

_COUNTER = struct.Struct("<Q")


class ByteSource(Protocol):
    """Anything with a ``read(n) -> bytes`` method."""

    def read(self, n: int) -> bytes:
        ...


class DeterministicEntropySource:
    """Unbounded SHA-256 counter-mode byte stream.

    Takes exactly 32 bytes from ``upstream`` once, at construction, and never
    touches it again.

    Args:
        upstream: Source of the 32-byte seed (usually an ``EntropyStream``).
        buffer_size: Refill size in bytes, a multiple of 32.

    Raises:
        ExpansionReadFailure: If the upstream returns fewer than 32 bytes.
    """

    def __init__(self, upstream: ByteSource, buffer_size: int = BUFFER_SIZE):
        if buffer_size <= 0 or buffer_size % BLOCK_SIZE:
            raise ValueError(
                f"buffer_size must be a positive multiple of {BLOCK_SIZE}, "
                f"got {buffer_size}"
            )
        seed = upstream.read(SEED_SIZE)
        if len(seed) != SEED_SIZE:
            raise ExpansionReadFailure(
                f"Entropy seed read returned {len(seed)} of {SEED_SIZE} bytes"
            )
        self._seed = bytearray(seed)
        self._counter = 0
        self._buffer_size = buffer_size
        self._buffer = bytearray()
        self._pos = 0
        self._refills = 0
        self._consumed = 0

    @classmethod
    def from_seed(cls, seed: bytes, buffer_size: int = BUFFER_SIZE) -> "DeterministicEntropySource":
        """Build a source directly from a 32-byte seed."""
        return cls(_FixedSeed(seed), buffer_size=buffer_size)

    @property
    def counter(self) -> int:
        """Counter value of the next block to be hashed."""
        return self._counter

    @property
    def consumed(self) -> int:
        """Total number of bytes handed out."""
        return self._consumed

    @property
    def refills(self) -> int:
        """Number of times the buffer has been refilled."""
        return self._refills

    def _refill(self) -> None:
        if self._seed is None:
            raise ExpansionReadFailure("Entropy source is closed")
        blocks = self._buffer_size // BLOCK_SIZE
        if self._counter + blocks > _MAX_COUNTER:
            raise ExpansionReadFailure("Entropy source counter exhausted")
        seed = bytes(self._seed)
        chunks = []
        for counter in range(self._counter, self._counter + blocks):
            chunks.append(hashlib.sha256(seed + _COUNTER.pack(counter)).digest())
        self._counter += blocks
        self._buffer = bytearray(b"".join(chunks))
        self._pos = 0
        self._refills += 1

    def read(self, n: int) -> bytes:
        """Return the next ``n`` bytes of the stream.

        Leftover buffered bytes are always handed out before a refill.
        """
        if n < 0:
            raise ValueError(f"Cannot read a negative number of bytes: {n}")
        out = bytearray()
        while len(out) < n:
            if self._pos >= len(self._buffer):
                self._refill()
            take = min(n - len(out), len(self._buffer) - self._pos)
            out += self._buffer[self._pos:self._pos + take]
            self._pos += take
        self._consumed += n
        return bytes(out)

    def close(self) -> None:
        """Zero the seed and the buffer; further reads fail."""
        if self._seed is not None:
            self._seed[:] = bytes(SEED_SIZE)
            self._seed = None
        self._buffer[:] = bytes(len(self._buffer))
        self._pos = len(self._buffer)

    def __enter__(self) -> "DeterministicEntropySource":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class _FixedSeed:
    """One-shot upstream that hands out a fixed seed."""

    def __init__(self, seed: bytes):
        self._seed = bytes(seed)

    def read(self, n: int) -> bytes:
        out, self._seed = self._seed[:n], self._seed[n:]
        return out
