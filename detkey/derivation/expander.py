"""
Context expansion: HKDF-SHA256 as a byte stream.

Implements RFC 5869 extract-then-expand with the master seed as input key
material, the salt as extraction salt and the context string as ``info``:

    PRK  = HMAC-SHA256(salt, master_seed)
    T(i) = HMAC-SHA256(PRK, T(i-1) | info | i)

Output blocks are produced lazily, so the stream can be read in any number of
calls of any size. Reading the same offsets always returns the same bytes,
and the output is identical to ``HKDF(...).derive()`` of the same length.
RFC 5869 caps the output at 255 blocks (8160 bytes for SHA-256).
"""
import logging
from typing import Union

from cryptography.hazmat.primitives import hashes, hmac

from .exceptions import ExpansionReadFailure

logger = logging.getLogger("detkey.derivation")

HASH_LENGTH = 32  # SHA-256 digest size
MAX_OUTPUT = 255 * HASH_LENGTH


def _hmac_sha256(key: Union[bytes, bytearray], *parts: bytes) -> bytes:
    mac = hmac.HMAC(bytes(key), hashes.SHA256())
    for part in parts:
        mac.update(part)
    return mac.finalize()


class EntropyStream:
    """Deterministic, context-bound byte stream over HKDF-SHA256.

    Args:
        master_seed: Input key material (the stretched password).
        salt: Extraction salt.
        context: Expansion label; different contexts yield unrelated streams.
    """

    def __init__(
        self,
        master_seed: Union[bytes, bytearray],
        salt: bytes,
        context: Union[str, bytes],
    ):
        if isinstance(context, str):
            context = context.encode("utf-8")
        self._info = bytes(context)
        self._prk = bytearray(_hmac_sha256(salt, bytes(master_seed)))
        self._block = b""
        self._counter = 0
        self._pending = bytearray()
        self._position = 0

    @property
    def position(self) -> int:
        """Number of bytes consumed so far."""
        return self._position

    def _next_block(self) -> bytes:
        if self._counter >= 255:
            raise ExpansionReadFailure(
                f"HKDF output exhausted after {MAX_OUTPUT} bytes"
            )
        self._counter += 1
        self._block = _hmac_sha256(
            self._prk, self._block, self._info, bytes([self._counter]),
        )
        return self._block

    def read(self, n: int) -> bytes:
        """Return exactly ``n`` bytes, continuing where the last read ended.

        Raises:
            ExpansionReadFailure: If the stream was closed or the request
                runs past the HKDF output limit.
        """
        if n < 0:
            raise ValueError(f"Cannot read a negative number of bytes: {n}")
        if self._prk is None:
            raise ExpansionReadFailure("Entropy stream is closed")
        if self._position + n > MAX_OUTPUT:
            raise ExpansionReadFailure(
                f"Requested {n} bytes at offset {self._position}; HKDF-SHA256 "
                f"output is limited to {MAX_OUTPUT} bytes"
            )
        while len(self._pending) < n:
            self._pending += self._next_block()
        out = bytes(self._pending[:n])
        del self._pending[:n]
        self._position += n
        return out

    def close(self) -> None:
        """Zero the pseudo-random key and any buffered output."""
        if self._prk is not None:
            self._prk[:] = bytes(len(self._prk))
            self._prk = None
        self._pending[:] = bytes(len(self._pending))
        self._pending.clear()
        self._block = b""

    def __enter__(self) -> "EntropyStream":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def expand(
    master_seed: Union[bytes, bytearray],
    salt: bytes,
    context: Union[str, bytes],
) -> EntropyStream:
    """Bind the master seed to a context and return its entropy stream."""
    logger.debug("Expanding master seed for context of %d bytes", len(context))
    return EntropyStream(master_seed, salt, context)
