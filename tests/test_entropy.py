"""
Tests for DeterministicEntropySource.

Golden values are SHA-256(zero_seed | uint64_le(counter)) blocks.
"""
import hashlib
import io

import pytest

from detkey.derivation import DeterministicEntropySource, ExpansionReadFailure
from detkey.derivation.entropy import BUFFER_SIZE

ZERO_SEED = bytes(32)
FIRST_BLOCK = bytes.fromhex(
    "2c34ce1df23b838c5abf2a7f6437cca3d3067ed509ff25f11df6b11b582b51eb"
)
FIRST_8193_SHA256 = (
    "7d1ede7c6e297c35302f8c1c448bf41cd720c1875b2556225b1b69e3805c4dae"
)


@pytest.fixture
def source():
    return DeterministicEntropySource.from_seed(ZERO_SEED)


class TestGoldenStream:
    """Pinned output for a zero seed."""

    def test_first_block(self, source):
        """First 32 bytes are SHA-256(seed | counter 0)."""
        assert source.read(32) == FIRST_BLOCK

    def test_first_block_matches_hashlib(self, source):
        """Block i is SHA-256 over the seed and the little-endian counter."""
        data = source.read(96)
        for i in range(3):
            expected = hashlib.sha256(ZERO_SEED + i.to_bytes(8, "little")).digest()
            assert data[i * 32:(i + 1) * 32] == expected

    def test_first_8193_bytes(self, source):
        """Digest of the first refill plus one byte of the second."""
        data = source.read(BUFFER_SIZE + 1)
        assert hashlib.sha256(data).hexdigest() == FIRST_8193_SHA256
        assert data[BUFFER_SIZE] == 0xE4


class TestRefillBoundary:
    """Reads across buffer refills neither drop nor repeat bytes."""

    def test_single_read_equals_split_read(self):
        """8192 + 1 bytes in one call equal 8192 then 1 byte in two calls."""
        one = DeterministicEntropySource.from_seed(ZERO_SEED).read(8193)
        split = DeterministicEntropySource.from_seed(ZERO_SEED)
        two = split.read(8192) + split.read(1)
        assert one == two

    def test_uneven_reads(self):
        """Any split of the reads yields the same byte sequence."""
        total = 3 * BUFFER_SIZE + 17
        whole = DeterministicEntropySource.from_seed(ZERO_SEED).read(total)
        source = DeterministicEntropySource.from_seed(ZERO_SEED)
        sizes = [1, 31, 33, 8000, 191, 4096, 4097, 0, 7]
        parts = []
        for size in sizes:
            parts.append(source.read(size))
        parts.append(source.read(total - sum(sizes)))
        assert b"".join(parts) == whole

    def test_buffer_size_does_not_change_output(self):
        """The refill size only affects performance."""
        small = DeterministicEntropySource.from_seed(ZERO_SEED, buffer_size=32)
        large = DeterministicEntropySource.from_seed(ZERO_SEED)
        assert small.read(10000) == large.read(10000)

    def test_no_repeated_blocks(self, source):
        """Blocks over several refills are all distinct."""
        data = source.read(3 * BUFFER_SIZE)
        blocks = {data[i:i + 32] for i in range(0, len(data), 32)}
        assert len(blocks) == 3 * BUFFER_SIZE // 32


class TestCounter:
    """Counter handling."""

    def test_counter_only_increases(self, source):
        """Each refill advances the counter by one buffer of blocks."""
        assert source.counter == 0
        source.read(1)
        assert source.counter == BUFFER_SIZE // 32
        source.read(BUFFER_SIZE)
        assert source.counter == 2 * BUFFER_SIZE // 32
        assert source.refills == 2

    def test_consumed(self, source):
        """consumed counts bytes handed out, not bytes hashed."""
        source.read(10)
        source.read(5)
        assert source.consumed == 15


class TestConstruction:
    """Seeding from the upstream stream."""

    def test_reads_exactly_32_bytes_once(self):
        """Only the first 32 upstream bytes are used."""
        upstream = io.BytesIO(ZERO_SEED + b"\xff" * 32)
        source = DeterministicEntropySource(upstream)
        assert upstream.tell() == 32
        source.read(BUFFER_SIZE * 2)
        assert upstream.tell() == 32

    def test_seed_determines_stream(self):
        """Different seeds give different streams."""
        a = DeterministicEntropySource.from_seed(ZERO_SEED).read(64)
        b = DeterministicEntropySource.from_seed(b"\x01" + bytes(31)).read(64)
        assert a != b

    def test_short_upstream_fails(self):
        """A short seed read raises instead of falling back to a fixed seed."""
        with pytest.raises(ExpansionReadFailure):
            DeterministicEntropySource(io.BytesIO(b"too short"))

    def test_invalid_buffer_size(self):
        """Buffer size must be a multiple of the digest size."""
        with pytest.raises(ValueError):
            DeterministicEntropySource.from_seed(ZERO_SEED, buffer_size=100)

    def test_negative_read(self, source):
        """Negative sizes are rejected."""
        with pytest.raises(ValueError):
            source.read(-1)


class TestClose:
    """Scrubbing on close."""

    def test_read_after_close_fails(self, source):
        """A closed source cannot produce more bytes."""
        source.read(10)
        source.close()
        with pytest.raises(ExpansionReadFailure):
            source.read(1)

    def test_context_manager_closes(self):
        """Leaving the with-block closes the source."""
        with DeterministicEntropySource.from_seed(ZERO_SEED) as source:
            source.read(1)
        with pytest.raises(ExpansionReadFailure):
            source.read(1)
