"""
Tests for the HKDF-SHA256 entropy stream.
"""
import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from detkey.derivation import DEFAULT_SALT, EntropyStream, ExpansionReadFailure, expand
from detkey.derivation.expander import MAX_OUTPUT

from .vectors import GOLDEN_MASTER_SEED, GOLDEN_STREAM, TEST_CONTEXT


@pytest.fixture
def stream():
    return expand(GOLDEN_MASTER_SEED, DEFAULT_SALT, TEST_CONTEXT)


class TestGolden:
    """Pinned HKDF output."""

    def test_first_64_bytes(self, stream):
        """Output matches the recorded HKDF-SHA256 vector."""
        assert stream.read(64) == GOLDEN_STREAM

    def test_bytes_context_equals_str_context(self):
        """str contexts are UTF-8 encoded."""
        a = expand(GOLDEN_MASTER_SEED, DEFAULT_SALT, TEST_CONTEXT).read(32)
        b = expand(GOLDEN_MASTER_SEED, DEFAULT_SALT, TEST_CONTEXT.encode()).read(32)
        assert a == b

    def test_matches_cryptography_hkdf(self):
        """Stream output equals HKDF.derive() of the same length."""
        master = bytes(range(32))
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=200,
            salt=b"some-salt-value",
            info=b"mtls/ca/v1",
        )
        expected = hkdf.derive(master)
        assert expand(master, b"some-salt-value", "mtls/ca/v1").read(200) == expected


class TestReads:
    """Cursor behaviour."""

    def test_split_reads(self, stream):
        """Consecutive reads continue where the previous one ended."""
        parts = [stream.read(n) for n in (1, 30, 2, 31)]
        assert b"".join(parts) == GOLDEN_STREAM
        assert stream.position == 64

    def test_zero_read(self, stream):
        """Reading nothing does not move the cursor."""
        assert stream.read(0) == b""
        assert stream.read(64) == GOLDEN_STREAM

    def test_full_output(self, stream):
        """The whole RFC 5869 output can be read."""
        assert len(stream.read(MAX_OUTPUT)) == MAX_OUTPUT

    def test_past_limit_fails(self, stream):
        """Reading past 255 blocks raises ExpansionReadFailure."""
        stream.read(MAX_OUTPUT - 1)
        with pytest.raises(ExpansionReadFailure):
            stream.read(2)

    def test_closed_stream_fails(self, stream):
        """Reads after close() raise."""
        stream.close()
        with pytest.raises(ExpansionReadFailure):
            stream.read(1)

    def test_context_manager(self):
        """The with-block closes the stream."""
        with EntropyStream(GOLDEN_MASTER_SEED, DEFAULT_SALT, TEST_CONTEXT) as s:
            s.read(1)
        with pytest.raises(ExpansionReadFailure):
            s.read(1)


class TestIsolation:
    """Inputs are all bound into the output."""

    def test_context_changes_output(self):
        """A one-character context change gives an unrelated stream."""
        a = expand(GOLDEN_MASTER_SEED, DEFAULT_SALT, "ssh/test-server/v1").read(32)
        b = expand(GOLDEN_MASTER_SEED, DEFAULT_SALT, "ssh/test-server/v2").read(32)
        assert b == bytes.fromhex(
            "ce898607baf52bdb3cde5f639bf0909dd3b911c97ee862262b7585823a55b5ed"
        )
        assert a != b

    def test_salt_changes_output(self):
        """The salt is used for extraction."""
        a = expand(GOLDEN_MASTER_SEED, DEFAULT_SALT, TEST_CONTEXT).read(32)
        b = expand(GOLDEN_MASTER_SEED, b"another-salt", TEST_CONTEXT).read(32)
        assert a != b

    def test_seed_changes_output(self):
        """The master seed is the input key material."""
        a = expand(GOLDEN_MASTER_SEED, DEFAULT_SALT, TEST_CONTEXT).read(32)
        b = expand(bytes(32), DEFAULT_SALT, TEST_CONTEXT).read(32)
        assert a != b
