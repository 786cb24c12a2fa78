import pytest

from detkey.derivation import DerivationConfig


@pytest.fixture(autouse=True)
def no_salt_env(monkeypatch):
    """Keep a developer's DETKEY_SALT out of the tests."""
    monkeypatch.delenv("DETKEY_SALT", raising=False)


@pytest.fixture
def fast_config():
    """Cheap Argon2id parameters for tests that do not pin golden values."""
    return DerivationConfig(time_cost=1, memory_cost=64, parallelism=1)
