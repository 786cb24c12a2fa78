"""
Password stretching: Argon2id master seed.

Turns the master password and salt into a 32-byte master seed. Argon2id is
memory-hard, so every password guess costs an attacker the configured time and
memory. The result is byte-identical for the same (password, salt, costs) on
every platform.

Security Note:
    The returned seed is a ``bytearray`` so callers can zero it with
    ``scrub()`` once the entropy stream has been built from it.
"""
import logging
from typing import Optional, Union

from argon2.low_level import hash_secret_raw, Type as _Argon2Type
from argon2.exceptions import HashingError

from .config import DerivationConfig, MASTER_SEED_SIZE
from .exceptions import StretchFailure

logger = logging.getLogger("detkey.derivation")


def scrub(buf: Optional[bytearray]) -> None:
    """Overwrite a mutable buffer with zeros. Immutable values are ignored."""
    if isinstance(buf, bytearray):
        buf[:] = bytes(len(buf))


def stretch(
    password: Union[bytes, bytearray],
    salt: bytes,
    config: Optional[DerivationConfig] = None,
) -> bytearray:
    """Derive the master seed with Argon2id.

    Args:
        password: Master password bytes. Emptiness is checked by the caller.
        salt: Salt bytes (at least 8).
        config: Cost parameters; defaults to ``DerivationConfig()``.

    Returns:
        32-byte master seed.

    Raises:
        StretchFailure: If Argon2 rejects the inputs or parameters.
    """
    if config is None:
        config = DerivationConfig()
    logger.debug(
        "Stretching password: argon2id t=%d m=%dKiB p=%d",
        config.time_cost, config.memory_cost, config.parallelism,
    )
    try:
        raw = hash_secret_raw(
            secret=bytes(password),
            salt=bytes(salt),
            time_cost=config.time_cost,
            memory_cost=config.memory_cost,
            parallelism=config.parallelism,
            hash_len=MASTER_SEED_SIZE,
            type=_Argon2Type.ID,
        )
    except HashingError as err:
        raise StretchFailure(f"Argon2id hashing failed: {err}") from err
    return bytearray(raw)
