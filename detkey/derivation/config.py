"""
Derivation Configuration: Salt and Argon2id cost parameters.

Reads an optional salt override from the environment:
    DETKEY_SALT = <any string of at least 8 bytes>

Every value held here is mixed into every derived key: changing the salt or
any cost parameter changes all keys. The defaults are the detkey v1
parameters (Argon2id v1.3, t=1, m=64 MiB, p=4).

Security Note:
    The salt is not secret, but never log the password or any derived bytes.
"""
import os
import logging
from typing import Union

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger("detkey.derivation")

DEFAULT_SALT = b"a-unique-salt-for-detkey-v1"
MASTER_SEED_SIZE = 32
MIN_SALT_LENGTH = 8  # Argon2 lower bound

SALT_ENV_VAR = "DETKEY_SALT"


def load_salt(salt: Union[str, bytes, None] = None) -> bytes:
    """Resolve the salt to use for a derivation.

    Precedence: explicit value, then ``DETKEY_SALT``, then the compiled-in
    default. Empty values count as unset.

    Args:
        salt: Explicit salt override (str is UTF-8 encoded).

    Returns:
        Salt bytes.
    """
    if salt:
        return salt.encode("utf-8") if isinstance(salt, str) else bytes(salt)
    env_salt = os.environ.get(SALT_ENV_VAR)
    if env_salt:
        logger.debug("Using salt override from %s", SALT_ENV_VAR)
        return env_salt.encode("utf-8")
    return DEFAULT_SALT


class DerivationConfig(BaseModel):
    """Validated derivation parameters."""

    salt: bytes = Field(default=DEFAULT_SALT)
    time_cost: int = Field(default=1, ge=1)
    memory_cost: int = Field(default=64 * 1024, ge=8)  # KiB
    parallelism: int = Field(default=4, ge=1, le=255)

    model_config = {"frozen": True}

    @field_validator("salt", mode="before")
    @classmethod
    def encode_salt(cls, v: Union[str, bytes, bytearray]) -> bytes:
        """Accept str salts and encode them as UTF-8."""
        if isinstance(v, str):
            return v.encode("utf-8")
        if isinstance(v, bytearray):
            return bytes(v)
        return v

    @field_validator("salt")
    @classmethod
    def validate_salt(cls, v: bytes) -> bytes:
        """Argon2 rejects salts shorter than 8 bytes."""
        if len(v) < MIN_SALT_LENGTH:
            raise ValueError(
                f"salt must be at least {MIN_SALT_LENGTH} bytes, got {len(v)}"
            )
        return v

    @model_validator(mode="after")
    def validate_memory_cost(self) -> "DerivationConfig":
        """Argon2 needs at least 8 KiB of memory per lane."""
        if self.memory_cost < 8 * self.parallelism:
            raise ValueError(
                f"memory_cost {self.memory_cost} KiB is below the minimum "
                f"of {8 * self.parallelism} KiB for {self.parallelism} lanes"
            )
        return self

    @classmethod
    def from_env(cls, salt: Union[str, bytes, None] = None) -> "DerivationConfig":
        """Create DerivationConfig, taking the salt from the environment.

        Args:
            salt: Explicit salt override; wins over ``DETKEY_SALT``.

        Returns:
            Populated DerivationConfig instance.
        """
        return cls(salt=load_salt(salt))
