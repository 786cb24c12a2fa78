"""Deterministic Key Derivation: reproducible key pairs from a master password.

Security Note (Threat Model):
    No key is ever written to storage; keys are recomputed on demand from the
    master password, salt and context. Anyone who learns the master password
    (and the salt, which is public) can recompute every key. Passwords and
    seeds are held in ``bytearray`` buffers and zeroed after use, but Python
    may leave copies in memory that cannot be scrubbed. This is an accepted
    limitation.
"""

from .config import DEFAULT_SALT, DerivationConfig, load_salt
from .entropy import DeterministicEntropySource
from .exceptions import (
    DerivationError,
    EmptyContext,
    EmptyPassword,
    ExpansionReadFailure,
    GenerationError,
    StretchFailure,
    UnsupportedKeyType,
)
from .expander import EntropyStream, expand
from .keygen import KeyType, derive_key, generate
from .stretcher import scrub, stretch

__all__ = [
    "DEFAULT_SALT",
    "DerivationConfig",
    "load_salt",
    "DeterministicEntropySource",
    "EntropyStream",
    "expand",
    "stretch",
    "scrub",
    "KeyType",
    "generate",
    "derive_key",
    "DerivationError",
    "EmptyPassword",
    "EmptyContext",
    "UnsupportedKeyType",
    "StretchFailure",
    "ExpansionReadFailure",
    "GenerationError",
]
