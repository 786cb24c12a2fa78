"""DetKey.

Derives reproducible Ed25519 and RSA key pairs from a master password and a
context string.
"""
from .version import __version__
from .derivation import (
    DerivationConfig,
    DerivationError,
    KeyType,
    derive_key,
)
from .output import (
    OutputFormat,
    resolve_format,
    serialize_private_key,
    serialize_public_key,
)

__all__ = [
    "__version__",
    "DerivationConfig",
    "DerivationError",
    "KeyType",
    "derive_key",
    "OutputFormat",
    "resolve_format",
    "serialize_private_key",
    "serialize_public_key",
]
