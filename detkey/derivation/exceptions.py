"""
Derivation errors.

Every failure is terminal for the derivation call that raised it. Nothing in
this package retries, and nothing falls back to a non-deterministic random
source: a key produced that way could never be regenerated.
"""


class DerivationError(Exception):
    """Base class for all key derivation failures."""


class EmptyPassword(DerivationError, ValueError):
    """The master password is empty."""

    def __init__(self, message: str = "Master password cannot be empty"):
        super().__init__(message)


class EmptyContext(DerivationError, ValueError):
    """The context string is empty."""

    def __init__(self, message: str = "Context string cannot be empty"):
        super().__init__(message)


class UnsupportedKeyType(DerivationError, ValueError):
    """The requested key type is not one of the supported types."""

    def __init__(self, key_type: str):
        self.key_type = key_type
        super().__init__(
            f"Unsupported key type: {key_type!r} "
            f"(supported: ed25519, rsa2048, rsa4096)"
        )


class StretchFailure(DerivationError):
    """Argon2id refused to hash the password."""


class ExpansionReadFailure(DerivationError):
    """The HKDF stream could not supply the requested bytes."""


class GenerationError(DerivationError):
    """The key generation algorithm failed."""
