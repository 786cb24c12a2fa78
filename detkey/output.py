"""
Key output: SSH and PEM serialization of derived keys.

``auto`` picks the format from the context: contexts with an ``mtls`` path
segment get PEM, contexts with an ``ssh`` segment get SSH, otherwise RSA keys
get PEM and Ed25519 keys get SSH. Only whole ``/``-separated segments match,
so ``"notssh/x"`` is not an SSH context.
"""
from enum import Enum
from typing import Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa

from .derivation import KeyType
from .derivation.keygen import PrivateKey


class OutputFormat(str, Enum):
    """Output formats accepted by the serializers and the CLI."""

    AUTO = "auto"
    SSH = "ssh"
    PEM = "pem"

    @classmethod
    def parse(cls, value: Union[str, "OutputFormat"]) -> "OutputFormat":
        """Return the OutputFormat for ``value``, raising ValueError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(
                f"Unsupported output format: {value!r} (supported: auto, ssh, pem)"
            ) from None


def context_segments(context: str) -> list[str]:
    """Split a context string into its non-empty ``/`` segments."""
    return [segment for segment in context.split("/") if segment]


def resolve_format(
    fmt: Union[str, OutputFormat],
    context: str,
    key_type: Union[str, KeyType],
) -> OutputFormat:
    """Return the concrete output format (never ``auto``)."""
    fmt = OutputFormat.parse(fmt)
    if fmt is not OutputFormat.AUTO:
        return fmt
    segments = context_segments(context)
    if "mtls" in segments:
        return OutputFormat.PEM
    if "ssh" in segments:
        return OutputFormat.SSH
    if KeyType.parse(key_type).is_rsa:
        return OutputFormat.PEM
    return OutputFormat.SSH


def serialize_private_key(key: PrivateKey, fmt: Union[str, OutputFormat]) -> bytes:
    """Serialize a private key, unencrypted.

    SSH gives an OpenSSH private key. PEM gives PKCS#1 (``RSA PRIVATE KEY``)
    for RSA and PKCS#8 (``PRIVATE KEY``) for Ed25519.
    """
    fmt = OutputFormat.parse(fmt)
    if fmt is OutputFormat.SSH:
        return key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.OpenSSH,
            encryption_algorithm=serialization.NoEncryption(),
        )
    if fmt is OutputFormat.PEM:
        if isinstance(key, rsa.RSAPrivateKey):
            private_format = serialization.PrivateFormat.TraditionalOpenSSL
        elif isinstance(key, ed25519.Ed25519PrivateKey):
            private_format = serialization.PrivateFormat.PKCS8
        else:
            raise ValueError(f"Unsupported private key type: {type(key).__name__}")
        return key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=private_format,
            encryption_algorithm=serialization.NoEncryption(),
        )
    raise ValueError(f"Cannot serialize a private key as {fmt.value!r}")


def serialize_public_key(key: PrivateKey, fmt: Union[str, OutputFormat]) -> bytes:
    """Serialize the public half of ``key``.

    SSH gives an ``authorized_keys`` line ending in a newline, PEM gives a
    SubjectPublicKeyInfo ``PUBLIC KEY`` block.
    """
    fmt = OutputFormat.parse(fmt)
    public_key = key.public_key()
    if fmt is OutputFormat.SSH:
        return public_key.public_bytes(
            encoding=serialization.Encoding.OpenSSH,
            format=serialization.PublicFormat.OpenSSH,
        ) + b"\n"
    if fmt is OutputFormat.PEM:
        return public_key.public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    raise ValueError(f"Cannot serialize a public key as {fmt.value!r}")
