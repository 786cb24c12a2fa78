"""
Key assembly and the full derivation pipeline.

    password + salt --Argon2id--> master seed
    master seed + salt + context --HKDF-SHA256--> entropy stream
    entropy stream --> Ed25519 seed (first 32 bytes)
                   +-> DeterministicEntropySource --> RSA.generate()

RSA generation uses pycryptodome, whose ``RSA.generate`` accepts a caller
supplied ``randfunc``; the resulting numbers are loaded into a
``cryptography`` key so callers always get ``cryptography`` key objects.

Security Note:
    Never log passwords, seeds or key material. Only log key types, sizes
    and parameter values.
"""
import logging
from enum import Enum
from typing import Optional, Union

from Crypto.PublicKey import RSA
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa

from .config import DerivationConfig, load_salt
from .entropy import ByteSource, DeterministicEntropySource
from .exceptions import (
    EmptyContext,
    EmptyPassword,
    ExpansionReadFailure,
    GenerationError,
    UnsupportedKeyType,
)
from .expander import expand
from .stretcher import scrub, stretch

logger = logging.getLogger("detkey.derivation")

ED25519_SEED_SIZE = 32
RSA_PUBLIC_EXPONENT = 65537

PrivateKey = Union[ed25519.Ed25519PrivateKey, rsa.RSAPrivateKey]


class KeyType(str, Enum):
    """Supported key types."""

    ED25519 = "ed25519"
    RSA2048 = "rsa2048"
    RSA4096 = "rsa4096"

    @classmethod
    def parse(cls, value: Union[str, "KeyType"]) -> "KeyType":
        """Return the KeyType for ``value``.

        Raises:
            UnsupportedKeyType: If ``value`` names no supported type.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedKeyType(str(value)) from None

    @property
    def is_rsa(self) -> bool:
        return self is not KeyType.ED25519

    @property
    def rsa_bits(self) -> Optional[int]:
        """Modulus size for RSA types, None for Ed25519."""
        return {KeyType.RSA2048: 2048, KeyType.RSA4096: 4096}.get(self)


def _generate_ed25519(stream: ByteSource) -> ed25519.Ed25519PrivateKey:
    seed = stream.read(ED25519_SEED_SIZE)
    if len(seed) != ED25519_SEED_SIZE:
        raise ExpansionReadFailure(
            f"Ed25519 seed read returned {len(seed)} of {ED25519_SEED_SIZE} bytes"
        )
    return ed25519.Ed25519PrivateKey.from_private_bytes(seed)


def _generate_rsa(stream: ByteSource, bits: int) -> rsa.RSAPrivateKey:
    with DeterministicEntropySource(stream) as source:
        try:
            generated = RSA.generate(
                bits, randfunc=source.read, e=RSA_PUBLIC_EXPONENT,
            )
        except ValueError as err:
            raise GenerationError(
                f"RSA-{bits} generation failed: {err}"
            ) from err
        logger.debug(
            "RSA-%d generated after %d entropy refill(s), %d bytes consumed",
            bits, source.refills, source.consumed,
        )
    p, q, d = int(generated.p), int(generated.q), int(generated.d)
    numbers = rsa.RSAPrivateNumbers(
        p=p,
        q=q,
        d=d,
        dmp1=rsa.rsa_crt_dmp1(d, p),
        dmq1=rsa.rsa_crt_dmq1(d, q),
        iqmp=rsa.rsa_crt_iqmp(p, q),
        public_numbers=rsa.RSAPublicNumbers(
            e=int(generated.e), n=int(generated.n),
        ),
    )
    try:
        return numbers.private_key()
    except ValueError as err:
        raise GenerationError(
            f"RSA-{bits} key failed validation: {err}"
        ) from err


def generate(key_type: Union[str, KeyType], stream: ByteSource) -> PrivateKey:
    """Generate a private key of ``key_type`` from a deterministic stream.

    Ed25519 uses the first 32 bytes of ``stream`` as its seed. RSA types wrap
    ``stream`` in a DeterministicEntropySource and run RSA generation on it.

    Args:
        key_type: One of ``ed25519``, ``rsa2048``, ``rsa4096``.
        stream: Entropy stream for this derivation.

    Returns:
        A ``cryptography`` private key object.

    Raises:
        UnsupportedKeyType: For unknown key types.
        ExpansionReadFailure: If the stream cannot supply the seed.
        GenerationError: If the generation algorithm fails.
    """
    kt = KeyType.parse(key_type)
    if kt.is_rsa:
        return _generate_rsa(stream, kt.rsa_bits)
    return _generate_ed25519(stream)


def derive_key(
    password: Union[str, bytes, bytearray],
    context: str,
    key_type: Union[str, KeyType] = KeyType.ED25519,
    salt: Union[str, bytes, None] = None,
    config: Optional[DerivationConfig] = None,
) -> PrivateKey:
    """Derive the private key for (password, salt, context, key_type).

    Identical inputs always return the identical key. Inputs are validated
    before any cryptographic work starts.

    Args:
        password: Master password. A ``bytearray`` is left for the caller
            to scrub.
        context: Namespacing label, e.g. ``"ssh/prod-server/v1"``.
        key_type: Requested key type.
        salt: Salt override. When given it replaces ``config.salt``.
        config: Salt and Argon2id costs; defaults to ``DETKEY_SALT`` or the
            compiled-in salt with the default costs.

    Returns:
        A ``cryptography`` private key object.

    Raises:
        EmptyPassword: If ``password`` is empty.
        EmptyContext: If ``context`` is empty.
        UnsupportedKeyType: If ``key_type`` is unknown.
        StretchFailure, ExpansionReadFailure, GenerationError: On internal
            failures; never retried.
    """
    if not password:
        raise EmptyPassword()
    if not context:
        raise EmptyContext()
    kt = KeyType.parse(key_type)
    if config is None:
        config = DerivationConfig(salt=load_salt(salt))
    elif salt:
        config = DerivationConfig(**{**config.model_dump(), "salt": load_salt(salt)})

    if isinstance(password, str):
        password = password.encode("utf-8")

    logger.info(
        "Deriving %s key (context length %d)", kt.value, len(context),
    )
    master_seed = None
    try:
        master_seed = stretch(password, config.salt, config)
        with expand(master_seed, config.salt, context) as stream:
            scrub(master_seed)
            return generate(kt, stream)
    finally:
        scrub(master_seed)
