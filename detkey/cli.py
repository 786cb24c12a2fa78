"""
detkey command line.

Reads the master password from the first line of standard input and writes
the derived key to standard output:

    echo "$MASTER" | detkey --context ssh/prod-server/v1 --pub
    echo "$MASTER" | detkey --context mtls/ca/v1 --type rsa4096 > ca.key

Exit Codes:
    0 = Key derived and written
    1 = Derivation or output failed
"""
import argparse
import logging
import sys
from typing import BinaryIO, Optional, Sequence

from .derivation import DerivationConfig, DerivationError, KeyType, derive_key, scrub
from .output import OutputFormat, resolve_format, serialize_private_key, serialize_public_key
from .version import __version__

logger = logging.getLogger("detkey.cli")


def read_password(stream: BinaryIO) -> bytearray:
    """Read one line from ``stream`` without its line terminator."""
    password = bytearray(stream.readline())
    while password[-1:] in (b"\n", b"\r"):
        password.pop()
    return password


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="detkey",
        description=(
            "Deterministically derive a key pair from a master password "
            "(read from stdin) and a context string."
        ),
    )
    parser.add_argument(
        "--context",
        required=True,
        help="Context for key derivation, e.g. 'ssh/server-a/v1' or 'mtls/ca/v1'",
    )
    parser.add_argument(
        "--type",
        dest="key_type",
        default=KeyType.ED25519.value,
        choices=[kt.value for kt in KeyType],
        help="Key type to derive (default: ed25519)",
    )
    parser.add_argument(
        "--format",
        dest="fmt",
        default=OutputFormat.AUTO.value,
        choices=[f.value for f in OutputFormat],
        help="Output format; auto picks one from the context (default: auto)",
    )
    parser.add_argument(
        "--pub",
        action="store_true",
        help="Output the public key instead of the private key",
    )
    parser.add_argument(
        "--salt",
        default=None,
        help="Salt override (default: $DETKEY_SALT or the built-in salt)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log derivation steps to stderr",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
) -> int:
    """Entry point of the ``detkey`` console script."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer

    password = read_password(stdin)
    try:
        config = DerivationConfig.from_env(args.salt)
        key = derive_key(password, args.context, args.key_type, config=config)
        fmt = resolve_format(args.fmt, args.context, args.key_type)
        if args.pub:
            data = serialize_public_key(key, fmt)
        else:
            data = serialize_private_key(key, fmt)
    except (DerivationError, ValueError) as err:
        logger.error("%s", err)
        return 1
    finally:
        scrub(password)

    stdout.write(data)
    stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
