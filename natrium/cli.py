#!/usr/bin/env python3
"""
natrium - command-line interface

Usage:
    natrium keygen          - Generate the app key file
    natrium public-key      - Show the derived public keys
    natrium encrypt         - Encrypt with the app key
    natrium decrypt         - Decrypt with the app key
    natrium seal            - Anonymously encrypt to a public key
    natrium unseal          - Open a message sealed to our public key

Binary output is prefixed base64url (base64url:...). Message arguments
default to stdin.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Config
from .crypto.algorithms import parse_asymmetric, parse_symmetric
from .crypto.encoding import decode, encode
from .crypto.errors import CryptoError
from .crypto.keys import EncryptionPublicKey
from .facade import Natrium
from .keychain import load_app_key


logger = logging.getLogger("natrium")


def _read_message(value: Optional[str]) -> bytes:
    if value is None or value == "-":
        return sys.stdin.buffer.read()
    return value.encode("utf-8")


def _read_text(value: Optional[str]) -> str:
    if value is None or value == "-":
        return sys.stdin.read().strip()
    return value.strip()


def _write_plaintext(data: bytes) -> None:
    sys.stdout.flush()
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


class NatriumCtl:
    """natrium CLI application."""

    def __init__(self, config: Config):
        """Initialize CLI with loaded configuration."""
        self.config = config

    def _natrium(self) -> Natrium:
        return Natrium.from_config(self.config)

    def keygen(self, force: bool = False) -> int:
        """Generate the app key file."""
        key_file = self.config.keys.key_file
        if key_file.exists():
            if not force:
                print(f"Error: key file already exists: {key_file}", file=sys.stderr)
                return 1
            key_file.unlink()

        load_app_key(key_file, create_if_missing=True)
        print(f"Wrote app key: {key_file}")
        return self.public_key()

    def public_key(self) -> int:
        """Show the derived encryption and signature public keys."""
        natrium = self._natrium()
        print(f"encryption: {natrium.keys.encryption().public_key.export(prefix=True)}")
        print(f"signature:  {natrium.keys.signature().public_key.export(prefix=True)}")
        return 0

    def encrypt(self, message: Optional[str], context: Optional[str], aad: str) -> int:
        """Encrypt with the app key (or the key derived for context)."""
        natrium = self._natrium()
        encrypted = natrium.encrypt(_read_message(message), context, aad.encode("utf-8"))
        print(encode(bytes(encrypted), prefix=True))
        return 0

    def decrypt(self, ciphertext: Optional[str], context: Optional[str], aad: str) -> int:
        """Decrypt output of encrypt."""
        natrium = self._natrium()
        plaintext = natrium.decrypt(decode(_read_text(ciphertext)), context, aad.encode("utf-8"))
        if plaintext is None:
            print("Error: decryption failed", file=sys.stderr)
            return 1
        _write_plaintext(plaintext)
        return 0

    def seal(self, recipient: str, message: Optional[str], aad: str) -> int:
        """Seal a message to a recipient's encryption public key."""
        natrium = self._natrium()
        sealed = natrium.seal(EncryptionPublicKey.import_(recipient), _read_message(message), aad.encode("utf-8"))
        print(encode(bytes(sealed), prefix=True))
        return 0

    def unseal(self, ciphertext: Optional[str], aad: str) -> int:
        """Open a message sealed to our encryption public key."""
        natrium = self._natrium()
        plaintext = natrium.unseal(decode(_read_text(ciphertext)), aad.encode("utf-8"))
        if plaintext is None:
            print("Error: unseal failed", file=sys.stderr)
            return 1
        _write_plaintext(plaintext)
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="natrium",
        description="Natrium authenticated encryption CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  natrium keygen
  natrium public-key
  echo -n "hello" | natrium encrypt --context notes
  natrium decrypt --context notes 'base64url...'
  natrium seal 'recipient-public-key' "hello"
  natrium unseal 'base64url...'
""",
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Configuration file path",
    )
    parser.add_argument(
        "-k", "--key-file",
        type=Path,
        default=None,
        help="App key file (overrides config)",
    )
    parser.add_argument(
        "--symmetric",
        default=None,
        help="Symmetric algorithm (overrides config)",
    )
    parser.add_argument(
        "--asymmetric",
        default=None,
        help="Asymmetric algorithm (overrides config)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"natrium {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command")

    keygen_parser = subparsers.add_parser("keygen", help="Generate the app key file")
    keygen_parser.add_argument("--force", action="store_true", help="Overwrite an existing key")

    subparsers.add_parser("public-key", help="Show derived public keys")

    for name, help_text in (("encrypt", "Encrypt a message"), ("decrypt", "Decrypt a message")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("message", nargs="?", help="Message (default: stdin)")
        sub.add_argument("--context", default=None, help="Key derivation context")
        sub.add_argument("--aad", default="", help="Additional authenticated data")

    seal_parser = subparsers.add_parser("seal", help="Seal a message to a public key")
    seal_parser.add_argument("recipient", help="Recipient encryption public key")
    seal_parser.add_argument("message", nargs="?", help="Message (default: stdin)")
    seal_parser.add_argument("--aad", default="", help="Additional authenticated data")

    unseal_parser = subparsers.add_parser("unseal", help="Open a sealed message")
    unseal_parser.add_argument("message", nargs="?", help="Sealed message (default: stdin)")
    unseal_parser.add_argument("--aad", default="", help="Additional authenticated data")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = Config.load(args.config)
        if args.key_file is not None:
            config.keys.key_file = args.key_file
        if args.symmetric is not None:
            config.crypto.symmetric = parse_symmetric(args.symmetric)
        if args.asymmetric is not None:
            config.crypto.asymmetric = parse_asymmetric(args.asymmetric)
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    ctl = NatriumCtl(config)

    try:
        if args.command == "keygen":
            return ctl.keygen(args.force)
        elif args.command == "public-key":
            return ctl.public_key()
        elif args.command == "encrypt":
            return ctl.encrypt(args.message, args.context, args.aad)
        elif args.command == "decrypt":
            return ctl.decrypt(args.message, args.context, args.aad)
        elif args.command == "seal":
            return ctl.seal(args.recipient, args.message, args.aad)
        elif args.command == "unseal":
            return ctl.unseal(args.message, args.aad)
    except FileNotFoundError as e:
        print(f"Error: {e} (run 'natrium keygen' first)", file=sys.stderr)
        return 1
    except CryptoError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
