#!/usr/bin/env python3
"""
Soteria Command Line Interface

Encrypts and decrypts files with the Soteria authenticated encryption
engine.

Usage:
    soteria encrypt --input FILE --output FILE (--key-file FILE | --key-env VAR) [OPTIONS]
    soteria decrypt --input FILE --output FILE (--key-file FILE | --key-env VAR) [OPTIONS]
    soteria --version
    soteria --help
"""

import sys
import os
import argparse
import logging
from pathlib import Path
from typing import Optional

# Add source root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'python-core'))

from soteria import __version__
from soteria.crypto import AuthenticatedCipher, CipherSpec, CryptoError
from soteria.integration import Encryptor, StaticSecretProvider


class SoteriaCLI:
    """Main CLI application for Soteria."""

    def run(self, args: list) -> int:
        """Run the CLI with given arguments."""
        parser = self.create_parser()
        parsed = parser.parse_args(args)

        logging.basicConfig(
            level=logging.DEBUG if getattr(parsed, 'verbose', False) else logging.WARNING,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        if hasattr(parsed, 'func'):
            try:
                return parsed.func(parsed)
            except (CryptoError, OSError) as e:
                print(f"Error: {e}", file=sys.stderr)
                return 1
        else:
            parser.print_help()
            return 0

    def create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="soteria",
            description="Soteria authenticated encryption CLI",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
    soteria encrypt --input secret.txt --output secret.enc --key-file key.bin
    soteria decrypt --input secret.enc --output secret.txt --key-file key.bin
    soteria encrypt -i notes.txt -o notes.b64 --key-env SOTERIA_KEY --base64
            """
        )

        parser.add_argument(
            '--version',
            action='version',
            version=f'Soteria v{__version__}'
        )

        subparsers = parser.add_subparsers(title='commands', dest='command')

        self.add_encrypt_command(subparsers)
        self.add_decrypt_command(subparsers)

        return parser

    def _add_common_arguments(self, cmd) -> None:
        cmd.add_argument('--input', '-i', required=True, help='Input file')
        cmd.add_argument('--output', '-o', required=True, help='Output file')
        key_group = cmd.add_mutually_exclusive_group(required=True)
        key_group.add_argument('--key-file', '-k', help='File holding the raw secret bytes')
        key_group.add_argument('--key-env', help='Environment variable holding the secret')
        cmd.add_argument('--cipher', '-c', default=CipherSpec.AES_128_CBC.cipher_name,
                         choices=[spec.cipher_name for spec in CipherSpec],
                         help='Cipher variant')
        cmd.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')

    def add_encrypt_command(self, subparsers):
        """Add encrypt command to parser."""
        cmd = subparsers.add_parser('encrypt', help='Encrypt a file')
        self._add_common_arguments(cmd)
        cmd.add_argument('--base64', '-b', action='store_true',
                         help='Write the envelope as base64 text')
        cmd.set_defaults(func=self.handle_encrypt)

    def add_decrypt_command(self, subparsers):
        """Add decrypt command to parser."""
        cmd = subparsers.add_parser('decrypt', help='Decrypt a file')
        self._add_common_arguments(cmd)
        cmd.add_argument('--base64', '-b', action='store_true',
                         help='Input envelope is base64 text')
        cmd.set_defaults(func=self.handle_decrypt)

    def _load_secret(self, args) -> bytes:
        """Read the secret from a key file (raw bytes) or an environment variable."""
        if args.key_file:
            return Path(args.key_file).read_bytes()
        value: Optional[str] = os.environ.get(args.key_env)
        if not value:
            raise CryptoError(f"Environment variable {args.key_env} is not set", code=1002)
        return value.encode('utf-8')

    def _build_encryptor(self, args) -> Encryptor:
        engine = AuthenticatedCipher(cipher=args.cipher)
        return Encryptor(engine, StaticSecretProvider(self._load_secret(args)),
                         base64_transport=args.base64)

    def handle_encrypt(self, args) -> int:
        """Handle encrypt command."""
        encryptor = self._build_encryptor(args)
        data = Path(args.input).read_bytes()
        result = encryptor.encrypt(data)
        if isinstance(result, str):
            result = result.encode('ascii')
        Path(args.output).write_bytes(result)
        print(f"Encrypted {args.input} -> {args.output}")
        return 0

    def handle_decrypt(self, args) -> int:
        """Handle decrypt command."""
        encryptor = self._build_encryptor(args)
        data = Path(args.input).read_bytes()
        plaintext = encryptor.decrypt(data)
        Path(args.output).write_bytes(plaintext)
        print(f"Decrypted {args.input} -> {args.output}")
        return 0


def main():
    """Main entry point."""
    cli = SoteriaCLI()
    sys.exit(cli.run(sys.argv[1:]))


if __name__ == "__main__":
    main()
