"""
Private key generator for Cryptopack.

Generates an RSA signing key, prints it and writes it to a JSON file.
"""

import argparse
import logging
import sys
from typing import List, Optional

from ..config import ConfigError, CryptopackConfig
from ..signatures import (
    DEFAULT_KEY_SIZE,
    MIN_KEY_SIZE,
    generate_private_key,
    public_key_from_private_key,
    save_key_file,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cryptopack-keygen",
        description="Generate an RSA private key for Cryptopack signatures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write a new key to ./pk.json
  cryptopack-keygen

  # 4096-bit key plus its public key, installed into ~/.cryptopack
  cryptopack-keygen --bits 4096 --public pub.json --install
        """
    )

    parser.add_argument('--output', '-o', type=str, default='./pk.json',
                        help='Private key output file (default: ./pk.json)')
    parser.add_argument('--bits', type=int, default=DEFAULT_KEY_SIZE,
                        help=f'RSA key size in bits (default: {DEFAULT_KEY_SIZE})')
    parser.add_argument('--public', type=str, metavar='PATH',
                        help='Also write the public key to PATH')
    parser.add_argument('--install', action='store_true',
                        help='Store the key in the configuration directory')
    parser.add_argument('--config-dir', type=str,
                        help='Configuration directory (default: ~/.cryptopack)')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Do not print the private key')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the keygen CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.bits < MIN_KEY_SIZE:
        print(f"Error: key size must be at least {MIN_KEY_SIZE} bits", file=sys.stderr)
        return 1

    private_key = generate_private_key(args.bits)

    if not args.quiet:
        print(private_key)

    try:
        save_key_file(args.output, private_key, private=True)
        print(f"Private key saved to: {args.output}", file=sys.stderr)

        if args.public:
            save_key_file(args.public, public_key_from_private_key(private_key),
                          private=False)
            print(f"Public key saved to: {args.public}", file=sys.stderr)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.install:
        try:
            config = CryptopackConfig(args.config_dir)
            config.set_private_key(private_key)
            print(f"Installed into: {config.config_dir}", file=sys.stderr)
        except (ConfigError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
