"""
Cryptographic building blocks for Cryptopack.

This module provides the leaf functions shared by the password, signature
and symmetric components:
- Key derivation (PBKDF2)
- Secure random bytes and constant-time comparison
- Hex and text encoding helpers
"""

from .kdf import derive_key, KeyDerivationError
from .utils import (
    generate_random_bytes,
    constant_time_compare,
    bytes_from_string,
    string_from_bytes,
    format_hex,
    parse_hex,
    SecureBytes,
)

__all__ = [
    'derive_key',
    'KeyDerivationError',
    'generate_random_bytes',
    'constant_time_compare',
    'bytes_from_string',
    'string_from_bytes',
    'format_hex',
    'parse_hex',
    'SecureBytes',
]
