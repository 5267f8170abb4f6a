"""
Password-Based Key Derivation for Cryptopack.

Implements PBKDF2 (RFC 8018) on top of the cryptography package. Both the
password store and the symmetric codec derive their keys here:
- Stored passwords use a random per-password salt and many iterations
- The symmetric codec uses a fixed salt and a low iteration count

The PRF is HMAC-SHA1 by default, which keeps derived keys bit-compatible
with data written by earlier Cryptopack releases.
"""

import logging
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


logger = logging.getLogger(__name__)


class KeyDerivationError(Exception):
    """Raised when key derivation fails."""
    pass


DEFAULT_PRF = hashes.SHA1
KEY_LENGTH = 32  # 256-bit keys


def derive_key(
    password: bytes,
    salt: bytes,
    iterations: int,
    length: int = KEY_LENGTH,
    algorithm: Optional[hashes.HashAlgorithm] = None,
) -> bytes:
    """
    Derive key material from a password.

    Same inputs always produce the same output.

    Args:
        password: Password bytes (may be empty)
        salt: Salt bytes
        iterations: Number of PBKDF2 rounds (must be positive)
        length: Number of output bytes
        algorithm: Hash used by the HMAC PRF (defaults to SHA1)

    Returns:
        `length` bytes of derived key material

    Raises:
        KeyDerivationError: If parameters are invalid or derivation fails
    """
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise KeyDerivationError("Iteration count must be a positive integer")
    if length < 1:
        raise KeyDerivationError("Key length must be positive")

    if algorithm is None:
        algorithm = DEFAULT_PRF()

    try:
        kdf = PBKDF2HMAC(
            algorithm=algorithm,
            length=length,
            salt=bytes(salt),
            iterations=iterations,
        )
        key = kdf.derive(bytes(password))
    except Exception as e:
        raise KeyDerivationError(f"Key derivation failed: {str(e)}") from e

    logger.debug("Derived %d-byte key with %d PBKDF2 iterations", length, iterations)
    return key
