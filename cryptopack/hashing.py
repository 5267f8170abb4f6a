"""
Hex digests of bytes or text.

Text is hashed through the canonical text encoding, so a digest of a string
matches the digest of the bytes a signature over that string covers.
"""

import hashlib
import warnings
from typing import Union

from .crypto.utils import as_bytes


def sha256_hex(data: Union[bytes, str]) -> str:
    """Get the lowercase hex SHA-256 of the given data."""
    return hashlib.sha256(as_bytes(data)).hexdigest()


def sha256_digest(data: Union[bytes, str]) -> bytes:
    """Get the raw SHA-256 of the given data."""
    return hashlib.sha256(as_bytes(data)).digest()


def sha1_hex(data: Union[bytes, str]) -> str:
    """
    Get the lowercase hex SHA-1 of the given data.

    SHA-1 is broken by today's standards; kept only for legacy digests.
    """
    warnings.warn(
        "SHA-1 is broken by today's standards and should not be used",
        DeprecationWarning,
        stacklevel=2,
    )
    return hashlib.sha1(as_bytes(data)).hexdigest()
