"""
Cryptographic utilities for secure memory operations, random number generation
and text encoding.

This module provides the byte and text helpers shared by the password,
signature and symmetric components of Cryptopack.
"""

import re
import secrets
from typing import Union


# Canonical string -> bytes conversion for password storage and signatures.
# Two bytes per UTF-16 code unit, little endian, lone surrogates kept as-is.
TEXT_ENCODING = "utf-16-le"
TEXT_ERRORS = "surrogatepass"

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def secure_zero(data: Union[bytes, bytearray, memoryview]) -> None:
    """
    Securely zero out sensitive data in memory.

    Args:
        data: Bytes, bytearray, or memoryview to zero out
    """
    if isinstance(data, (bytearray, memoryview)):
        for i in range(len(data)):
            data[i] = 0
    elif isinstance(data, bytes):
        # Immutable, nothing we can overwrite. Use bytearray for key material.
        pass
    else:
        raise TypeError("Data must be bytes, bytearray, or memoryview")


def generate_random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Args:
        length: Number of random bytes to generate

    Returns:
        Cryptographically secure random bytes
    """
    return secrets.token_bytes(length)


def constant_time_compare(a: bytes, b: bytes) -> bool:
    """
    Compare two byte sequences in constant time.

    Args:
        a: First byte sequence
        b: Second byte sequence

    Returns:
        True if sequences are equal, False otherwise
    """
    return secrets.compare_digest(a, b)


def bytes_to_int(data: bytes) -> int:
    """
    Convert bytes to integer (big-endian).

    Args:
        data: Bytes to convert

    Returns:
        Integer representation
    """
    return int.from_bytes(data, byteorder='big')


def int_to_bytes(value: int, length: int) -> bytes:
    """
    Convert integer to bytes (big-endian).

    Args:
        value: Integer to convert
        length: Number of bytes in output

    Returns:
        Bytes representation
    """
    return value.to_bytes(length, byteorder='big')


def bytes_from_string(text: str) -> bytes:
    """
    Convert text to bytes using the canonical text encoding.

    Args:
        text: String to convert (None is treated as empty)

    Returns:
        Two bytes per UTF-16 code unit
    """
    if text is None:
        return b""
    return text.encode(TEXT_ENCODING, TEXT_ERRORS)


def string_from_bytes(data: bytes) -> str:
    """
    Inverse of bytes_from_string.

    Raises:
        ValueError: If data has an odd length
    """
    if len(data) % 2:
        raise ValueError("Encoded text must have an even number of bytes")
    return data.decode(TEXT_ENCODING, TEXT_ERRORS)


def utf8_bytes(text: str) -> bytes:
    """
    Encode text as UTF-8, replacing lone surrogates with U+FFFD.

    Matches the replacement behaviour of UTF-8 encoders that operate on
    UTF-16 strings, so unpaired surrogates never raise.
    """
    cleaned = text.encode(TEXT_ENCODING, TEXT_ERRORS).decode(TEXT_ENCODING, "replace")
    return cleaned.encode("utf-8")


def as_bytes(data: Union[bytes, bytearray, str]) -> bytes:
    """Return data as bytes, encoding strings with the canonical text encoding."""
    if isinstance(data, str):
        return bytes_from_string(data)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"Expected bytes or str, got {type(data).__name__}")


def format_hex(data: bytes, separator: str = "") -> str:
    """
    Format bytes as a lowercase hexadecimal string.

    Args:
        data: Bytes to format
        separator: Separator between hex bytes

    Returns:
        Formatted hex string
    """
    return separator.join(f"{b:02x}" for b in data)


def is_hex(text: str) -> bool:
    """Check that text is an even-length run of hex digits."""
    return (
        isinstance(text, str)
        and len(text) % 2 == 0
        and _HEX_RE.fullmatch(text) is not None
    )


def parse_hex(hex_string: str) -> bytes:
    """
    Parse a hexadecimal string to bytes.

    Unlike bytes.fromhex, whitespace and separators are rejected.

    Args:
        hex_string: Even-length string of hex digits

    Returns:
        Parsed bytes

    Raises:
        ValueError: If the string has an odd length or non-hex characters
    """
    if not is_hex(hex_string):
        raise ValueError("Hex string must contain an even number of hex digits")
    return bytes.fromhex(hex_string)


class SecureBytes:
    """
    A wrapper for sensitive byte data that attempts secure cleanup.

    Used as a context manager around derived key material so the buffer is
    zeroed on every exit path.
    """

    def __init__(self, data: bytes):
        """
        Initialize with sensitive byte data.

        Args:
            data: Sensitive bytes to protect
        """
        self._data = bytearray(data)

    @property
    def data(self) -> bytes:
        """Get the protected data as bytes."""
        return bytes(self._data)

    @property
    def buffer(self) -> bytearray:
        """The protected bytearray itself, zeroed by clear()."""
        return self._data

    def clear(self) -> None:
        """Securely clear the protected data."""
        secure_zero(self._data)

    def is_cleared(self) -> bool:
        """Check whether every byte has been zeroed."""
        return not any(self._data)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.clear()

    def __del__(self):
        if hasattr(self, '_data'):
            self.clear()

    def __len__(self) -> int:
        return len(self._data)
