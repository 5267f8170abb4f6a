"""
Irreversible password storage for Cryptopack.

A StoredPassword holds everything needed to validate a password and nothing
that recovers it, so the serialized form can be stored without further
encryption:

    iterations;hex(salt);hex(key)

The key is PBKDF2(password, salt, iterations) and the salt is unique to each
stored password, so storing the same password twice gives two different
strings.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .crypto.kdf import derive_key
from .crypto.utils import (
    bytes_from_string,
    constant_time_compare,
    format_hex,
    generate_random_bytes,
    parse_hex,
)


logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 10000
SALT_LENGTH = 32
KEY_LENGTH = 32
FIELD_SEPARATOR = ";"

MAX_ITERATIONS = 2**31 - 1

# Canonical decimal: no sign, no leading zeros.
_ITERATIONS_RE = re.compile(r"0|[1-9][0-9]*")


class MalformedCredentialError(ValueError):
    """Raised when a stored password string cannot be parsed."""
    pass


def _hash_password(plaintext: str, salt: bytes, iterations: int) -> bytes:
    return derive_key(bytes_from_string(plaintext), salt, iterations, KEY_LENGTH)


@dataclass(frozen=True)
class StoredPassword:
    """Data that validates a password but cannot reveal it."""
    iterations: int
    salt: bytes
    key: bytes

    @classmethod
    def from_plain_text(cls, plaintext: str,
                        iterations: int = DEFAULT_ITERATIONS) -> 'StoredPassword':
        """
        Create a new stored password from a plain text password.

        Args:
            plaintext: The password (an empty string is accepted)
            iterations: PBKDF2 rounds

        Returns:
            StoredPassword with a fresh random salt
        """
        salt = generate_random_bytes(SALT_LENGTH)
        key = _hash_password(plaintext, salt, iterations)
        logger.debug("Stored new password with %d iterations", iterations)
        return cls(iterations, salt, key)

    @classmethod
    def from_string(cls, text: str) -> 'StoredPassword':
        """
        Parse an `iterations;hex(salt);hex(key)` string.

        Raises:
            MalformedCredentialError: If the string is not a stored password
        """
        if not isinstance(text, str):
            raise MalformedCredentialError("Stored password must be a string")

        fields = text.split(FIELD_SEPARATOR)
        if len(fields) != 3:
            raise MalformedCredentialError(
                f"Expected 3 fields separated by '{FIELD_SEPARATOR}', got {len(fields)}"
            )

        iterations_field, salt_field, key_field = fields
        if _ITERATIONS_RE.fullmatch(iterations_field) is None:
            raise MalformedCredentialError("Iteration count is not a non-negative integer")
        iterations = int(iterations_field)
        if iterations > MAX_ITERATIONS:
            raise MalformedCredentialError(
                f"Iteration count exceeds {MAX_ITERATIONS}"
            )

        try:
            salt = parse_hex(salt_field)
        except ValueError as e:
            raise MalformedCredentialError(f"Invalid salt: {e}") from e
        try:
            key = parse_hex(key_field)
        except ValueError as e:
            raise MalformedCredentialError(f"Invalid key: {e}") from e

        return cls(iterations, salt, key)

    @classmethod
    def try_from_string(cls, text: str) -> Optional['StoredPassword']:
        """Like from_string, but returns None for malformed input."""
        try:
            return cls.from_string(text)
        except MalformedCredentialError as e:
            logger.debug("Rejected stored password string: %s", e)
            return None

    def check(self, plaintext: str) -> bool:
        """
        Check if a given password is correct.

        Args:
            plaintext: The password to check

        Returns:
            True if the password derives the stored key
        """
        if self.iterations < 1:
            return False
        candidate = _hash_password(plaintext, self.salt, self.iterations)
        return constant_time_compare(candidate, self.key)

    def to_string(self) -> str:
        """Return `iterations;hex(salt);hex(key)`."""
        return FIELD_SEPARATOR.join(
            (str(self.iterations), format_hex(self.salt), format_hex(self.key))
        )

    def __str__(self) -> str:
        return self.to_string()


def store_from_plain_text(plaintext: str,
                          iterations: int = DEFAULT_ITERATIONS) -> StoredPassword:
    """Create a StoredPassword for plaintext."""
    return StoredPassword.from_plain_text(plaintext, iterations)


def serialize(stored: StoredPassword) -> str:
    """Serialize a StoredPassword for persistent storage."""
    return stored.to_string()


def try_deserialize(text: str) -> Optional[StoredPassword]:
    """Parse a stored password string, returning None if it is malformed."""
    return StoredPassword.try_from_string(text)


def check(stored: StoredPassword, plaintext: str) -> bool:
    """Check plaintext against a StoredPassword."""
    return stored.check(plaintext)
