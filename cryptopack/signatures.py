"""
RSA digital signatures for Cryptopack.

Keys are exchanged as JSON records of big-endian byte arrays, each encoded
as standard base64:

    {"D": ..., "DP": ..., "DQ": ..., "Exponent": ..., "InverseQ": ...,
     "Modulus": ..., "P": ..., "Q": ...}

A public key record carries only Modulus and Exponent. Signatures are RSA
PKCS#1 v1.5 over SHA-256, returned as standard base64 strings.
"""

import base64
import binascii
import json
import logging
import os
from dataclasses import dataclass
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .crypto.utils import as_bytes, bytes_to_int, int_to_bytes


logger = logging.getLogger(__name__)

PUBLIC_EXPONENT = 65537
DEFAULT_KEY_SIZE = 2048
MIN_KEY_SIZE = 2048

PRIVATE_FIELDS = ("D", "DP", "DQ", "Exponent", "InverseQ", "Modulus", "P", "Q")
PUBLIC_FIELDS = ("Modulus", "Exponent")


class KeyFormatError(ValueError):
    """Raised when a serialized key cannot be parsed or is inconsistent."""
    pass


def _encode_field(value: bytes) -> str:
    return base64.b64encode(value).decode('ascii')


def _decode_field(record: dict, name: str) -> bytes:
    value = record.get(name)
    if not isinstance(value, str):
        raise KeyFormatError(f"Key field '{name}' is missing")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError(f"Key field '{name}' is not valid base64") from e


def _load_record(text: Union[str, bytes]) -> dict:
    try:
        record = json.loads(text)
    except (TypeError, ValueError) as e:
        raise KeyFormatError(f"Key is not valid JSON: {e}") from e
    if not isinstance(record, dict):
        raise KeyFormatError("Key must be a JSON object")
    return record


def _minimal_bytes(value: int) -> bytes:
    return int_to_bytes(value, max(1, (value.bit_length() + 7) // 8))


@dataclass(frozen=True)
class PublicKey:
    """RSA public key: modulus and public exponent."""
    modulus: bytes
    exponent: bytes

    def to_dict(self) -> dict:
        values = (self.modulus, self.exponent)
        return {name: _encode_field(value) for name, value in zip(PUBLIC_FIELDS, values)}

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, record: dict) -> 'PublicKey':
        return cls(*(_decode_field(record, name) for name in PUBLIC_FIELDS))

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> 'PublicKey':
        """
        Create from JSON string.

        Private fields, if present, are ignored.
        """
        return cls.from_dict(_load_record(text))

    def to_cryptography(self) -> rsa.RSAPublicKey:
        """Build a cryptography public key object."""
        numbers = rsa.RSAPublicNumbers(
            bytes_to_int(self.exponent), bytes_to_int(self.modulus)
        )
        try:
            return numbers.public_key()
        except ValueError as e:
            raise KeyFormatError(f"Invalid RSA public key: {e}") from e


@dataclass(frozen=True)
class PrivateKey:
    """RSA private key with CRT parameters."""
    d: bytes
    dp: bytes
    dq: bytes
    exponent: bytes
    inverse_q: bytes
    modulus: bytes
    p: bytes
    q: bytes

    def public_key(self) -> PublicKey:
        """Project out the public part of this key."""
        return PublicKey(modulus=self.modulus, exponent=self.exponent)

    def to_dict(self) -> dict:
        values = (self.d, self.dp, self.dq, self.exponent,
                  self.inverse_q, self.modulus, self.p, self.q)
        return {name: _encode_field(value) for name, value in zip(PRIVATE_FIELDS, values)}

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, record: dict) -> 'PrivateKey':
        return cls(*(_decode_field(record, name) for name in PRIVATE_FIELDS))

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> 'PrivateKey':
        """Create from JSON string."""
        return cls.from_dict(_load_record(text))

    @classmethod
    def from_cryptography(cls, key: rsa.RSAPrivateKey) -> 'PrivateKey':
        """
        Export a cryptography private key.

        D is padded to the modulus length and the prime-sized fields to half
        of it, the fixed widths other RSA parameter exporters use.
        """
        numbers = key.private_numbers()
        public = numbers.public_numbers
        modulus_len = (public.n.bit_length() + 7) // 8
        half_len = (modulus_len + 1) // 2
        return cls(
            d=int_to_bytes(numbers.d, modulus_len),
            dp=int_to_bytes(numbers.dmp1, half_len),
            dq=int_to_bytes(numbers.dmq1, half_len),
            exponent=_minimal_bytes(public.e),
            inverse_q=int_to_bytes(numbers.iqmp, half_len),
            modulus=int_to_bytes(public.n, modulus_len),
            p=int_to_bytes(numbers.p, half_len),
            q=int_to_bytes(numbers.q, half_len),
        )

    def to_cryptography(self) -> rsa.RSAPrivateKey:
        """Build a cryptography private key object."""
        numbers = rsa.RSAPrivateNumbers(
            p=bytes_to_int(self.p),
            q=bytes_to_int(self.q),
            d=bytes_to_int(self.d),
            dmp1=bytes_to_int(self.dp),
            dmq1=bytes_to_int(self.dq),
            iqmp=bytes_to_int(self.inverse_q),
            public_numbers=rsa.RSAPublicNumbers(
                bytes_to_int(self.exponent), bytes_to_int(self.modulus)
            ),
        )
        try:
            return numbers.private_key()
        except ValueError as e:
            raise KeyFormatError(f"Invalid RSA private key: {e}") from e


def generate_private_key(key_size: int = DEFAULT_KEY_SIZE) -> str:
    """
    Generate a random RSA private key.

    Args:
        key_size: Modulus size in bits (at least 2048)

    Returns:
        JSON serialized private key
    """
    if key_size < MIN_KEY_SIZE:
        raise ValueError(f"RSA key size must be at least {MIN_KEY_SIZE} bits")

    key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=key_size)
    logger.debug("Generated %d-bit RSA private key", key_size)
    return PrivateKey.from_cryptography(key).to_json()


def public_key_from_private_key(private_key: str) -> str:
    """
    Get the JSON serialized public key of a serialized private key.

    Raises:
        KeyFormatError: If private_key cannot be parsed
    """
    return PrivateKey.from_json(private_key).public_key().to_json()


def sign_data(data: Union[bytes, str], private_key: str) -> str:
    """
    Sign data with a private key.

    Strings are signed through the canonical text encoding; the verifier
    must pass the same string.

    Args:
        data: The data to sign
        private_key: JSON serialized private key

    Returns:
        Base64 encoded PKCS#1 v1.5 SHA-256 signature

    Raises:
        KeyFormatError: If private_key cannot be parsed
    """
    key = PrivateKey.from_json(private_key).to_cryptography()
    signature = key.sign(as_bytes(data), padding.PKCS1v15(), hashes.SHA256())
    return base64.b64encode(signature).decode('ascii')


def verify_data(data: Union[bytes, str], signature: str, public_key: str) -> bool:
    """
    Check that data was signed by the owner of public_key.

    A malformed signature is reported as a failed verification.

    Args:
        data: The data to verify
        signature: Base64 signature from sign_data
        public_key: JSON serialized public (or private) key

    Returns:
        True if the signature is valid for exactly these bytes

    Raises:
        KeyFormatError: If public_key cannot be parsed
    """
    key = PublicKey.from_json(public_key).to_cryptography()
    message = as_bytes(data)

    try:
        signature_bytes = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError, TypeError):
        logger.debug("Signature is not valid base64")
        return False

    try:
        key.verify(signature_bytes, message, padding.PKCS1v15(), hashes.SHA256())
    except (InvalidSignature, ValueError):
        logger.debug("Signature verification failed")
        return False
    return True


def load_key_file(key_file_path: str) -> str:
    """
    Load a serialized key from a file.

    Raises:
        FileNotFoundError: If the key file doesn't exist
        KeyFormatError: If the file is not a key record
    """
    if not os.path.exists(key_file_path):
        raise FileNotFoundError(f"Key file not found: {key_file_path}")

    with open(key_file_path, 'r', encoding='utf-8') as f:
        contents = f.read().strip()

    record = _load_record(contents)
    if all(record.get(name) is not None for name in PRIVATE_FIELDS):
        PrivateKey.from_dict(record)
    else:
        PublicKey.from_dict(record)
    return contents


def save_key_file(key_file_path: str, key: str, private: bool = True) -> None:
    """
    Write a serialized key to a file.

    Private keys get owner-only permissions where the platform supports it.
    """
    with open(key_file_path, 'w', encoding='utf-8') as f:
        f.write(key)

    if private:
        try:
            os.chmod(key_file_path, 0o600)  # rw-------
        except (OSError, AttributeError):
            logger.warning("Could not set restrictive permissions on %s", key_file_path)
