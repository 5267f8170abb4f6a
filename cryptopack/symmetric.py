"""
Password-based symmetric text encryption for Cryptopack.

Text is encrypted with AES-128-CBC and PKCS7 padding under a key derived from
a password. The output carries its own IV:

    hex(iv);hex(ciphertext)

The key derivation salt is fixed and public, so the password is the only
secret input. This keeps ciphertexts interoperable with earlier releases;
every call still draws a fresh IV.
"""

import logging

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .crypto.kdf import derive_key
from .crypto.utils import (
    SecureBytes,
    format_hex,
    generate_random_bytes,
    parse_hex,
    utf8_bytes,
)
from .signatures import PublicKey


logger = logging.getLogger(__name__)

KDF_ITERATIONS = 100
KEY_SIZE_BITS = 128
IV_LENGTH = 16
BLOCK_SIZE_BITS = algorithms.AES.block_size
FIXED_SALT = bytes([132, 199, 135, 54, 237, 124, 78, 10, 42, 169, 237, 35, 102, 186, 74, 230])
FIELD_SEPARATOR = ";"


class DecryptionError(Exception):
    """Raised when a ciphertext cannot be decrypted with the given password."""
    pass


def _derive_symmetric_key(password: str) -> SecureBytes:
    return SecureBytes(derive_key(
        utf8_bytes(password), FIXED_SALT, KDF_ITERATIONS, KEY_SIZE_BITS // 8
    ))


def encrypt(plaintext: str, password: str) -> str:
    """
    Encrypt text with a password.

    Args:
        plaintext: Text to encrypt
        password: Password from which the key is derived

    Returns:
        `hex(iv);hex(ciphertext)`
    """
    iv = generate_random_bytes(IV_LENGTH)

    padder = padding.PKCS7(BLOCK_SIZE_BITS).padder()
    padded = padder.update(utf8_bytes(plaintext)) + padder.finalize()

    with _derive_symmetric_key(password) as key:
        encryptor = Cipher(algorithms.AES(key.buffer), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()

    logger.debug("Encrypted %d bytes of text", len(padded))
    return format_hex(iv) + FIELD_SEPARATOR + format_hex(ciphertext)


def decrypt(encoded: str, password: str) -> str:
    """
    Decrypt text produced by encrypt.

    Args:
        encoded: `hex(iv);hex(ciphertext)`
        password: Password used to encrypt

    Returns:
        Original text

    Raises:
        DecryptionError: If the input is malformed, the password is wrong or
            the ciphertext was corrupted
    """
    if not isinstance(encoded, str):
        raise DecryptionError("Encrypted text must be a string")

    fields = encoded.split(FIELD_SEPARATOR)
    if len(fields) != 2:
        raise DecryptionError(
            f"Expected 2 fields separated by '{FIELD_SEPARATOR}', got {len(fields)}"
        )

    try:
        iv = parse_hex(fields[0])
        ciphertext = parse_hex(fields[1])
    except ValueError as e:
        raise DecryptionError(f"Malformed encrypted text: {e}") from e

    if len(iv) != IV_LENGTH:
        raise DecryptionError(f"IV must be {IV_LENGTH} bytes, got {len(iv)}")
    block_bytes = BLOCK_SIZE_BITS // 8
    if not ciphertext or len(ciphertext) % block_bytes:
        raise DecryptionError("Ciphertext length is not a multiple of the block size")

    with _derive_symmetric_key(password) as key:
        decryptor = Cipher(algorithms.AES(key.buffer), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()

    try:
        unpadder = padding.PKCS7(BLOCK_SIZE_BITS).unpadder()
        raw = unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        logger.debug("Decryption failed: invalid padding")
        raise DecryptionError("Invalid padding: wrong password or corrupted data") from e

    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError as e:
        logger.debug("Decryption failed: plaintext is not UTF-8")
        raise DecryptionError("Decrypted data is not valid text: wrong password") from e


def password_from_public_key(public_key: str) -> str:
    """
    Derive a symmetric password from a serialized public key.

    Returns:
        `hex(modulus);hex(exponent)`
    """
    key = PublicKey.from_json(public_key)
    return format_hex(key.modulus) + FIELD_SEPARATOR + format_hex(key.exponent)
