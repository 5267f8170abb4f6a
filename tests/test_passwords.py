"""
Password storage tests for Cryptopack.

Tests storing, serializing, parsing and checking passwords.
"""

import dataclasses
import re

import pytest

from cryptopack.crypto.kdf import derive_key
from cryptopack.crypto.utils import bytes_from_string
from cryptopack.passwords import (
    DEFAULT_ITERATIONS,
    KEY_LENGTH,
    MAX_ITERATIONS,
    SALT_LENGTH,
    MalformedCredentialError,
    StoredPassword,
    check,
    serialize,
    store_from_plain_text,
    try_deserialize,
)


STORED_RE = re.compile(r"(\d+);([0-9a-f]{64});([0-9a-f]{64})")


class TestStorePassword:
    """Test creating stored passwords."""

    def test_same_password_stored_twice(self):
        """Test that storing the same password twice gives different strings."""
        password = "123"

        st1 = str(StoredPassword.from_plain_text(password))
        st2 = str(StoredPassword.from_plain_text(password))

        assert st1 != st2
        assert StoredPassword.try_from_string(st1).check(password)
        assert StoredPassword.try_from_string(st2).check(password)
        assert not StoredPassword.try_from_string(st2).check("Wrong password")

    def test_field_sizes(self):
        """Test salt and key lengths and default iterations."""
        stored = StoredPassword.from_plain_text("secret")

        assert stored.iterations == DEFAULT_ITERATIONS
        assert len(stored.salt) == SALT_LENGTH
        assert len(stored.key) == KEY_LENGTH

    def test_key_is_kdf_of_password(self):
        """Test that the stored key is PBKDF2 of the UTF-16-LE password."""
        stored = StoredPassword.from_plain_text("secret", iterations=50)

        expected = derive_key(bytes_from_string("secret"), stored.salt, 50, KEY_LENGTH)
        assert stored.key == expected

    def test_empty_password(self):
        """Test that an empty password can be stored and checked."""
        stored = StoredPassword.from_plain_text("")

        assert stored.check("")
        assert not stored.check(" ")

    def test_unicode_password(self):
        """Test passwords outside ASCII."""
        password = "contraseña 世界 🔐"
        stored = StoredPassword.from_plain_text(password)

        assert stored.check(password)
        assert not stored.check("contrasena 世界 🔐")

    def test_custom_iterations(self):
        """Test storing with a non-default iteration count."""
        stored = StoredPassword.from_plain_text("pw", iterations=1000)

        assert stored.iterations == 1000
        assert str(stored).startswith("1000;")
        assert stored.check("pw")

    def test_immutable(self):
        """Test that stored passwords cannot be modified."""
        stored = StoredPassword.from_plain_text("pw", iterations=10)

        with pytest.raises(dataclasses.FrozenInstanceError):
            stored.iterations = 1


class TestSerialization:
    """Test the iterations;salt;key string format."""

    def test_format(self):
        """Test that serialization uses decimal and lowercase hex."""
        stored = StoredPassword.from_plain_text("pw")
        text = stored.to_string()

        match = STORED_RE.fullmatch(text)
        assert match is not None
        assert int(match.group(1)) == DEFAULT_ITERATIONS
        assert bytes.fromhex(match.group(2)) == stored.salt
        assert bytes.fromhex(match.group(3)) == stored.key

    def test_round_trip(self):
        """Test that parsing then serializing gives back the same string."""
        text = str(StoredPassword.from_plain_text("pw"))

        assert serialize(try_deserialize(text)) == text
        assert StoredPassword.from_string(text) == try_deserialize(text)

    def test_round_trip_known_string(self):
        """Test round trip on a fixed string."""
        text = "10000;" + "ab" * 32 + ";" + "0f" * 32

        stored = StoredPassword.from_string(text)
        assert stored.iterations == 10000
        assert stored.salt == b"\xab" * 32
        assert stored.key == b"\x0f" * 32
        assert str(stored) == text

    def test_uppercase_hex_accepted(self):
        """Test that uppercase hex parses and serializes lowercase."""
        stored = StoredPassword.from_string("5;ABCD;EF01")

        assert stored.salt == b"\xab\xcd"
        assert str(stored) == "5;abcd;ef01"

    def test_check_after_parsing(self):
        """Test checking a password against a parsed string."""
        text = str(StoredPassword.from_plain_text("hunter2", iterations=100))
        stored = StoredPassword.from_string(text)

        assert stored.check("hunter2")
        assert not stored.check("hunter3")

    @pytest.mark.parametrize("text", [
        "",
        "10000",
        "10000;abcd",
        "abc;abcd;abcd",
        "-1;abcd;abcd",
        "+5;abcd;abcd",
        " 5;abcd;abcd",
        "1.5;abcd;abcd",
        "10000;zz;abcd",
        "10000;abcd;xyz0",
        "10000;abc;abcd",
        "10000;abcd;abc",
        "10000;ab cd;abcd",
        "10000;abcd;abcd;abcd",
        "010;abcd;abcd",
        "00;abcd;abcd",
        "2147483648;abcd;abcd",
        "99999999999999999999;" + "00" * 32 + ";" + "00" * 32,
    ])
    def test_malformed_strings(self, text):
        """Test that malformed strings give None or MalformedCredentialError."""
        assert StoredPassword.try_from_string(text) is None
        assert try_deserialize(text) is None

        with pytest.raises(MalformedCredentialError):
            StoredPassword.from_string(text)

    def test_largest_iteration_count(self):
        """Test that the largest 32-bit iteration count parses and round-trips."""
        text = f"{MAX_ITERATIONS};abcd;abcd"

        stored = StoredPassword.from_string(text)
        assert stored.iterations == 2**31 - 1
        assert str(stored) == text

    def test_non_string_input(self):
        """Test that non-string input is rejected without raising."""
        assert StoredPassword.try_from_string(None) is None
        assert StoredPassword.try_from_string(b"10;aa;bb") is None

    def test_malformed_error_is_value_error(self):
        """Test that the parse error can be caught as ValueError."""
        with pytest.raises(ValueError):
            StoredPassword.from_string("nope")


class TestCheck:
    """Test password verification."""

    def test_wrong_passwords(self):
        """Test that near misses do not verify."""
        stored = StoredPassword.from_plain_text("Password1", iterations=100)

        for candidate in ["password1", "Password", "Password1 ", "", "Password12"]:
            assert not stored.check(candidate)

    def test_wrong_salt(self):
        """Test that changing the salt breaks verification."""
        stored = StoredPassword.from_plain_text("pw", iterations=100)
        tampered = StoredPassword(stored.iterations, bytes(SALT_LENGTH), stored.key)

        assert not tampered.check("pw")

    def test_wrong_iterations(self):
        """Test that changing the iteration count breaks verification."""
        stored = StoredPassword.from_plain_text("pw", iterations=100)
        tampered = StoredPassword(101, stored.salt, stored.key)

        assert not tampered.check("pw")

    def test_zero_iterations_never_verifies(self):
        """Test that a parsed credential with 0 iterations never matches."""
        stored = StoredPassword.from_string("0;" + "00" * 32 + ";" + "00" * 32)

        assert stored.iterations == 0
        assert not stored.check("")
        assert not stored.check("anything")

    def test_truncated_key(self):
        """Test that a key of the wrong length does not verify."""
        stored = StoredPassword.from_plain_text("pw", iterations=100)
        truncated = StoredPassword(stored.iterations, stored.salt, stored.key[:16])

        assert not truncated.check("pw")


class TestModuleFunctions:
    """Test the module level convenience functions."""

    def test_store_and_check(self):
        """Test store_from_plain_text and check."""
        stored = store_from_plain_text("abc", iterations=100)

        assert check(stored, "abc")
        assert not check(stored, "abd")

    def test_serialize_matches_str(self):
        """Test that serialize is the same as str()."""
        stored = store_from_plain_text("abc", iterations=100)

        assert serialize(stored) == str(stored)
