"""Unit tests for auth/passwords.py -- bcrypt hashing and comparison."""

from auth.passwords import DUMMY_HASH, hash_password, verify_password


def test_hash_then_verify_same_password():
    digest = hash_password("Passw0rd!")
    assert digest != "Passw0rd!"
    assert len(digest) > 50
    assert verify_password("Passw0rd!", digest) is True


def test_verify_rejects_different_password():
    digest = hash_password("Passw0rd!")
    for other in ("passw0rd!", "Passw0rd", "Passw0rd!!", "", "Passw0rd! "):
        assert verify_password(other, digest) is False


def test_same_password_gets_distinct_salts():
    assert hash_password("Passw0rd!") != hash_password("Passw0rd!")


def test_explicit_rounds_are_encoded_in_hash():
    assert hash_password("Passw0rd!", rounds=5).startswith("$2b$05$")


def test_malformed_hash_returns_false_instead_of_raising():
    assert verify_password("Passw0rd!", "not-a-bcrypt-hash") is False
    assert verify_password("Passw0rd!", "") is False


def test_dummy_hash_is_a_real_bcrypt_hash():
    assert DUMMY_HASH.startswith("$2b$")
    assert verify_password("anything", DUMMY_HASH) is False


def test_passwords_longer_than_72_bytes_hash_and_verify():
    long_password = "Aa1!" * 30
    digest = hash_password(long_password)
    assert verify_password(long_password, digest) is True
