"""Unit tests for admin password hashing"""
from teachhub.services.bootstrap import PASSWORD_HASH_METHOD, hash_password, verify_password


def test_hash_uses_configured_method():
    encoded = hash_password("s3cret")
    assert encoded.startswith(f"{PASSWORD_HASH_METHOD}:")
    assert "s3cret" not in encoded


def test_random_salt_per_hash():
    assert hash_password("same") != hash_password("same")


def test_verify_roundtrip():
    encoded = hash_password("correct horse")
    assert verify_password("correct horse", encoded)
    assert not verify_password("wrong horse", encoded)


def test_verify_rejects_malformed_hashes():
    assert not verify_password("x", None)
    assert not verify_password("x", "")
    assert not verify_password("x", "not-a-hash")
    assert not verify_password("x", "md5$salt$digest")
