"""Tests for password hashing and token generation."""

from todo_backend.core.security import BcryptPasswordHasher, generate_session_token


def test_hash_verifies_and_hides_plaintext(hasher) -> None:
    hashed = hasher.hash("correct1")

    assert hashed != "correct1"
    assert hasher.verify("correct1", hashed) is True
    assert hasher.verify("wrong", hashed) is False


def test_hashes_are_salted(hasher) -> None:
    assert hasher.hash("same-password") != hasher.hash("same-password")


def test_malformed_hash_never_verifies(hasher) -> None:
    assert hasher.verify("correct1", "not-a-bcrypt-hash") is False


def test_default_rounds_from_settings() -> None:
    assert BcryptPasswordHasher()._rounds == 12


def test_session_tokens_are_url_safe() -> None:
    token = generate_session_token()

    assert len(token) >= 32
    assert set(token) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")
    assert generate_session_token() != token
