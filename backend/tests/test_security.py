"""
Tests for password hashing, access tokens and verification tokens.
"""
from datetime import timedelta

from jose import jwt

from flockr.core.config import settings
from flockr.core.security import (
    create_access_token,
    decode_token,
    generate_verification_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from flockr.core.utils import is_valid_id, new_id


class TestPasswordHashing:
    """bcrypt hashing and verification."""

    def test_hash_is_not_plaintext(self):
        hashed = get_password_hash("secret123", rounds=4)
        assert hashed != "secret123"
        assert hashed.startswith("$2")

    def test_verify_roundtrip(self):
        hashed = get_password_hash("secret123", rounds=4)
        assert verify_password("secret123", hashed)
        assert not verify_password("secret124", hashed)

    def test_same_password_gets_distinct_salts(self):
        assert get_password_hash("secret123", rounds=4) != get_password_hash("secret123", rounds=4)

    def test_malformed_hash_is_rejected_not_raised(self):
        assert verify_password("secret123", "not-a-bcrypt-hash") is False

    def test_cost_factor_is_applied(self):
        hashed = get_password_hash("secret123", rounds=5)
        assert hashed.split("$")[2] == "05"


class TestAccessTokens:
    """JWT issue and decode."""

    def test_claims_roundtrip(self):
        token = create_access_token({"sub": "abc", "id": "abc", "email": "a@b.com", "role": "seller"})
        payload = decode_token(token)

        assert payload["id"] == "abc"
        assert payload["email"] == "a@b.com"
        assert payload["role"] == "seller"
        assert payload["type"] == "access"
        assert payload["jti"]
        assert payload["exp"] - payload["iat"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    def test_sub_is_coerced_to_string(self):
        token = create_access_token({"sub": 42})
        assert decode_token(token)["sub"] == "42"

    def test_expired_token_decodes_to_none(self):
        token = create_access_token({"sub": "abc"}, expires_delta=timedelta(seconds=-5))
        assert decode_token(token) is None

    def test_tampered_token_decodes_to_none(self):
        token = create_access_token({"sub": "abc", "role": "buyer"})
        header, payload, signature = token.split(".")
        forged = jwt.encode({"sub": "abc", "role": "seller"}, "some-other-key", algorithm="HS256")
        assert decode_token(f"{header}.{forged.split('.')[1]}.{signature}") is None
        assert decode_token(forged) is None

    def test_each_token_has_unique_jti(self):
        first = decode_token(create_access_token({"sub": "abc"}))
        second = decode_token(create_access_token({"sub": "abc"}))
        assert first["jti"] != second["jti"]


class TestVerificationTokens:

    def test_token_is_256_bits_hex(self):
        token = generate_verification_token()
        assert len(token) == 64
        int(token, 16)

    def test_tokens_are_unique(self):
        assert len({generate_verification_token() for _ in range(50)}) == 50

    def test_digest_is_stable_and_differs_from_token(self):
        token = generate_verification_token()
        assert hash_token(token) == hash_token(token)
        assert hash_token(token) != token
        assert len(hash_token(token)) == 64


class TestIdentifiers:

    def test_new_ids_are_valid(self):
        assert is_valid_id(new_id())

    def test_malformed_ids_are_rejected(self):
        assert not is_valid_id("not-an-id")
        assert not is_valid_id("")
        assert not is_valid_id(None)
        assert not is_valid_id("12345")
