"""
Tests for password hashing and access tokens.
"""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from sozluk.utils import (
    TokenPayload,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

SECRET = "test-secret-key-with-enough-length-for-hs256"


class TestPasswordHashing:
    """Test bcrypt hashing helpers"""

    def test_hash_and_verify(self):
        """Test a hashed password verifies and is never stored in clear"""
        hashed = hash_password("s3cret", rounds=4)

        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed)
        assert not verify_password("wrong", hashed)

    def test_hash_is_salted(self):
        """Test hashing the same password twice yields different hashes"""
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_empty_password_rejected(self):
        """Test an empty password cannot be hashed"""
        with pytest.raises(ValueError):
            hash_password("")

    def test_invalid_hash_does_not_verify(self):
        """Test a malformed stored hash is treated as a mismatch"""
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestAccessToken:
    """Test JWT creation and decoding"""

    @pytest.fixture
    def claims(self):
        return {
            "sub": "5f0c7c1e-1111-2222-3333-444455556666",
            "email": "ada@sozluk.test",
            "name": "ada",
            "given_name": "Ada",
            "family_name": None,
        }

    def test_round_trip(self, claims):
        """Test a created token decodes to the same claims"""
        token = create_access_token(claims, SECRET)

        payload = decode_access_token(token, SECRET)

        assert isinstance(payload, TokenPayload)
        assert payload.sub == claims["sub"]
        assert payload.email == claims["email"]
        assert payload.given_name == "Ada"
        assert payload.family_name is None

    def test_none_claims_are_omitted(self, claims):
        """Test empty optional claims are not encoded"""
        raw = jwt.decode(create_access_token(claims, SECRET), SECRET, algorithms=["HS256"])

        assert "family_name" not in raw
        assert raw["name"] == "ada"

    def test_default_expiry_is_ten_days(self, claims):
        """Test tokens expire ten days after issue by default"""
        payload = decode_access_token(create_access_token(claims, SECRET), SECRET)

        assert payload.exp - payload.iat == timedelta(days=10)
        assert payload.exp > datetime.now(UTC) + timedelta(days=9)

    def test_wrong_secret_rejected(self, claims):
        """Test a token signed with another key is rejected"""
        token = create_access_token(claims, SECRET)

        with pytest.raises(jwt.InvalidSignatureError):
            decode_access_token(token, SECRET + "-other")

    def test_expired_token_rejected(self, claims):
        """Test an expired token is rejected"""
        token = create_access_token(claims, SECRET, expires_in=timedelta(seconds=-5))

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_access_token(token, SECRET)
