"""
Unit Tests for Security Module
Tests for: password hashing, JWT tokens
"""
import pytest
from datetime import datetime, timedelta
from jose import jwt
from fastapi import HTTPException

from app.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    decode_token,
)
from app.core.config import settings
from app.core.exceptions import CredentialHashError


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password_returns_different_value(self):
        """Test that hashing returns a different value than input"""
        password = "2107001"
        hashed = get_password_hash(password)

        assert hashed != password
        assert hashed.startswith("$2")

    def test_hash_password_different_each_time(self):
        """Test that hashing same password returns different hashes"""
        hash1 = get_password_hash("482913")
        hash2 = get_password_hash("482913")

        # Bcrypt generates different salts
        assert hash1 != hash2

    def test_verify_password_correct(self):
        """Test verifying correct password"""
        hashed = get_password_hash("testpassword123")

        assert verify_password("testpassword123", hashed) is True

    def test_verify_password_incorrect(self):
        """Test verifying incorrect password"""
        hashed = get_password_hash("testpassword123")

        assert verify_password("wrongpassword", hashed) is False

    def test_hash_uses_configured_rounds(self):
        """Cost factor in the hash matches BCRYPT_ROUNDS"""
        hashed = get_password_hash("testpassword123")

        assert hashed.split("$")[2] == f"{settings.BCRYPT_ROUNDS:02d}"

    def test_hash_long_password_truncated(self):
        """Test that long passwords are truncated to bcrypt limit"""
        long_password = "a" * 100
        hashed = get_password_hash(long_password)

        assert verify_password(long_password, hashed) is True
        # Only the first 72 bytes count
        assert verify_password("a" * 72, hashed) is True

    def test_malformed_hash_raises(self):
        """A corrupt stored hash is an error, not a mismatch"""
        with pytest.raises(CredentialHashError):
            verify_password("secret", "not-a-bcrypt-hash")


class TestAccessToken:
    """Test access token functions"""

    def test_create_access_token_with_expiry(self):
        """Test creating access token with custom expiry"""
        token = create_access_token({"sub": "user123"}, expires_delta=timedelta(hours=1))

        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        remaining = datetime.utcfromtimestamp(payload["exp"]) - datetime.utcnow()

        assert 3500 < remaining.total_seconds() < 3700

    def test_access_token_includes_data_and_type(self):
        """Test access token includes original data and the access type claim"""
        data = {"sub": "user123", "email": "test@example.com", "role": "TEACHER"}
        token = create_access_token(data)

        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        assert payload["sub"] == "user123"
        assert payload["role"] == "TEACHER"
        assert payload["type"] == "access"


class TestDecodeToken:
    """Test token decoding"""

    def test_decode_valid_token(self):
        """Test decoding valid token"""
        token = create_access_token({"sub": "user123", "email": "test@example.com"})

        payload = decode_token(token)

        assert payload["sub"] == "user123"
        assert payload["email"] == "test@example.com"

    def test_decode_invalid_token(self):
        """Test decoding invalid token raises exception"""
        with pytest.raises(HTTPException) as exc_info:
            decode_token("invalid_token_string")

        assert exc_info.value.status_code == 401
        assert "Could not validate credentials" in exc_info.value.detail

    def test_decode_expired_token(self):
        """Test decoding expired token raises exception"""
        expired_token = jwt.encode(
            {"sub": "user123", "exp": datetime.utcnow() - timedelta(hours=1), "type": "access"},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

        with pytest.raises(HTTPException) as exc_info:
            decode_token(expired_token)

        assert exc_info.value.status_code == 401
