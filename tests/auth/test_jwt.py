"""JWT access token tests."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from wastewise.auth.jwt import create_access_token, verify_token
from wastewise.config import get_settings


class TestAccessToken:
    def test_round_trip(self):
        token = create_access_token(42, "recycler@wastewise.io")
        payload = verify_token(token)
        assert payload["sub"] == "42"
        assert payload["email"] == "recycler@wastewise.io"
        assert payload["type"] == "access"

    def test_wrong_type_rejected(self):
        token = create_access_token(42, "recycler@wastewise.io")
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            verify_token(token, expected_type="refresh")

    def test_expired_token_rejected(self):
        settings = get_settings()
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {
                "sub": "42",
                "iat": past,
                "exp": past + timedelta(minutes=5),
                "iss": settings.jwt_issuer,
                "type": "access",
            },
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            verify_token(token)

    def test_foreign_signature_rejected(self):
        token = jwt.encode(
            {"sub": "42", "type": "access", "iss": get_settings().jwt_issuer},
            "some-other-secret-that-is-also-32-bytes-long",
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(token)
