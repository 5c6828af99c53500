"""
Authenticator tests (bcrypt passwords, JWT tokens)
"""

from datetime import datetime, timedelta, UTC

import jwt
import pytest

from app.core.exceptions import InvalidToken
from app.core.security import AuthenticatedAccount, Authenticator

SECRET = "unit-test-secret-0123456789-abcdefghijkl"


@pytest.fixture
def authenticator():
    return Authenticator(secret_key=SECRET, expire_minutes=60, bcrypt_rounds=4)


class TestPasswords:
    def test_hash_and_verify(self, authenticator):
        password_hash = authenticator.hash_password("s3cret")

        assert password_hash != "s3cret"
        assert authenticator.verify_password("s3cret", password_hash)
        assert not authenticator.verify_password("wrong", password_hash)

    def test_non_bcrypt_hash_never_matches(self, authenticator):
        assert not authenticator.verify_password("anything", "not-a-bcrypt-hash")


class TestTokens:
    def test_issue_and_verify(self, authenticator):
        token = authenticator.issue_token(7, "VW", "PBU")

        assert authenticator.verify_token(token) == AuthenticatedAccount(
            account_id=7, brand="VW", role="PBU"
        )

    def test_expired_token(self, authenticator):
        issued = datetime.now(UTC) - timedelta(hours=2)
        token = authenticator.issue_token(7, "VW", "PBU", now=issued)

        with pytest.raises(InvalidToken):
            authenticator.verify_token(token)

    def test_wrong_secret(self, authenticator):
        other = Authenticator(secret_key="another-secret-0123456789-abcdefghijkl")
        token = other.issue_token(7, "VW", "PBU")

        with pytest.raises(InvalidToken):
            authenticator.verify_token(token)

    def test_garbage_token(self, authenticator):
        with pytest.raises(InvalidToken):
            authenticator.verify_token("not.a.token")

    def test_non_numeric_subject(self, authenticator):
        token = jwt.encode(
            {"sub": "abc", "exp": datetime.now(UTC) + timedelta(minutes=5)},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidToken):
            authenticator.verify_token(token)

    def test_missing_expiry(self, authenticator):
        token = jwt.encode({"sub": "7"}, SECRET, algorithm="HS256")

        with pytest.raises(InvalidToken):
            authenticator.verify_token(token)
