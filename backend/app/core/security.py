"""
Authenticator
Password hashing (bcrypt) and access tokens (JWT, HS256 by default)

Token claims: sub (account id as string), brand, role, exp
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, UTC
from typing import Optional

import bcrypt
import jwt

from app.core.config import settings
from app.core.exceptions import InvalidToken


@dataclass(frozen=True)
class AuthenticatedAccount:
    """Identity extracted from a verified token"""
    account_id: int
    brand: str
    role: str


class Authenticator:
    """Issues and verifies credentials for brand/role accounts"""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
        bcrypt_rounds: int = 10,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes
        self.bcrypt_rounds = bcrypt_rounds

    # Passwords

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Stored hash is not a bcrypt hash
            return False

    # Tokens

    def issue_token(self, account_id: int, brand: str, role: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(UTC)
        claims = {
            "sub": str(account_id),
            "brand": brand,
            "role": role,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> AuthenticatedAccount:
        """
        Raises:
            InvalidToken: bad signature, expired, or missing claims
        """
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidToken("Invalid token") from e

        try:
            account_id = int(claims["sub"])
        except (TypeError, ValueError) as e:
            raise InvalidToken("Invalid token") from e

        return AuthenticatedAccount(
            account_id=account_id,
            brand=claims.get("brand", ""),
            role=claims.get("role", ""),
        )


def get_authenticator() -> Authenticator:
    """Authenticator configured from settings"""
    return Authenticator(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )
