import logging
import time
from typing import Optional

import jwt
from passlib.context import CryptContext

from .context import Authenticated
from .errors import InvalidToken
from .models import Role

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
EXP_SECONDS = 60 * 60 * 24 * 7  # 7 days
PBKDF2_ROUNDS = 29000


class PasswordHasher:
    """Salted one-way password hashing with a fixed work factor."""

    def __init__(self, rounds: int = PBKDF2_ROUNDS):
        # pbkdf2_sha256 as default to avoid bcrypt's 72-byte limitation
        self._context = CryptContext(
            schemes=["pbkdf2_sha256", "bcrypt"],
            deprecated="auto",
            pbkdf2_sha256__default_rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, plain: str, hashed: str) -> bool:
        try:
            return self._context.verify(plain, hashed)
        except ValueError:
            # Digest in an unknown format: treat as a mismatch
            logger.warning("stored password hash could not be identified")
            return False

    def dummy_verify(self) -> None:
        """Spend the same time as a real verify, for lookups that found no user."""
        self._context.dummy_verify()


class TokenIssuer:
    """Signs and verifies bearer tokens carrying a user id and role."""

    def __init__(self, secret: str, expires_in: int = EXP_SECONDS):
        if not secret:
            raise ValueError("token signing secret must not be empty")
        self._secret = secret
        self._expires_in = expires_in

    def issue(self, user_id: int, role: Role, issued_at: Optional[int] = None) -> str:
        now = int(time.time()) if issued_at is None else issued_at
        payload = {
            "sub": str(user_id),
            "role": Role(role).value,
            "iat": now,
            "exp": now + self._expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Authenticated:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "role", "exp"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidToken(str(e)) from e

        try:
            return Authenticated(user_id=int(payload["sub"]), role=Role(payload["role"]))
        except (TypeError, ValueError) as e:
            raise InvalidToken("token claims are malformed") from e
