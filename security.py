from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from errors import InvalidToken


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def bcrypt_context(rounds: int = 10) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


class PasswordHasher:
    """One-way salted hashing, swappable through the CryptContext it wraps."""

    def __init__(self, context: Optional[CryptContext] = None):
        self.context = context or bcrypt_context()

    def hash(self, password: str) -> str:
        return self.context.hash(password)

    def verify(self, plain: str, hashed: str) -> bool:
        try:
            return self.context.verify(plain, hashed)
        except (ValueError, TypeError):
            # unknown or corrupt digest
            return False


class TokenService:
    """
    Issues and verifies signed bearer tokens of the form
    {"sub": "<user id>", "iat": <epoch>, "exp": <epoch>}.

    Nothing is stored server side; a token is valid if and only if its
    signature matches the current secret and `exp` is still in the future
    according to `clock`.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = utc_now,
    ):
        if not secret:
            raise ValueError("token secret must not be empty")
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self.clock = clock

    def issue(self, user_id: int) -> str:
        issued_at = self.clock()
        claims = {
            "sub": str(user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        if not token:
            raise InvalidToken("empty token")
        try:
            # expiry is checked below against self.clock
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise InvalidToken(f"bad signature or format: {exc}") from exc

        sub = payload.get("sub")
        exp = payload.get("exp")
        if not isinstance(sub, str) or not sub.isdigit():
            raise InvalidToken("missing or malformed subject")
        if not isinstance(exp, int) or isinstance(exp, bool):
            raise InvalidToken("missing or malformed expiry")

        if self.clock().timestamp() >= exp:
            raise InvalidToken("token expired")

        return int(sub)
