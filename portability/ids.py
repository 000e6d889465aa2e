"""
Default id and token providers.

JobManager only needs ``create_id()`` and ``create_new_token(job_id)``; any
object with those methods can stand in for the classes here.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import jwt

from .errors import InvalidArgument

JWT_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(hours=24)


class IdProvider(Protocol):
    def create_id(self) -> str:
        ...


class TokenManager(Protocol):
    def create_new_token(self, job_id: str) -> str:
        ...


class UUIDProvider:
    """Random, collision-free job ids."""

    def create_id(self) -> str:
        return uuid.uuid4().hex


class JWTTokenManager:
    """
    Issues signed tokens bound to a job id.

    The job id travels in the ``sub`` claim; ``jti`` makes every token unique
    even when two are issued for the same id in the same second.
    """

    def __init__(self, secret: str, ttl: Optional[timedelta] = None):
        if not secret:
            raise InvalidArgument("Token secret must not be empty")
        self.secret = secret
        self.ttl = ttl or DEFAULT_TOKEN_TTL

    def create_new_token(self, job_id: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": job_id,
            "iat": now,
            "exp": now + self.ttl,
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> bool:
        """True if ``token`` was signed with this secret and has not expired."""
        try:
            self._decode(token)
        except jwt.InvalidTokenError:
            return False
        return True

    def get_job_id(self, token: str) -> str:
        """Return the job id bound to ``token``."""
        try:
            payload = self._decode(token)
        except jwt.ExpiredSignatureError as e:
            raise InvalidArgument("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidArgument(f"Invalid token: {e}") from e
        return payload["sub"]

    def _decode(self, token: str) -> dict:
        return jwt.decode(
            token,
            self.secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
