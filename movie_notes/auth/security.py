from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from movie_notes.config import ConfigError
from movie_notes.errors import TokenExpired, TokenInvalid
from movie_notes.util.time import utcnow


# Cost factor 10 (2^10 bcrypt rounds).
_pwd = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)
_JWT_ALG = "HS256"

TOKEN_LIFETIME = timedelta(hours=1)


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unrecognized or corrupt digest.
        return False


@dataclass(frozen=True)
class SessionClaims:
    id: str
    email: str
    iat: int
    exp: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TokenIssuer:
    """Signs and verifies the bearer tokens handed out by /signin."""

    def __init__(self, secret: str, *, lifetime: timedelta = TOKEN_LIFETIME):
        if not secret:
            raise ConfigError("jwt_secret_blank")
        self._secret = secret
        self.lifetime = lifetime

    def issue(self, *, user_id: str, email: str, now: Optional[datetime] = None) -> str:
        issued = now or utcnow()
        iat = int(issued.timestamp())
        payload: Dict[str, Any] = {
            "id": str(user_id),
            "email": email,
            "iat": iat,
            "exp": iat + int(self.lifetime.total_seconds()),
        }
        return jwt.encode(payload, self._secret, algorithm=_JWT_ALG)

    def verify(self, token: str) -> SessionClaims:
        if not token:
            raise TokenInvalid(details="token_blank")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[_JWT_ALG],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired(details="token_expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalid(details=f"token_invalid: {e}")

        user_id = payload.get("id")
        email = payload.get("email")
        if not user_id or not email:
            raise TokenInvalid(details="token_missing_identity")

        return SessionClaims(
            id=str(user_id),
            email=str(email),
            iat=int(payload["iat"]),
            exp=int(payload["exp"]),
        )
