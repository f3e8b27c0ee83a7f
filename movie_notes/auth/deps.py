from __future__ import annotations

import json
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from movie_notes.errors import AuthError, InternalError

from .security import SessionClaims, TokenIssuer


_bearer = HTTPBearer(auto_error=False)


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


async def _body_token(request: Request) -> Optional[str]:
    """Return the `token` field of a JSON object body, if any."""
    raw = await request.body()
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    token = data.get("token")
    if isinstance(token, str) and token.strip():
        return token.strip()
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> SessionClaims:
    """Authenticate a request.

    Supports both:
      - Authorization: Bearer <jwt>
      - a `token` field in the JSON body (for clients that cannot set headers)

    The decoded claims are also left on `request.state.user`.
    """

    issuer: Optional[TokenIssuer] = getattr(request.app.state, "issuer", None)
    if issuer is None:
        raise InternalError(details="server_config_missing")

    token: Optional[str] = None

    # Prefer the header when explicitly provided.
    if credentials is not None and credentials.credentials:
        token = credentials.credentials

    if not token:
        token = await _body_token(request)

    if not token:
        raise AuthError("Token required")

    try:
        claims = issuer.verify(token)
    except AuthError as e:
        _debug(f"Token verification failed: {e.details or e.message}")
        raise AuthError("Invalid token")

    request.state.user = claims
    return claims
