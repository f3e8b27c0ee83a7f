"""Authentication / authorization helpers.

Auth is intentionally lightweight:

- Users table (email + bcrypt password hash)
- Stateless JWT access tokens, valid for one hour

Protected routes accept the token either as `Authorization: Bearer <token>`
or as a `token` field in the JSON body.
"""

from .crud import signin, signup
from .deps import get_current_user
from .security import SessionClaims, TokenIssuer, hash_password, verify_password

__all__ = [
    "get_current_user",
    "signin",
    "signup",
    "SessionClaims",
    "TokenIssuer",
    "hash_password",
    "verify_password",
]
