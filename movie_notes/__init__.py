"""Movie Notes - Backend.

A small HTTP/JSON API:
- Email/password accounts with stateless JWT sessions.
- Per-user movie favorites and notes, reachable only with a valid token.

See README for setup and usage.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
