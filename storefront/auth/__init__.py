"""Authentication package."""
from .session import SessionState, SessionStore

__all__ = [
    "SessionState",
    "SessionStore",
]
