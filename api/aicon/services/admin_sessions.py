"""Admin session tokens."""

import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class AdminSessionStore:
    """In-process admin session tokens.

    One instance is created per application and injected where needed.
    """

    def __init__(self, admin_password: str, session_hours: int = 24):
        self._admin_password = admin_password
        self._session_duration = timedelta(hours=session_hours)
        self._sessions: Dict[str, datetime] = {}

    def login(self, password: str) -> Optional[str]:
        """Return a new session token if password matches, else None."""
        if not hmac.compare_digest(password.encode(), self._admin_password.encode()):
            logger.warning("Admin login rejected")
            return None

        token = secrets.token_hex(32)
        self._sessions[token] = datetime.utcnow() + self._session_duration
        self.cleanup_expired()
        return token

    def verify(self, token: str) -> bool:
        """Check token is known and not expired."""
        expires_at = self._sessions.get(token)
        if expires_at is None:
            return False

        if datetime.utcnow() > expires_at:
            self._sessions.pop(token, None)
            return False

        return True

    def logout(self, token: str) -> None:
        self._sessions.pop(token, None)

    def cleanup_expired(self) -> int:
        """Remove expired sessions and return how many were dropped."""
        now = datetime.utcnow()
        expired = [token for token, expires_at in self._sessions.items() if now > expires_at]
        for token in expired:
            del self._sessions[token]
        return len(expired)
