"""Single-credential administrator login."""

from __future__ import annotations

import hmac
import logging
from typing import Any, Dict, Optional

from patient_education.config import ConfigManager

__all__ = ["AuthService"]

logger = logging.getLogger(__name__)


class AuthService:
    """Grants the administrator role for the session.

    There is one fixed credential pair; a failed login is a ``False`` return
    and leaves the role unprivileged.
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None) -> None:
        if settings is None:
            settings = ConfigManager().get_auth_settings()
        self._login = str(settings.get("login", ""))
        self._secret = str(settings.get("secret", ""))
        self._is_admin = False

    @property
    def is_admin(self) -> bool:
        return self._is_admin

    def login(self, user: str, password: str) -> bool:
        if not self._login:
            logger.warning("Login rejected: no administrator credential configured")
            return False
        ok = (hmac.compare_digest(str(user).encode("utf-8"), self._login.encode("utf-8"))
              and hmac.compare_digest(str(password).encode("utf-8"), self._secret.encode("utf-8")))
        if ok:
            self._is_admin = True
            logger.info("Administrator logged in")
        else:
            logger.info("Login rejected: credential mismatch")
        return ok

    def logout(self) -> None:
        if self._is_admin:
            logger.info("Administrator logged out")
        self._is_admin = False
