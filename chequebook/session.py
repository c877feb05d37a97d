"""Signed-in session state for chequebook.

The session is an explicit object created on sign-in and cleared on sign-out.
Services that need the current user's role receive it as an argument.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from chequebook.config import ROLE_ADMIN, ROLE_USER
from chequebook.exceptions import PermissionDeniedError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """The signed-in principal and its role."""
    uid: str
    email: str = ""
    display_name: str = ""
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def require_admin(session: Optional[Session], action: str) -> None:
    """Raise PermissionDeniedError unless ``session`` belongs to an admin."""
    if session is None or not session.is_admin:
        raise PermissionDeniedError(action, session.uid if session else None)


class SessionManager:
    """Creates and clears the current Session against stored user profiles.

    Attributes:
        db: RecordStore holding user profiles.
        current: The active Session, or None when signed out.
    """

    def __init__(self, db_manager):
        self.db = db_manager
        self._current: Optional[Session] = None

    @property
    def current(self) -> Optional[Session]:
        return self._current

    def sign_in(self, uid: str, email: str = "", display_name: str = "") -> Session:
        """Start a session, creating the user profile on first sign-in.

        New profiles get the plain user role; promotion to admin is an
        explicit operation (``set_role``).
        """
        if not uid:
            raise ValidationError("A user id is required to sign in", "uid")

        profile = self.db.get_user(uid)
        if profile is None:
            logger.info("Creating profile for new user %s", uid)
            self.db.add_user(uid, email, display_name, ROLE_USER)
            role = ROLE_USER
        else:
            role = profile.get("role") or ROLE_USER
            email = email or profile.get("email") or ""
            display_name = display_name or profile.get("name") or ""

        self._current = Session(uid=uid, email=email, display_name=display_name, role=role)
        return self._current

    def sign_out(self) -> None:
        self._current = None

    def set_role(self, uid: str, role: str) -> None:
        """Change a user's role.

        Requires an admin session, except while no admin exists at all: the
        first promotion to admin bootstraps the installation.

        Raises:
            ValidationError: If ``role`` is unknown.
            PermissionDeniedError: If the current session may not change roles.
        """
        if role not in (ROLE_USER, ROLE_ADMIN):
            raise ValidationError(f"Unknown role '{role}'", "role")

        with self.db.transaction():
            bootstrap = role == ROLE_ADMIN and not self.db.has_admin()
            if not bootstrap:
                require_admin(self._current, "change role")

            if self.db.get_user(uid) is None:
                self.db.add_user(uid, "", "", role)
            else:
                self.db.set_user_role(uid, role)

        if bootstrap:
            logger.warning("No admin found; %s promoted to admin", uid)
        else:
            logger.info("Role of %s set to %s by %s", uid, role, self._current.uid)
        if self._current and self._current.uid == uid:
            self._current = Session(self._current.uid, self._current.email,
                                    self._current.display_name, role)
