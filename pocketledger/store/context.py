"""
Session Context

Holds who is signed in. The store and the session manager share one
instance; anything that needs user-scoped data receives it explicitly
instead of reaching for module-level state.
"""

from enum import Enum
from typing import Optional

from pocketledger.errors import InvalidOperationError
from pocketledger.models.user import User


class SessionState(str, Enum):
    SIGNED_OUT = "signed_out"
    SIGNED_IN = "signed_in"


class SessionContext:
    """SignedOut -> SignedIn(user_id) -> SignedOut."""

    def __init__(self):
        self._user: Optional[User] = None

    @property
    def state(self) -> SessionState:
        return SessionState.SIGNED_IN if self._user else SessionState.SIGNED_OUT

    @property
    def is_signed_in(self) -> bool:
        return self._user is not None

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def user_id(self) -> Optional[str]:
        return self._user.id if self._user else None

    def sign_in(self, user: User) -> None:
        if self._user is not None:
            raise InvalidOperationError(
                f"User {self._user.id} is already signed in; log out first"
            )
        self._user = user

    def replace_user(self, user: User) -> None:
        """Swap in an updated record for the signed-in user."""
        if self._user is None or self._user.id != user.id:
            raise InvalidOperationError("Can only update the signed-in user")
        self._user = user

    def sign_out(self) -> None:
        self._user = None
