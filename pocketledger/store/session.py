"""
Session Manager

Signs a user up, in and out, and switches the store to that user's
partitions at the right points:

    signup  -> new user record + empty partitions saved -> SignedIn
    login   -> stored record matched by email -> partitions loaded -> SignedIn
    logout  -> all partitions saved -> store cleared -> SignedOut
    restore -> on process start, resume the last session if it was not
               ended by logout

WARNING: login compares the supplied email with the single local user
record, case-insensitively. There is no password and no credential
check. Treat this as a placeholder for a real credential boundary
(hashed secret or external identity provider), not as authentication.
"""

from decimal import Decimal
from typing import Optional, Union

from pocketledger.audit import AuditLogger
from pocketledger.errors import InvalidOperationError, PersistenceError, ValidationError
from pocketledger.models.audit import AuditEventType
from pocketledger.models.user import User
from pocketledger.services.storage.partitions import (
    CURRENT_USER_KEY,
    SESSION_KEY,
    PartitionRepository,
)
from pocketledger.store.context import SessionContext, SessionState
from pocketledger.store.financial_store import FinancialStore


class SessionManager:
    """Drives the SessionContext shared with the FinancialStore."""

    def __init__(
        self,
        store: FinancialStore,
        repository: PartitionRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._session: SessionContext = store.session
        self._repository = repository
        self._audit = audit_logger or AuditLogger()

    @property
    def store(self) -> FinancialStore:
        return self._store

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def current_user(self) -> Optional[User]:
        return self._session.user

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    def signup(
        self,
        first_name: str,
        last_name: str,
        email: str,
        monthly_start_balance: Union[Decimal, int, str] = Decimal("0"),
    ) -> User:
        """
        Create a new account and sign it in.

        The new user record replaces any previous local record; the old
        user's partitions stay on disk under their own id.
        """
        self._require_signed_out("signup")
        first_name, last_name, email = first_name.strip(), last_name.strip(), email.strip()
        if not first_name:
            raise ValidationError("Please enter your first name")
        if not last_name:
            raise ValidationError("Please enter your last name")
        if not email:
            raise ValidationError("Please enter your email")
        if "@" not in email or "." not in email:
            raise ValidationError("Please enter a valid email")

        start_balance = Decimal(str(monthly_start_balance))
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            monthly_start_balance=start_balance,
            current_balance=start_balance,
        )

        self._store.reset()
        self._session.sign_in(user)
        self._store.save_all()
        self._mark_session(user.id)
        self._audit.log_session(
            AuditEventType.USER_SIGNED_UP, user.id, "User signed up", name=user.name,
        )
        return user

    def login(self, email: str) -> Optional[User]:
        """
        Sign in the locally stored user if the email matches.

        Returns the user, or None when there is no local record or the
        email does not match.
        """
        self._require_signed_out("login")
        user = self._load_stored_user()
        if user is None or not user.email_matches(email):
            self._audit.log_session(
                AuditEventType.LOGIN_FAILED, None, "No local account matches that email",
            )
            return None

        self._activate(user)
        self._audit.log_session(
            AuditEventType.USER_LOGGED_IN, user.id, "User logged in", name=user.name,
        )
        return self._session.user

    def logout(self) -> bool:
        """
        Save everything and return to the signed-out state.

        The user record stays in storage. Returns False if nobody was
        signed in.
        """
        user = self._session.user
        if user is None:
            return False

        self._store.save_all()
        self._store.reset()
        self._session.sign_out()
        try:
            self._repository.clear_session()
        except PersistenceError as e:
            self._audit.log_save_failed(SESSION_KEY, user.id, str(e))
        self._audit.log_session(
            AuditEventType.USER_LOGGED_OUT, user.id, "User logged out", name=user.name,
        )
        return True

    def restore(self) -> Optional[User]:
        """
        Auto-login at process start.

        Resumes when a user record exists and the last session for that
        user was not closed by logout. Otherwise stays signed out.
        """
        if self._session.is_signed_in:
            return self._session.user

        user = self._load_stored_user()
        if user is None:
            return None
        try:
            active_id = self._repository.load_session_user_id()
        except PersistenceError as e:
            self._audit.log_load_failed(SESSION_KEY, user.id, str(e))
            return None
        if active_id != user.id:
            return None

        self._activate(user)
        self._audit.log_session(
            AuditEventType.SESSION_RESTORED, user.id, "Session restored", name=user.name,
        )
        return self._session.user

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _require_signed_out(self, operation: str) -> None:
        if self._session.is_signed_in:
            raise InvalidOperationError(f"Cannot {operation} while signed in; log out first")

    def _load_stored_user(self) -> Optional[User]:
        try:
            return self._repository.load_current_user()
        except PersistenceError as e:
            self._audit.log_load_failed(CURRENT_USER_KEY, None, str(e))
            return None

    def _activate(self, user: User) -> None:
        self._session.sign_in(user)
        self._store.load_partitions(user.id)
        self._store.recalculate_current_balance()
        self._mark_session(user.id)

    def _mark_session(self, user_id: str) -> None:
        try:
            self._repository.save_session(user_id)
        except PersistenceError as e:
            self._audit.log_save_failed(SESSION_KEY, user_id, str(e))
