"""Account guard: registration, login throttling and bearer-token checks.

The guard owns every write to a user's credential state. Lockout follows a
small state machine::

    Unlocked --(max_login_attempts-th consecutive failure)--> Locked(until)
    Locked   --(clock passes lock_until)--------------------> Unlocked

While locked, attempts are refused before the password is looked at and do
not touch the failure counter. The first attempt after the lock elapses
starts a fresh window, so a wrong password then leaves the counter at 1.
Counter and lock are written with SQL updates so parallel logins cannot
overwrite each other's failures.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from buzznet.core.errors import (
    AccountLocked,
    DuplicateEmail,
    InvalidCredentials,
    UserNotFound,
    ValidationError,
)
from buzznet.core.security import (
    BCRYPT_MAX_PASSWORD_BYTES,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from buzznet.core.settings import Settings, settings
from buzznet.db.time import utcnow
from buzznet.models.user import User, UserRole

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str | None) -> str:
    """Return the canonical (stripped, lower-cased) form of an email address."""
    return (email or "").strip().lower()


def check_password_policy(password: str) -> None:
    """Raise ValidationError unless ``password`` satisfies the strength policy."""
    problems: list[str] = []
    if len(password) < MIN_PASSWORD_LENGTH:
        problems.append(f"at least {MIN_PASSWORD_LENGTH} characters")
    if not any(ch.isupper() for ch in password):
        problems.append("an uppercase letter")
    if not any(ch.islower() for ch in password):
        problems.append("a lowercase letter")
    if not any(ch.isdigit() for ch in password):
        problems.append("a digit")
    if problems:
        raise ValidationError("Password must contain " + ", ".join(problems))
    if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must not exceed {BCRYPT_MAX_PASSWORD_BYTES} bytes"
        )


class AccountGuard:
    """Service wrapping the credential store."""

    def __init__(
        self,
        db: Session,
        *,
        config: Settings = settings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.config = config
        self.clock = clock

    def _find_by_email(self, email: str) -> User | None:
        # Lock state must come from the row, not a copy cached in this session.
        stmt = select(User).where(User.email == email).execution_options(populate_existing=True)
        return self.db.scalars(stmt).first()

    def register(
        self,
        username: str | None,
        email: str | None,
        password: str | None,
    ) -> tuple[User, str]:
        """Create a user and return it with a freshly issued token.

        Raises:
            ValidationError: Missing fields, malformed email or weak password.
            DuplicateEmail: The email (case-insensitively) is already registered.
        """
        username = (username or "").strip()
        email = normalize_email(email)
        if not username or not email or not password:
            raise ValidationError("Please provide username, email, and password")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Please provide a valid email address")
        check_password_policy(password)

        if self._find_by_email(email) is not None:
            raise DuplicateEmail()

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password, self.config.password_hash_rounds),
            role=UserRole.USER,
            login_attempts=0,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as err:
            # Lost a race against a concurrent registration for the same email.
            self.db.rollback()
            raise DuplicateEmail() from err
        self.db.refresh(user)

        logger.info("Registered user %s", user.id)
        return user, self.issue_token(user.id)

    def authenticate(self, email: str | None, password: str | None) -> tuple[User, str]:
        """Check credentials, apply lockout bookkeeping and return ``(user, token)``.

        Raises:
            ValidationError: Email or password missing.
            InvalidCredentials: Unknown email or wrong password.
            AccountLocked: The account is inside its lockout window.
        """
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Please provide email and password")

        user = self._find_by_email(email)
        if user is None:
            logger.warning("Login failed: no account for %s", email)
            raise InvalidCredentials()

        now = self.clock()
        if user.is_locked(now):
            logger.warning("Login refused: account %s is locked until %s", user.id, user.lock_until)
            raise AccountLocked()

        if user.lock_until is not None:
            # The lock has elapsed; start a fresh window.
            self._clear_failures(user, only_if_locked=True)

        if not verify_password(password, user.password_hash):
            self._record_failure(user, now)
            raise InvalidCredentials()

        self._clear_failures(user)
        self.db.commit()
        self.db.refresh(user)
        return user, self.issue_token(user.id)

    def _clear_failures(self, user: User, *, only_if_locked: bool = False) -> None:
        stmt = update(User).where(User.id == user.id)
        if only_if_locked:
            # A concurrent request may already have opened the new window.
            stmt = stmt.where(User.lock_until.is_not(None))
        self.db.execute(
            stmt.values(login_attempts=0, lock_until=None)
            .execution_options(synchronize_session=False)
        )

    def _record_failure(self, user: User, now: datetime) -> None:
        """Count one failed login and lock the account once the limit is reached.

        The counter is incremented in SQL and the lock decision uses the value
        the database returns, so parallel failures are never lost.
        """
        attempts = self.db.execute(
            update(User)
            .where(User.id == user.id)
            .values(login_attempts=User.login_attempts + 1)
            .returning(User.login_attempts)
            .execution_options(synchronize_session=False)
        ).scalar_one()

        if attempts >= self.config.max_login_attempts:
            self.db.execute(
                update(User)
                .where(User.id == user.id)
                .values(lock_until=now + timedelta(minutes=self.config.lockout_minutes))
                .execution_options(synchronize_session=False)
            )
            logger.warning(
                "Account %s locked for %d minutes after %d failed logins",
                user.id,
                self.config.lockout_minutes,
                attempts,
            )
        else:
            logger.warning(
                "Login failed for account %s (%d/%d)",
                user.id,
                attempts,
                self.config.max_login_attempts,
            )
        self.db.commit()
        self.db.refresh(user)

    def issue_token(self, user_id: str) -> str:
        """Return a signed bearer token for ``user_id``."""
        return create_access_token(user_id, config=self.config)

    def verify_token(self, token: str) -> str:
        """Return the user id carried by ``token``.

        Does not check that the account still exists; see ``resolve_actor``.
        """
        return decode_access_token(token, config=self.config)

    def resolve_actor(self, token: str) -> User:
        """Verify ``token`` and load the account it was issued for.

        Raises:
            InvalidToken: The token does not verify.
            UserNotFound: The account was removed after the token was issued.
        """
        user_id = self.verify_token(token)
        user = self.db.get(User, user_id)
        if user is None:
            raise UserNotFound()
        return user
