# mypy: ignore-errors
"""Tests for registration, login throttling and token checks in AccountGuard."""

from datetime import timedelta

import pytest

from buzznet.core.errors import (
    AccountLocked,
    DuplicateEmail,
    InvalidCredentials,
    InvalidToken,
    UserNotFound,
    ValidationError,
)
from buzznet.core.security import create_access_token, verify_password
from buzznet.core.settings import settings
from buzznet.db.time import as_utc, utcnow
from buzznet.models import UserRole
from buzznet.services import accounts
from buzznet.services.accounts import AccountGuard, check_password_policy, normalize_email


def test_register_returns_user_and_token(guard) -> None:
    """A fresh registration stores a hashed password and yields a usable token."""
    user, token = guard.register("dana", "Dana@Example.com", "Secret123")

    assert user.email == "dana@example.com"
    assert user.role == UserRole.USER
    assert user.login_attempts == 0
    assert user.lock_until is None
    assert user.password_hash != "Secret123"
    assert verify_password("Secret123", user.password_hash)
    assert guard.verify_token(token) == user.id


def test_register_rejects_duplicate_email_case_insensitively(guard) -> None:
    """The same address in another case counts as taken."""
    guard.register("dana", "dana@example.com", "Secret123")

    with pytest.raises(DuplicateEmail):
        guard.register("dana2", "DANA@example.COM", "Secret123")


@pytest.mark.parametrize(
    ("username", "email", "password"),
    [
        ("", "dana@example.com", "Secret123"),
        ("dana", None, "Secret123"),
        ("dana", "dana@example.com", ""),
        ("dana", "not-an-email", "Secret123"),
        ("dana", "dana@example.com", "short1A"),
        ("dana", "dana@example.com", "alllowercase1"),
        ("dana", "dana@example.com", "ALLUPPERCASE1"),
        ("dana", "dana@example.com", "NoDigitsHere"),
    ],
)
def test_register_validation(guard, username, email, password) -> None:
    """Missing fields, malformed emails and weak passwords are rejected."""
    with pytest.raises(ValidationError):
        guard.register(username, email, password)


def test_password_policy_lists_every_missing_rule() -> None:
    """The message names each rule the password breaks."""
    with pytest.raises(ValidationError) as excinfo:
        check_password_policy("abc")

    detail = excinfo.value.detail
    assert "at least 8 characters" in detail
    assert "an uppercase letter" in detail
    assert "a digit" in detail
    assert "a lowercase letter" not in detail


def test_password_policy_rejects_over_long_passwords() -> None:
    """Passwords beyond bcrypt's 72 byte window are refused outright."""
    with pytest.raises(ValidationError):
        check_password_policy("Aa1" + "x" * 80)


def test_normalize_email() -> None:
    assert normalize_email("  Bob@Example.COM ") == "bob@example.com"
    assert normalize_email(None) == ""


def test_authenticate_success_returns_token(guard, alice, password) -> None:
    """Correct credentials issue a token naming the account."""
    user, token = guard.authenticate(alice.email.upper(), password)

    assert user.id == alice.id
    assert guard.verify_token(token) == alice.id


def test_authenticate_requires_both_fields(guard, alice, password) -> None:
    with pytest.raises(ValidationError):
        guard.authenticate(alice.email, "")
    with pytest.raises(ValidationError):
        guard.authenticate(None, password)


def test_unknown_email_is_invalid_credentials(guard, password) -> None:
    """Unknown addresses look exactly like wrong passwords."""
    with pytest.raises(InvalidCredentials):
        guard.authenticate("nobody@example.com", password)


def test_failures_below_threshold_do_not_lock(guard, alice) -> None:
    """Four consecutive failures are counted but do not lock."""
    for _ in range(settings.max_login_attempts - 1):
        with pytest.raises(InvalidCredentials):
            guard.authenticate(alice.email, "Wrong1234")

    assert alice.login_attempts == settings.max_login_attempts - 1
    assert alice.lock_until is None


def test_threshold_failure_locks_account(guard, alice, clock) -> None:
    """The fifth failure still reports bad credentials and starts the lock."""
    for _ in range(settings.max_login_attempts):
        with pytest.raises(InvalidCredentials):
            guard.authenticate(alice.email, "Wrong1234")

    assert alice.login_attempts == settings.max_login_attempts
    assert as_utc(alice.lock_until) == clock.now + timedelta(minutes=settings.lockout_minutes)


def test_locked_account_refuses_even_correct_password(guard, alice, password) -> None:
    """While locked the password is not checked and the counter is untouched."""
    for _ in range(settings.max_login_attempts):
        with pytest.raises(InvalidCredentials):
            guard.authenticate(alice.email, "Wrong1234")

    with pytest.raises(AccountLocked):
        guard.authenticate(alice.email, password)
    with pytest.raises(AccountLocked):
        guard.authenticate(alice.email, "Wrong1234")

    assert alice.login_attempts == settings.max_login_attempts


def test_expired_lock_starts_fresh_window(guard, alice, clock) -> None:
    """After the lock elapses a wrong password counts as the first failure."""
    for _ in range(settings.max_login_attempts):
        with pytest.raises(InvalidCredentials):
            guard.authenticate(alice.email, "Wrong1234")

    clock.advance(minutes=settings.lockout_minutes, seconds=1)

    with pytest.raises(InvalidCredentials):
        guard.authenticate(alice.email, "Wrong1234")
    assert alice.login_attempts == 1
    assert alice.lock_until is None


def test_expired_lock_allows_login(guard, alice, clock, password) -> None:
    for _ in range(settings.max_login_attempts):
        with pytest.raises(InvalidCredentials):
            guard.authenticate(alice.email, "Wrong1234")

    clock.advance(minutes=settings.lockout_minutes, seconds=1)
    user, _ = guard.authenticate(alice.email, password)

    assert user.login_attempts == 0
    assert user.lock_until is None


def test_success_resets_failure_counter(guard, alice, password) -> None:
    """A successful login clears earlier failures."""
    for _ in range(3):
        with pytest.raises(InvalidCredentials):
            guard.authenticate(alice.email, "Wrong1234")

    guard.authenticate(alice.email, password)
    assert alice.login_attempts == 0

    # The window restarts, so four more failures still do not lock.
    for _ in range(settings.max_login_attempts - 1):
        with pytest.raises(InvalidCredentials):
            guard.authenticate(alice.email, "Wrong1234")
    assert alice.lock_until is None


def test_lock_only_affects_one_account(guard, alice, bob, password) -> None:
    for _ in range(settings.max_login_attempts):
        with pytest.raises(InvalidCredentials):
            guard.authenticate(alice.email, "Wrong1234")

    user, _ = guard.authenticate(bob.email, password)
    assert user.id == bob.id


def test_verify_token_rejects_garbage(guard) -> None:
    with pytest.raises(InvalidToken):
        guard.verify_token("not-a-jwt")


def test_verify_token_rejects_expired_token(guard, alice) -> None:
    """Tokens older than the configured lifetime no longer verify."""
    issued = utcnow() - timedelta(minutes=settings.access_token_expire_minutes + 1)
    token = create_access_token(alice.id, now=issued)

    with pytest.raises(InvalidToken):
        guard.verify_token(token)


def test_verify_token_rejects_foreign_signature(guard, alice) -> None:
    """A token signed with another secret is refused."""
    other = settings.model_copy(update={"secret_key": "some-other-secret"})
    token = create_access_token(alice.id, config=other)

    with pytest.raises(InvalidToken):
        guard.verify_token(token)


def test_resolve_actor_loads_user(guard, alice) -> None:
    token = guard.issue_token(alice.id)
    assert guard.resolve_actor(token).id == alice.id


def test_resolve_actor_for_removed_account(guard) -> None:
    """A valid token for an account that no longer exists fails distinctly."""
    token = guard.issue_token("0" * 32)

    with pytest.raises(UserNotFound):
        guard.resolve_actor(token)


def test_interleaved_failures_are_all_counted(
    guard, alice, clock, session_factory, password, monkeypatch
) -> None:
    """A failure committed by another session between read and write still counts."""
    for _ in range(settings.max_login_attempts - 2):
        with pytest.raises(InvalidCredentials):
            guard.authenticate(alice.email, "Wrong1234")

    real_verify = accounts.verify_password
    raced = []

    def verify_after_rival(candidate, password_hash):
        if not raced:
            raced.append(1)
            with session_factory() as rival_db:
                with pytest.raises(InvalidCredentials):
                    AccountGuard(rival_db, clock=clock).authenticate(alice.email, "Wrong1234")
        return real_verify(candidate, password_hash)

    monkeypatch.setattr(accounts, "verify_password", verify_after_rival)
    with pytest.raises(InvalidCredentials):
        guard.authenticate(alice.email, "Wrong1234")
    monkeypatch.undo()

    assert raced == [1]
    assert alice.login_attempts == settings.max_login_attempts
    assert as_utc(alice.lock_until) == clock.now + timedelta(minutes=settings.lockout_minutes)
    with pytest.raises(AccountLocked):
        guard.authenticate(alice.email, password)
