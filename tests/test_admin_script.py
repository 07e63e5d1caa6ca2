"""Tests for the operator CLI."""

import pytest

from buzznet.models import UserRole
from buzznet.scripts import admin


def test_set_role_promotes_by_email(db_session, alice) -> None:
    user = admin.set_role(db_session, f"  {alice.email.upper()} ", UserRole.ADMIN)

    assert user.id == alice.id
    assert alice.role == UserRole.ADMIN


def test_set_role_unknown_email(db_session) -> None:
    with pytest.raises(LookupError):
        admin.set_role(db_session, "ghost@example.com", UserRole.ADMIN)


def test_cli_promote_and_demote(monkeypatch, capsys, session_factory, db_session, bob) -> None:
    monkeypatch.setattr(admin, "SessionLocal", session_factory)

    assert admin.main(["promote", bob.email]) == 0
    db_session.refresh(bob)
    assert bob.role == UserRole.ADMIN
    assert "is now admin" in capsys.readouterr().out

    assert admin.main(["demote", bob.email]) == 0
    db_session.refresh(bob)
    assert bob.role == UserRole.USER


def test_cli_unknown_email(monkeypatch, capsys, session_factory) -> None:
    monkeypatch.setattr(admin, "SessionLocal", session_factory)

    assert admin.main(["promote", "ghost@example.com"]) == 1
    assert "ERROR" in capsys.readouterr().err


def test_cli_init_db(monkeypatch, capsys) -> None:
    calls = []
    monkeypatch.setattr(admin, "create_tables", lambda: calls.append(1))

    assert admin.main(["init-db"]) == 0
    assert calls == [1]
    assert "tables created" in capsys.readouterr().out
