"""Tests for the author-or-admin deletion rule."""

import pytest

from buzznet.models import UserRole
from buzznet.services.policy import can_delete


@pytest.mark.parametrize(
    ("actor_id", "owner_id", "role", "expected"),
    [
        ("u1", "u1", UserRole.USER, True),
        ("u1", "u2", UserRole.USER, False),
        ("u1", "u2", UserRole.ADMIN, True),
        ("u1", "u1", UserRole.ADMIN, True),
        ("u1", "u2", "admin", True),
        ("u1", "u2", "moderator", False),
    ],
)
def test_can_delete(actor_id, owner_id, role, expected) -> None:
    assert can_delete(actor_id, owner_id, role) is expected
