"""Authorization rules for destructive mutations."""
from __future__ import annotations

from buzznet.models.user import UserRole


def can_delete(actor_id: str, resource_owner_id: str, actor_role: UserRole | str) -> bool:
    """Return True if the actor may delete a resource owned by ``resource_owner_id``.

    Authors may delete their own posts and comments; admins may delete anything.
    """
    return actor_id == resource_owner_id or actor_role == UserRole.ADMIN
