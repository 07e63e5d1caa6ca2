# src/buzznet/services/__init__.py
"""Business logic services for the BuzzNet application."""

from .accounts import AccountGuard
from .engagement import EngagementService
from .policy import can_delete

__all__ = [
    "AccountGuard",
    "EngagementService",
    "can_delete",
]
