"""
Authenticated principal passed explicitly into ledger mutations.
"""
from dataclasses import dataclass
from typing import Optional

from django.core.exceptions import PermissionDenied


@dataclass(frozen=True)
class Principal:
    """The caller on whose behalf an operation runs."""
    user_id: Optional[int]
    username: str

    @classmethod
    def from_user(cls, user) -> 'Principal':
        """Build a principal from an authenticated Django user."""
        if user is None or not user.is_authenticated:
            raise PermissionDenied("Authentication required")
        return cls(user_id=user.pk, username=user.get_username())

    @classmethod
    def system(cls) -> 'Principal':
        """Principal used by periodic tasks and management commands."""
        return cls(user_id=None, username='system')
