"""
Access Scopes

Read paths take an ``AccessScope`` describing who is asking. Customers get
``OwnedBy(user_id)``; an order they do not own is reported as not found so
its existence is never confirmed. Staff and admins get ``Unrestricted``.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class Unrestricted:
    pass


@dataclass(frozen=True)
class OwnedBy:
    user_id: int


AccessScope = Union[Unrestricted, OwnedBy]

UNRESTRICTED = Unrestricted()


def can_see(scope: AccessScope, owner_id: Optional[int]) -> bool:
    """Single ownership check shared by every scoped read."""
    if isinstance(scope, OwnedBy):
        return owner_id == scope.user_id
    return True
