"""
Accounts - the actor an access check is made for.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class Account:
    """User account without any web framework coupling"""
    uid: int = 0
    name: str = "anonymous"
    permissions: List[str] = field(default_factory=list)
    is_admin: bool = False

    def has_permission(self, permission: str) -> bool:
        """Check if the account holds a permission; admins hold all"""
        return self.is_admin or permission in self.permissions


__all__ = ["Account"]
