"""
Access - verdicts, accounts and the host arbitration handlers.
"""

from .result import AccessResult, CacheableMetadata, Verdict, combine, PERMANENT, UNCACHEABLE
from .account import Account
from .control_handler import EntityAccessControlHandler, EntityTestAccessControlHandler, handler_for

__all__ = [
    "AccessResult", "CacheableMetadata", "Verdict", "combine", "PERMANENT", "UNCACHEABLE",
    "Account",
    "EntityAccessControlHandler", "EntityTestAccessControlHandler", "handler_for"
]
