"""
Exceptions raised by the entity test module and its host harness.

Errors raised from hook callbacks are deliberate: they exist so the
storage's rollback path can be exercised. Nothing in this package
recovers from them locally.
"""

from typing import Optional


class EntityTestError(Exception):
    """Base exception for the entity test module"""

    def __init__(self, message: str = "", code: int = 0):
        super().__init__(message)
        self.message = message
        self.code = code


class HookError(EntityTestError):
    """Raised by a hook callback to abort the enclosing operation"""
    pass


class HookRegistrationError(EntityTestError):
    """Raised when a hook callback cannot be registered"""
    pass


class UnknownEntityTypeError(EntityTestError):
    """Raised when an entity type id is not defined"""
    pass


class UnknownFieldError(EntityTestError):
    """Raised when a field is not defined on an entity"""
    pass


class EntityStorageError(EntityTestError):
    """Raised when a storage operation fails and has been rolled back"""

    def __init__(self, message: str = "", code: int = 0, previous: Optional[BaseException] = None):
        super().__init__(message, code)
        self.previous = previous


# Export main components
__all__ = [
    "EntityTestError", "HookError", "HookRegistrationError",
    "UnknownEntityTypeError", "UnknownFieldError", "EntityStorageError"
]
