"""
Access Results - Verdicts with Cacheability

🔐 Verdict algebra:
An access result is one of allowed, forbidden or neutral and carries the
cacheability metadata describing how long and under which conditions the
verdict may be reused. Independent callbacks each produce a result; the
results are folded into one decision with ``or_if``:

    forbidden dominates  >  allowed  >  neutral

Cacheability travels with the verdict. ``or_if`` only merges the metadata
of the operand that actually determined the outcome, unless both agree,
so a cheap cacheable "allowed" is not poisoned by an irrelevant
uncacheable neutral.
"""

from typing import Any, Callable, Iterable, Optional, Set
from enum import Enum
from functools import reduce

# Cache max-age meaning "may be reused indefinitely"
PERMANENT = -1
# Cache max-age meaning "must not be reused"
UNCACHEABLE = 0


def merge_max_ages(a: int, b: int) -> int:
    """Return the stricter of two max-ages, treating PERMANENT as infinity"""
    if a == PERMANENT:
        return b
    if b == PERMANENT:
        return a
    return min(a, b)


class CacheableMetadata:
    """Cache tags, cache contexts and max-age of a cacheable value"""

    def __init__(self):
        self._cache_tags: Set[str] = set()
        self._cache_contexts: Set[str] = set()
        self._cache_max_age: int = PERMANENT

    def get_cache_tags(self) -> Set[str]:
        return set(self._cache_tags)

    def get_cache_contexts(self) -> Set[str]:
        return set(self._cache_contexts)

    def get_cache_max_age(self) -> int:
        return self._cache_max_age

    def add_cache_tags(self, tags: Iterable[str]):
        self._cache_tags.update(tags)
        return self

    def add_cache_contexts(self, contexts: Iterable[str]):
        self._cache_contexts.update(contexts)
        return self

    def set_cache_max_age(self, max_age: int):
        if max_age < PERMANENT:
            raise ValueError(f"Invalid cache max-age: {max_age}")
        self._cache_max_age = max_age
        return self

    def merge_cache_max_age(self, max_age: int):
        self._cache_max_age = merge_max_ages(self._cache_max_age, max_age)
        return self

    def add_cacheable_dependency(self, other: Any):
        """
        Make this value depend on ``other``.

        Objects that do not expose cacheability are unknown to the cache
        system, so depending on one makes this value uncacheable.
        """
        if is_cacheable_dependency(other):
            self._cache_tags.update(other.get_cache_tags())
            self._cache_contexts.update(other.get_cache_contexts())
            self.merge_cache_max_age(other.get_cache_max_age())
        else:
            self._cache_max_age = UNCACHEABLE
        return self

    def inherit_cacheability(self, other: Any):
        """Merge the cacheability of another cacheable value into this one"""
        if is_cacheable_dependency(other):
            self._cache_tags.update(other.get_cache_tags())
            self._cache_contexts.update(other.get_cache_contexts())
            self.merge_cache_max_age(other.get_cache_max_age())
        return self


def is_cacheable_dependency(obj: Any) -> bool:
    return all(
        callable(getattr(obj, name, None))
        for name in ("get_cache_tags", "get_cache_contexts", "get_cache_max_age")
    )


class Verdict(Enum):
    """Access decision values"""
    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"
    NEUTRAL = "neutral"


class AccessResult(CacheableMetadata):
    """
    An access verdict with cacheability metadata.

    Results are built through the class constructors and refined by
    chaining, mirroring how callbacks read:

        AccessResult.allowed().add_cacheable_dependency(entity)
    """

    def __init__(self, verdict: Verdict = Verdict.NEUTRAL, reason: str = ""):
        super().__init__()
        self.verdict = verdict
        self.reason = reason

    # Constructors
    @classmethod
    def allowed(cls) -> 'AccessResult':
        return cls(Verdict.ALLOWED)

    @classmethod
    def forbidden(cls, reason: str = "") -> 'AccessResult':
        return cls(Verdict.FORBIDDEN, reason)

    @classmethod
    def neutral(cls, reason: str = "") -> 'AccessResult':
        return cls(Verdict.NEUTRAL, reason)

    @classmethod
    def allowed_if(cls, condition: bool) -> 'AccessResult':
        """Allowed when the condition holds, neutral otherwise"""
        return cls.allowed() if condition else cls.neutral()

    @classmethod
    def forbidden_if(cls, condition: bool, reason: str = "") -> 'AccessResult':
        """Forbidden when the condition holds, neutral otherwise"""
        return cls.forbidden(reason) if condition else cls.neutral()

    @classmethod
    def allowed_if_has_permission(cls, account, permission: str) -> 'AccessResult':
        """Allowed when the account holds the permission; varies per permissions"""
        result = cls.allowed_if(account.has_permission(permission))
        if result.is_neutral():
            result.reason = f"The '{permission}' permission is required."
        return result.cache_per_permissions()

    @classmethod
    def allowed_if_has_permissions(cls, account, permissions: Iterable[str], conjunction: str = "AND") -> 'AccessResult':
        permissions = list(permissions)
        if conjunction == "AND":
            granted = all(account.has_permission(p) for p in permissions)
        elif conjunction == "OR":
            granted = any(account.has_permission(p) for p in permissions)
        else:
            raise ValueError(f"Invalid conjunction: {conjunction}. Must be 'AND' or 'OR'")

        result = cls.allowed_if(granted)
        if result.is_neutral():
            joined = f" {conjunction.lower()} ".join(f"'{p}'" for p in permissions)
            result.reason = f"The following permissions are required: {joined}."
        return result.cache_per_permissions()

    # Verdict checks
    def is_allowed(self) -> bool:
        return self.verdict is Verdict.ALLOWED

    def is_forbidden(self) -> bool:
        return self.verdict is Verdict.FORBIDDEN

    def is_neutral(self) -> bool:
        return self.verdict is Verdict.NEUTRAL

    def cache_per_permissions(self) -> 'AccessResult':
        return self.add_cache_contexts(["user.permissions"])

    # Combination
    def or_if(self, other: 'AccessResult') -> 'AccessResult':
        """
        Combine with another result: forbidden beats allowed beats neutral.

        The other result's cacheability is merged when it determined the
        outcome, when this result is uncacheable but the other agrees with
        the outcome, or when neither is forbidden and both are cacheable.
        """
        merge_other = False

        if self.is_forbidden() or other.is_forbidden():
            result = AccessResult.forbidden()
            if not self.is_forbidden() or (self.get_cache_max_age() == UNCACHEABLE and other.is_forbidden()):
                merge_other = True
            result.reason = self.reason if self.is_forbidden() and self.reason else (
                other.reason if other.is_forbidden() else ""
            )
        elif self.is_allowed() or other.is_allowed():
            result = AccessResult.allowed()
            if (not self.is_allowed()
                    or (self.get_cache_max_age() == UNCACHEABLE and other.is_allowed())
                    or (self.get_cache_max_age() != UNCACHEABLE and other.get_cache_max_age() != UNCACHEABLE)):
                merge_other = True
        else:
            result = AccessResult.neutral()
            if (self.get_cache_max_age() == UNCACHEABLE
                    or other.get_cache_max_age() != UNCACHEABLE):
                merge_other = True
            result.reason = self.reason or other.reason

        result.inherit_cacheability(self)
        if merge_other:
            result.inherit_cacheability(other)
        return result

    def and_if(self, other: 'AccessResult') -> 'AccessResult':
        """Combine requiring both to allow; forbidden still dominates"""
        merge_other = False

        if self.is_forbidden() or other.is_forbidden():
            result = AccessResult.forbidden()
            if not self.is_forbidden():
                merge_other = True
                result.reason = other.reason
            else:
                result.reason = self.reason
        elif self.is_allowed() and other.is_allowed():
            result = AccessResult.allowed()
            merge_other = True
        else:
            result = AccessResult.neutral()
            if not self.is_neutral():
                merge_other = True
                result.reason = other.reason
            else:
                result.reason = self.reason

        result.inherit_cacheability(self)
        if merge_other:
            result.inherit_cacheability(other)
        return result

    def __repr__(self):
        return (
            f"AccessResult({self.verdict.value}, max_age={self.get_cache_max_age()}, "
            f"tags={sorted(self.get_cache_tags())})"
        )


CombineOperator = Callable[[AccessResult, AccessResult], AccessResult]


def combine(results: Iterable[Optional[AccessResult]], operator: Optional[CombineOperator] = None) -> AccessResult:
    """
    Fold an ordered sequence of verdicts into one.

    ``None`` entries (callbacks without an opinion) are skipped. An empty
    sequence yields neutral. The default operator is ``or_if``.
    """
    operator = operator or AccessResult.or_if
    results = [result for result in results if result is not None]
    if not results:
        return AccessResult.neutral()
    return reduce(operator, results)


# Export main components
__all__ = [
    "PERMANENT", "UNCACHEABLE", "merge_max_ages", "CacheableMetadata",
    "is_cacheable_dependency", "Verdict", "AccessResult", "combine"
]
