"""Building blocks shared by every collection's access rules.

Rules are pure predicates. They see who is asking (``AuthContext``), the
stored document (``resource``), the proposed document after the write
(``data``), any documents looked up on their behalf (``related``) and the
server time of the request. They answer with a ``Decision`` and never touch
the database themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping

READ = "read"
CREATE = "create"
UPDATE = "update"
DELETE = "delete"
OPERATIONS = (READ, CREATE, UPDATE, DELETE)

STUDENT = "student"
LANDLORD = "landlord"
ROLES = (STUDENT, LANDLORD)


@dataclass(frozen=True)
class AuthContext:
    uid: Any = None
    role: str | None = None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def for_user(cls, user) -> "AuthContext":
        if user is None or not getattr(user, "is_authenticated", False):
            return cls.anonymous()
        return cls(uid=user.pk, role=getattr(user, "role", None))

    @property
    def is_authenticated(self) -> bool:
        return self.uid is not None

    @property
    def is_student(self) -> bool:
        return self.is_authenticated and self.role == STUDENT

    @property
    def is_landlord(self) -> bool:
        return self.is_authenticated and self.role == LANDLORD

    def owns(self, owner_id: Any) -> bool:
        return self.is_authenticated and owner_id is not None and owner_id == self.uid


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""

    @classmethod
    def allow(cls) -> "Decision":
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, reason)

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True)
class WriteRequest:
    collection: str
    operation: str
    auth: AuthContext
    resource: Mapping[str, Any] | None = None
    data: Mapping[str, Any] | None = None
    related: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    time: datetime | None = None

    @property
    def before(self) -> Mapping[str, Any]:
        return self.resource or {}

    @property
    def after(self) -> Mapping[str, Any]:
        return self.data or {}

    def affected_keys(self) -> frozenset[str]:
        return affected_keys(self.before, self.after)


def affected_keys(before: Mapping[str, Any], after: Mapping[str, Any]) -> frozenset[str]:
    """Keys added, removed or changed between two versions of a document."""
    changed = set()
    for key in set(before) | set(after):
        if key not in before or key not in after or before[key] != after[key]:
            changed.add(key)
    return frozenset(changed)


def check_exact_keys(document: Mapping[str, Any], expected: Iterable[str]) -> Decision:
    expected = frozenset(expected)
    keys = frozenset(document)
    if keys == expected:
        return Decision.allow()
    missing = sorted(expected - keys)
    extra = sorted(keys - expected)
    return Decision.deny(f"key set mismatch (missing={missing}, extra={extra})")


def check_keys_between(document: Mapping[str, Any], required: Iterable[str], allowed: Iterable[str]) -> Decision:
    keys = frozenset(document)
    missing = sorted(frozenset(required) - keys)
    if missing:
        return Decision.deny(f"missing required keys {missing}")
    extra = sorted(keys - frozenset(allowed))
    if extra:
        return Decision.deny(f"keys not allowed {extra}")
    return Decision.allow()


class CollectionRules:
    """Default-deny rule set for one collection.

    Subclasses override ``read``/``create``/``update``/``delete``; anything
    left alone stays denied.
    """

    collection = ""

    def check(self, request: WriteRequest) -> Decision:
        if request.operation not in OPERATIONS:
            return Decision.deny(f"unknown operation {request.operation!r}")
        return getattr(self, request.operation)(request)

    def read(self, request: WriteRequest) -> Decision:
        return Decision.deny("reads are not permitted")

    def create(self, request: WriteRequest) -> Decision:
        return Decision.deny("creates are not permitted")

    def update(self, request: WriteRequest) -> Decision:
        return Decision.deny("updates are not permitted")

    def delete(self, request: WriteRequest) -> Decision:
        return Decision.deny("deletes are not permitted")
