"""Access rules for every document collection and storage path.

Services call :func:`enforce` before they persist anything; a failed
predicate raises :class:`~core.exceptions.RuleDenied` carrying nothing but
the blanket permission message.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping

from ..exceptions import RuleDenied
from .base import (
    CREATE,
    DELETE,
    READ,
    UPDATE,
    AuthContext,
    CollectionRules,
    Decision,
    WriteRequest,
    affected_keys,
)
from .enrollments import EnrollmentRules
from .interests import BookingInterestRules
from .properties import PropertyRules
from .reviews import ReviewRules
from .storage import WRITE, check_storage
from .users import UserRules

logger = logging.getLogger(__name__)

RULES: dict[str, CollectionRules] = {
    rules.collection: rules
    for rules in (UserRules(), PropertyRules(), ReviewRules(), BookingInterestRules(), EnrollmentRules())
}


def evaluate(
    collection: str,
    operation: str,
    auth: AuthContext,
    *,
    resource: Mapping[str, Any] | None = None,
    data: Mapping[str, Any] | None = None,
    related: Mapping[str, Mapping[str, Any]] | None = None,
    time: datetime | None = None,
) -> Decision:
    rules = RULES.get(collection)
    if rules is None:
        return Decision.deny(f"no rules for collection {collection!r}")
    request = WriteRequest(
        collection=collection,
        operation=operation,
        auth=auth,
        resource=resource,
        data=data,
        related=related or {},
        time=time,
    )
    return rules.check(request)


def enforce(collection: str, operation: str, auth: AuthContext, **kwargs) -> None:
    decision = evaluate(collection, operation, auth, **kwargs)
    if not decision:
        logger.info("Denied %s on %s for uid=%s: %s", operation, collection, auth.uid, decision.reason)
        raise RuleDenied(collection, operation, decision.reason)


def enforce_storage(operation: str, auth: AuthContext, path: str, **kwargs) -> None:
    decision = check_storage(operation, auth, path, **kwargs)
    if not decision:
        logger.info("Denied storage %s of %s for uid=%s: %s", operation, path, auth.uid, decision.reason)
        raise RuleDenied(path, operation, decision.reason)


__all__ = [
    "READ",
    "CREATE",
    "UPDATE",
    "DELETE",
    "WRITE",
    "AuthContext",
    "Decision",
    "WriteRequest",
    "affected_keys",
    "check_storage",
    "evaluate",
    "enforce",
    "enforce_storage",
]
