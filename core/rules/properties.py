"""Rules for ``properties`` documents.

Reads are public. Updates come in five mutually exclusive shapes; a
discriminator picks the shape from the diff, then a generic check demands
that the diff touches exactly the keys that shape expects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Mapping

from .base import (
    CollectionRules,
    Decision,
    WriteRequest,
    affected_keys,
    check_exact_keys,
)

COUNTER_FIELDS = frozenset(
    {
        "view_count",
        "interested_count",
        "enrolled_students_count",
        "average_rating",
        "review_count",
    }
)
EDITABLE_FIELDS = frozenset(
    {
        "name",
        "address",
        "city",
        "suburb",
        "description",
        "property_type",
        "capacity",
        "gender_preference",
        "amenities",
        "price",
        "availability",
        "images",
        "landlord_name",
        "landlord_email",
        "landlord_phone_number",
    }
)
PROPERTY_FIELDS = EDITABLE_FIELDS | COUNTER_FIELDS | {"landlord_id", "created_at", "updated_at"}
MAX_RATING = 5


def _delta(before: Mapping[str, Any], after: Mapping[str, Any], key: str) -> int | None:
    old, new = before.get(key, 0), after.get(key, 0)
    if isinstance(old, bool) or isinstance(new, bool):
        return None
    if not isinstance(old, int) or not isinstance(new, int):
        return None
    return new - old


@dataclass(frozen=True)
class PropertyUpdate:
    """Base for the tagged update variants."""

    kind: ClassVar[str] = ""

    def expected_keys(self) -> frozenset[str]:
        raise NotImplementedError

    def check_keys(self, changed: frozenset[str]) -> Decision:
        expected = self.expected_keys()
        if changed == expected:
            return Decision.allow()
        return Decision.deny(
            f"{self.kind} must change exactly {sorted(expected)}, changed {sorted(changed)}"
        )

    def authorize(self, request: WriteRequest) -> Decision:
        raise NotImplementedError


@dataclass(frozen=True)
class ViewIncrement(PropertyUpdate):
    kind: ClassVar[str] = "view increment"
    delta: int | None

    def expected_keys(self) -> frozenset[str]:
        return frozenset({"view_count", "updated_at"})

    def authorize(self, request: WriteRequest) -> Decision:
        if self.delta != 1:
            return Decision.deny("view_count may only grow by one")
        return Decision.allow()


@dataclass(frozen=True)
class InterestIncrement(PropertyUpdate):
    kind: ClassVar[str] = "interest count change"
    delta: int | None

    def expected_keys(self) -> frozenset[str]:
        return frozenset({"interested_count", "updated_at"})

    def authorize(self, request: WriteRequest) -> Decision:
        auth = request.auth
        if self.delta == 1 and auth.is_student:
            return Decision.allow()
        if self.delta == -1 and auth.owns(request.before.get("landlord_id")):
            return Decision.allow()
        return Decision.deny("interested_count: +1 by a student or -1 by the owning landlord")


@dataclass(frozen=True)
class RatingUpdate(PropertyUpdate):
    kind: ClassVar[str] = "rating update"
    average_rating: Any
    average_changed: bool
    review_delta: int | None

    def expected_keys(self) -> frozenset[str]:
        keys = {"updated_at"}
        if self.average_changed:
            keys.add("average_rating")
        if self.review_delta != 0:
            keys.add("review_count")
        return frozenset(keys)

    def authorize(self, request: WriteRequest) -> Decision:
        if not request.auth.is_student:
            return Decision.deny("only students update ratings")
        rating = self.average_rating
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            return Decision.deny("average_rating must be a number")
        if not 0 <= rating <= MAX_RATING:
            return Decision.deny("average_rating must be within [0, 5]")
        if self.review_delta not in (-1, 0, 1):
            return Decision.deny("review_count may only change by one")
        return Decision.allow()


@dataclass(frozen=True)
class EnrollmentCountChange(PropertyUpdate):
    kind: ClassVar[str] = "enrollment count change"
    delta: int | None

    def expected_keys(self) -> frozenset[str]:
        return frozenset({"enrolled_students_count", "updated_at"})

    def authorize(self, request: WriteRequest) -> Decision:
        auth = request.auth
        if self.delta in (1, -1) and auth.owns(request.before.get("landlord_id")):
            return Decision.allow()
        if self.delta == -1 and auth.is_student:
            return Decision.allow()
        return Decision.deny("enrolled_students_count: +/-1 by the owning landlord or -1 by a student")


@dataclass(frozen=True)
class LandlordEdit(PropertyUpdate):
    kind: ClassVar[str] = "landlord edit"
    changed: frozenset[str]

    def expected_keys(self) -> frozenset[str]:
        return EDITABLE_FIELDS | {"updated_at"}

    def check_keys(self, changed: frozenset[str]) -> Decision:
        if "updated_at" not in changed:
            return Decision.deny("landlord edits must stamp updated_at")
        extra = sorted(changed - self.expected_keys())
        if extra:
            return Decision.deny(f"landlord edits may not change {extra}")
        return Decision.allow()

    def authorize(self, request: WriteRequest) -> Decision:
        if not request.auth.owns(request.before.get("landlord_id")):
            return Decision.deny("only the owning landlord may edit the listing")
        return Decision.allow()


def classify_update(before: Mapping[str, Any], after: Mapping[str, Any]) -> PropertyUpdate:
    changed = affected_keys(before, after)
    if "view_count" in changed:
        return ViewIncrement(delta=_delta(before, after, "view_count"))
    if "interested_count" in changed:
        return InterestIncrement(delta=_delta(before, after, "interested_count"))
    if "enrolled_students_count" in changed:
        return EnrollmentCountChange(delta=_delta(before, after, "enrolled_students_count"))
    if changed & {"average_rating", "review_count"}:
        return RatingUpdate(
            average_rating=after.get("average_rating"),
            average_changed="average_rating" in changed,
            review_delta=_delta(before, after, "review_count"),
        )
    return LandlordEdit(changed=changed)


def _counters_valid(document: Mapping[str, Any]) -> Decision:
    for name in COUNTER_FIELDS:
        value = document.get(name, 0)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            return Decision.deny(f"{name} must be a non-negative number")
    return Decision.allow()


class PropertyRules(CollectionRules):
    collection = "properties"

    def read(self, request: WriteRequest) -> Decision:
        return Decision.allow()

    def create(self, request: WriteRequest) -> Decision:
        data = request.after
        if not request.auth.is_landlord:
            return Decision.deny("only landlords create listings")
        if not request.auth.owns(data.get("landlord_id")):
            return Decision.deny("landlord_id must match the requester")
        keys = check_exact_keys(data, PROPERTY_FIELDS)
        if not keys:
            return keys
        for name in COUNTER_FIELDS:
            if data[name] != 0:
                return Decision.deny(f"{name} must start at zero")
        if data["created_at"] != request.time or data["updated_at"] != request.time:
            return Decision.deny("timestamps must be set by the server")
        return Decision.allow()

    def update(self, request: WriteRequest) -> Decision:
        before, after = request.before, request.after
        changed = request.affected_keys()
        shape = classify_update(before, after)
        decision = shape.check_keys(changed)
        if not decision:
            return decision
        if after.get("updated_at") != request.time:
            return Decision.deny("updated_at must be set by the server")
        decision = _counters_valid(after)
        if not decision:
            return decision
        return shape.authorize(request)

    def delete(self, request: WriteRequest) -> Decision:
        if request.auth.owns(request.before.get("landlord_id")):
            return Decision.allow()
        return Decision.deny("only the owning landlord may delete the listing")
