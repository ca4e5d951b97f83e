"""Rules for ``enrollments`` documents."""

from __future__ import annotations

from .base import CollectionRules, Decision, WriteRequest, check_exact_keys

ENROLLMENT_FIELDS = frozenset(
    {
        "property_id",
        "property_name",
        "student_id",
        "student_name",
        "landlord_id",
        "check_in_date",
        "rent_due_date",
        "check_out_date",
        "is_active",
    }
)
SCHEDULE_FIELDS = frozenset({"student_name", "check_in_date", "rent_due_date", "check_out_date"})
CHECKOUT_FIELDS = frozenset({"is_active", "actual_checkout_date"})


class EnrollmentRules(CollectionRules):
    collection = "enrollments"

    def read(self, request: WriteRequest) -> Decision:
        before = request.before
        if request.auth.owns(before.get("student_id")) or request.auth.owns(before.get("landlord_id")):
            return Decision.allow()
        return Decision.deny("enrollments are visible to their student and landlord")

    def create(self, request: WriteRequest) -> Decision:
        data = request.after
        auth = request.auth
        if not auth.is_landlord:
            return Decision.deny("only landlords enroll students")
        if not auth.owns(data.get("landlord_id")):
            return Decision.deny("landlord_id must match the requester")
        property_doc = request.related.get("property") or {}
        if not auth.owns(property_doc.get("landlord_id")):
            return Decision.deny("landlords may only enroll into their own properties")
        keys = check_exact_keys(data, ENROLLMENT_FIELDS)
        if not keys:
            return keys
        if data["is_active"] is not True:
            return Decision.deny("new enrollments must be active")
        return Decision.allow()

    def update(self, request: WriteRequest) -> Decision:
        before, after = request.before, request.after
        auth = request.auth
        changed = request.affected_keys()
        if auth.owns(before.get("landlord_id")):
            if not changed or not changed <= SCHEDULE_FIELDS:
                return Decision.deny(f"landlords may only change {sorted(SCHEDULE_FIELDS)}")
            return Decision.allow()
        if auth.owns(before.get("student_id")):
            if changed != CHECKOUT_FIELDS:
                return Decision.deny(f"checkout must change exactly {sorted(CHECKOUT_FIELDS)}")
            if before.get("is_active") is not True or after.get("is_active") is not False:
                return Decision.deny("is_active may only go from true to false")
            if after.get("actual_checkout_date") != request.time:
                return Decision.deny("actual_checkout_date must be set by the server")
            return Decision.allow()
        return Decision.deny("only the student or landlord may update an enrollment")

    def delete(self, request: WriteRequest) -> Decision:
        if request.auth.owns(request.before.get("landlord_id")):
            return Decision.allow()
        return Decision.deny("only the landlord may delete an enrollment")
