"""Rules for ``bookingInterests`` documents.

The landlord of an interest is whoever owns the referenced property, so
reads and landlord updates need the property document in
``request.related["property"]``.
"""

from __future__ import annotations

from .base import CollectionRules, Decision, WriteRequest, check_keys_between

PENDING = "pending"
CONTACTED = "contacted"
REJECTED = "rejected"
ACCEPTED = "accepted"
ARCHIVED = "archived"
STATUSES = (PENDING, CONTACTED, REJECTED, ACCEPTED, ARCHIVED)

REQUIRED_FIELDS = frozenset(
    {
        "property_id",
        "property_name",
        "student_id",
        "student_name",
        "student_email",
        "national_id",
        "student_app_id",
        "check_in_date",
        "check_out_date",
        "message",
        "status",
        "submitted_at",
    }
)
OPTIONAL_FIELDS = frozenset({"national_id_photo_url", "student_id_photo_url"})
UPDATE_FIELDS = frozenset({"status", "updated_at"})

LANDLORD_TRANSITIONS = {
    PENDING: frozenset({CONTACTED, REJECTED, ACCEPTED}),
    CONTACTED: frozenset({REJECTED, ACCEPTED}),
    REJECTED: frozenset({ARCHIVED}),
    ACCEPTED: frozenset({ARCHIVED}),
}
STUDENT_ARCHIVABLE = frozenset({PENDING, CONTACTED, REJECTED})


def landlord_can_transition(current: str, new: str) -> bool:
    return new in LANDLORD_TRANSITIONS.get(current, frozenset())


def student_can_archive(current: str) -> bool:
    return current in STUDENT_ARCHIVABLE


def _property_landlord(request: WriteRequest):
    return (request.related.get("property") or {}).get("landlord_id")


class BookingInterestRules(CollectionRules):
    collection = "bookingInterests"

    def read(self, request: WriteRequest) -> Decision:
        auth = request.auth
        if auth.owns(request.before.get("student_id")) or auth.owns(_property_landlord(request)):
            return Decision.allow()
        return Decision.deny("interests are visible to the student and the property's landlord")

    def create(self, request: WriteRequest) -> Decision:
        data = request.after
        if not request.auth.is_student:
            return Decision.deny("only students submit interests")
        if not request.auth.owns(data.get("student_id")):
            return Decision.deny("student_id must match the requester")
        if "property" not in request.related:
            return Decision.deny("interest must reference an existing property")
        keys = check_keys_between(data, REQUIRED_FIELDS, REQUIRED_FIELDS | OPTIONAL_FIELDS)
        if not keys:
            return keys
        if data["status"] != PENDING:
            return Decision.deny("new interests must be pending")
        if data["submitted_at"] != request.time:
            return Decision.deny("submitted_at must be set by the server")
        if data["check_out_date"] < data["check_in_date"]:
            return Decision.deny("check-out must not precede check-in")
        return Decision.allow()

    def update(self, request: WriteRequest) -> Decision:
        before, after = request.before, request.after
        changed = request.affected_keys()
        if changed != UPDATE_FIELDS:
            return Decision.deny(f"interest updates must change exactly {sorted(UPDATE_FIELDS)}")
        if after.get("updated_at") != request.time:
            return Decision.deny("updated_at must be set by the server")
        current, new = before.get("status"), after.get("status")
        auth = request.auth
        if auth.owns(_property_landlord(request)):
            if landlord_can_transition(current, new):
                return Decision.allow()
            return Decision.deny(f"landlord may not move an interest from {current} to {new}")
        if auth.owns(before.get("student_id")):
            if new == ARCHIVED and student_can_archive(current):
                return Decision.allow()
            return Decision.deny(f"student may not move an interest from {current} to {new}")
        return Decision.deny("only the student or the property's landlord may update an interest")
