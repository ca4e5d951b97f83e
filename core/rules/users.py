"""Rules for ``users`` documents: self-service only."""

from __future__ import annotations

from .base import (
    LANDLORD,
    ROLES,
    STUDENT,
    CollectionRules,
    Decision,
    WriteRequest,
    check_keys_between,
)

REQUIRED_FIELDS = frozenset({"uid", "name", "email", "phone_number", "role"})
COMMON_FIELDS = REQUIRED_FIELDS | {"profile_picture_url"}
STUDENT_ONLY_FIELDS = frozenset(
    {
        "national_id",
        "student_id",
        "next_of_kin_name",
        "next_of_kin_phone_number",
        "national_id_photo_url",
        "student_id_photo_url",
        "saved_property_ids",
    }
)
ALLOWED_FIELDS = {
    STUDENT: COMMON_FIELDS | STUDENT_ONLY_FIELDS,
    LANDLORD: COMMON_FIELDS,
}
IMMUTABLE_FIELDS = frozenset({"uid", "role", "email"})
MUTABLE_FIELDS = {role: fields - IMMUTABLE_FIELDS for role, fields in ALLOWED_FIELDS.items()}


class UserRules(CollectionRules):
    collection = "users"

    def read(self, request: WriteRequest) -> Decision:
        if request.auth.owns(request.before.get("uid")):
            return Decision.allow()
        return Decision.deny("users may only read their own document")

    def create(self, request: WriteRequest) -> Decision:
        data = request.after
        if not request.auth.owns(data.get("uid")):
            return Decision.deny("uid must match the requester")
        role = data.get("role")
        if role not in ROLES:
            return Decision.deny(f"invalid role {role!r}")
        if not isinstance(data.get("name"), str) or not data["name"].strip():
            return Decision.deny("name is required")
        return check_keys_between(data, REQUIRED_FIELDS, ALLOWED_FIELDS[role])

    def update(self, request: WriteRequest) -> Decision:
        before, after = request.before, request.after
        if not request.auth.owns(before.get("uid")):
            return Decision.deny("users may only write their own document")
        for name in IMMUTABLE_FIELDS:
            if after.get(name) != before.get(name):
                return Decision.deny(f"{name} is immutable")
        role = before.get("role")
        if role not in ROLES:
            return Decision.deny(f"stored role {role!r} is invalid")
        changed = request.affected_keys()
        disallowed = sorted(changed - MUTABLE_FIELDS[role])
        if disallowed:
            return Decision.deny(f"fields not writable for {role}: {disallowed}")
        return check_keys_between(after, REQUIRED_FIELDS, ALLOWED_FIELDS[role])
