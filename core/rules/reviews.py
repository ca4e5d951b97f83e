"""Rules for ``reviews`` documents.

Nothing here stops a student from reviewing the same property twice;
``ReviewService`` checks that before writing.
"""

from __future__ import annotations

from typing import Any

from .base import CollectionRules, Decision, WriteRequest, check_exact_keys

REVIEW_FIELDS = frozenset({"property_id", "student_id", "student_name", "rating", "comment", "date"})
EDITABLE_FIELDS = frozenset({"rating", "comment", "date"})


def _valid_rating(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 5


def _valid_comment(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class ReviewRules(CollectionRules):
    collection = "reviews"

    def read(self, request: WriteRequest) -> Decision:
        return Decision.allow()

    def create(self, request: WriteRequest) -> Decision:
        data = request.after
        if not request.auth.is_student:
            return Decision.deny("only students write reviews")
        if not request.auth.owns(data.get("student_id")):
            return Decision.deny("student_id must match the requester")
        keys = check_exact_keys(data, REVIEW_FIELDS)
        if not keys:
            return keys
        if not _valid_rating(data["rating"]):
            return Decision.deny("rating must be an integer within [1, 5]")
        if not _valid_comment(data["comment"]):
            return Decision.deny("comment is required")
        if data["date"] != request.time:
            return Decision.deny("date must be set by the server")
        return Decision.allow()

    def update(self, request: WriteRequest) -> Decision:
        before, after = request.before, request.after
        if not request.auth.owns(before.get("student_id")):
            return Decision.deny("only the author may edit a review")
        changed = request.affected_keys()
        extra = sorted(changed - EDITABLE_FIELDS)
        if extra:
            return Decision.deny(f"review fields not editable: {extra}")
        if not _valid_rating(after.get("rating")):
            return Decision.deny("rating must be an integer within [1, 5]")
        if not _valid_comment(after.get("comment")):
            return Decision.deny("comment is required")
        if "date" in changed and after["date"] != request.time:
            return Decision.deny("date must be set by the server")
        return Decision.allow()

    def delete(self, request: WriteRequest) -> Decision:
        if request.auth.owns(request.before.get("student_id")):
            return Decision.allow()
        return Decision.deny("only the author may delete a review")
