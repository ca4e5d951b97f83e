from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from django.db import transaction
from django.db.models import Avg, Count, F
from django.utils import timezone

from ..exceptions import DuplicateReviewError, RuleDenied
from ..forms import ReviewForm
from ..models import Property, Review
from ..rules import CREATE, DELETE, UPDATE, AuthContext, enforce

logger = logging.getLogger(__name__)

REVIEWS = "reviews"
PROPERTIES = "properties"


@dataclass(frozen=True)
class ReviewEligibility:
    can_review: bool
    reason: str | None = None


def refresh_rating(prop: Property, auth: AuthContext, review_delta: int, *, time=None) -> Property:
    """Recompute ``average_rating`` from stored reviews and write it back.

    ``review_delta`` is the change in the number of reviews caused by the
    write that triggered the refresh (+1, 0 or -1).
    """
    time = time or timezone.now()
    stats = Review.objects.filter(property=prop).aggregate(avg=Avg("rating"), total=Count("id"))
    average = float(Decimal(str(stats["avg"] or 0)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))

    prop.refresh_from_db()
    before = prop.to_document()
    if review_delta == 0 and before["average_rating"] == average:
        return prop
    after = dict(before, average_rating=average, updated_at=time)
    after["review_count"] = before["review_count"] + review_delta
    enforce(PROPERTIES, UPDATE, auth, resource=before, data=after, time=time)

    Property.objects.filter(pk=prop.pk).update(
        average_rating=average,
        review_count=F("review_count") + review_delta,
        updated_at=time,
    )
    prop.refresh_from_db()
    return prop


class ReviewService:
    """Handle review creation, edits and the property's rating summary."""

    def __init__(self, user):
        self.user = user
        self.auth = AuthContext.for_user(user)

    def user_review(self, prop: Property) -> Review | None:
        if not self.auth.is_authenticated:
            return None
        return Review.objects.filter(property=prop, student_id=self.user.pk).first()

    def eligibility(self, prop: Property) -> ReviewEligibility:
        if not self.auth.is_authenticated:
            return ReviewEligibility(False, "You must be logged in to review this property.")
        if not self.auth.is_student:
            return ReviewEligibility(False, "Only students can review properties.")
        if self.user_review(prop) is not None:
            return ReviewEligibility(False, "You have already reviewed this property.")
        return ReviewEligibility(True, None)

    def reviews(self, prop: Property):
        return prop.reviews.order_by("-date", "-id")

    @transaction.atomic
    def add(self, prop: Property, data: dict[str, Any]) -> tuple[bool, ReviewForm, Review | None]:
        form = ReviewForm(data=data)
        if not form.is_valid():
            return False, form, None
        if self.user_review(prop) is not None:
            raise DuplicateReviewError("You have already reviewed this property.")

        now = timezone.now()
        review = Review(
            property=prop,
            student=self.user,
            student_name=self.user.name or self.user.email,
            rating=form.cleaned_data["rating"],
            comment=form.cleaned_data["comment"],
            date=now,
        )
        enforce(REVIEWS, CREATE, self.auth, data=review.to_document(), time=now)
        review.save()
        refresh_rating(prop, self.auth, 1, time=now)
        logger.info("Student %s reviewed property %s", self.user.pk, prop.pk)
        return True, form, review

    @transaction.atomic
    def edit(self, review: Review, data: dict[str, Any]) -> tuple[bool, ReviewForm, Review | None]:
        before = review.to_document()
        merged = {"rating": review.rating, "comment": review.comment}
        merged.update({name: data[name] for name in ("rating", "comment") if name in data})
        form = ReviewForm(data=merged, instance=review)
        if not form.is_valid():
            review.refresh_from_db()
            return False, form, None
        now = timezone.now()
        review.date = now
        try:
            enforce(REVIEWS, UPDATE, self.auth, resource=before, data=review.to_document(), time=now)
        except RuleDenied:
            review.refresh_from_db()
            raise
        review.save()
        refresh_rating(review.property, self.auth, 0, time=now)
        return True, form, review

    @transaction.atomic
    def delete(self, review: Review) -> None:
        enforce(REVIEWS, DELETE, self.auth, resource=review.to_document())
        prop = review.property
        review.delete()
        refresh_rating(prop, self.auth, -1)
        logger.info("Student %s deleted review on property %s", self.user.pk, prop.pk)
