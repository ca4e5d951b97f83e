from __future__ import annotations

import logging
from typing import Any, Iterable

from django.db import transaction
from django.utils import timezone

from ..exceptions import InterestStateError
from ..forms import BookingInterestForm, InterestStatusForm
from ..models import BookingInterest, Property
from ..rules import CREATE, READ, UPDATE, AuthContext, enforce
from .properties import change_counter

logger = logging.getLogger(__name__)

INTERESTS = "bookingInterests"


def set_interest_status(auth: AuthContext, interest: BookingInterest, status: str) -> BookingInterest:
    now = timezone.now()
    before = interest.to_document()
    after = dict(before, status=status, updated_at=now)
    enforce(
        INTERESTS,
        UPDATE,
        auth,
        resource=before,
        data=after,
        related={"property": interest.property.to_document()},
        time=now,
    )
    interest.status = status
    interest.updated_at = now
    interest.save(update_fields=["status", "updated_at"])
    return interest


class StudentInterestService:
    """Booking interests as seen by the student who submits them."""

    def __init__(self, student):
        self.student = student
        self.auth = AuthContext.for_user(student)

    def initial(self) -> dict[str, Any]:
        return {
            "student_name": self.student.name,
            "student_email": self.student.email,
            "national_id": self.student.national_id,
            "student_app_id": self.student.student_id,
        }

    def form(self, data: Any | None = None) -> BookingInterestForm:
        return BookingInterestForm(data, initial=self.initial())

    @transaction.atomic
    def submit(self, prop: Property, data) -> tuple[bool, BookingInterestForm, BookingInterest | None]:
        form = self.form(data)
        if not form.is_valid():
            return False, form, None

        now = timezone.now()
        interest = form.save(commit=False)
        interest.property = prop
        interest.property_name = prop.name
        interest.student = self.student
        interest.status = BookingInterest.STATUS_PENDING
        interest.submitted_at = now
        # ID photos come from the profile, never from the form.
        interest.national_id_photo_url = self.student.national_id_photo_url
        interest.student_id_photo_url = self.student.student_id_photo_url

        enforce(
            INTERESTS,
            CREATE,
            self.auth,
            data=interest.to_document(),
            related={"property": prop.to_document()},
            time=now,
        )
        interest.save()
        change_counter(prop, self.auth, "interested_count", 1, time=now)
        logger.info("Student %s registered interest %s in property %s", self.student.pk, interest.pk, prop.pk)
        return True, form, interest

    def interests(self):
        return BookingInterest.objects.filter(student=self.student).select_related("property")

    def archive(self, interest: BookingInterest) -> BookingInterest:
        if interest.student_id == self.student.pk and interest.status == BookingInterest.STATUS_ACCEPTED:
            raise InterestStateError("Accepted interests cannot be archived.")
        return set_interest_status(self.auth, interest, BookingInterest.STATUS_ARCHIVED)


class LandlordInterestService:
    """Booking interests received on a landlord's listings."""

    def __init__(self, landlord):
        self.landlord = landlord
        self.auth = AuthContext.for_user(landlord)

    def for_property(self, prop: Property, statuses: Iterable[str] = ()) -> list[BookingInterest]:
        queryset = prop.booking_interests.order_by("-submitted_at", "-id")
        if isinstance(statuses, str):
            statuses = [statuses]
        statuses = [status for status in statuses if status != "all"]
        if statuses:
            queryset = queryset.filter(status__in=statuses)
        property_doc = prop.to_document()
        interests = list(queryset)
        for interest in interests:
            enforce(INTERESTS, READ, self.auth, resource=interest.to_document(), related={"property": property_doc})
        return interests

    def update_status(self, interest: BookingInterest, data) -> tuple[bool, InterestStatusForm, BookingInterest | None]:
        form = InterestStatusForm(data)
        if not form.is_valid():
            return False, form, None
        set_interest_status(self.auth, interest, form.cleaned_data["status"])
        logger.info("Landlord %s moved interest %s to %s", self.landlord.pk, interest.pk, interest.status)
        return True, form, interest
