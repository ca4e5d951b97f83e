from __future__ import annotations

import logging
from typing import Any

from django.db import transaction
from django.utils import timezone

from ..exceptions import InterestStateError, RuleDenied, StudentNotFoundError
from ..forms import EnrollFromInterestForm, EnrollmentScheduleForm, StudentEnrollmentForm
from ..models import BookingInterest, Enrollment, Property, User
from ..rules import CREATE, DELETE, READ, UPDATE, AuthContext, enforce
from .interests import set_interest_status
from .properties import change_counter

logger = logging.getLogger(__name__)

ENROLLMENTS = "enrollments"
ENROLLABLE_STATUSES = (BookingInterest.STATUS_PENDING, BookingInterest.STATUS_CONTACTED)


class EnrollmentService:
    """Landlord-side tenancy management."""

    def __init__(self, landlord):
        self.landlord = landlord
        self.auth = AuthContext.for_user(landlord)

    def for_property(self, prop: Property) -> list[Enrollment]:
        enrollments = list(prop.enrollments.filter(is_active=True).order_by("-check_in_date", "-id"))
        for enrollment in enrollments:
            enforce(ENROLLMENTS, READ, self.auth, resource=enrollment.to_document())
        return enrollments

    def _create(self, prop: Property, student: User, student_name: str, dates: dict[str, Any]) -> Enrollment:
        enrollment = Enrollment(
            property=prop,
            property_name=prop.name,
            student=student,
            student_name=student_name,
            landlord=self.landlord,
            check_in_date=dates["check_in_date"],
            rent_due_date=dates["rent_due_date"],
            check_out_date=dates["check_out_date"],
            is_active=True,
        )
        enforce(
            ENROLLMENTS,
            CREATE,
            self.auth,
            data=enrollment.to_document(),
            related={"property": prop.to_document()},
        )
        enrollment.save()
        return enrollment

    @transaction.atomic
    def enroll_from_interest(self, interest: BookingInterest, data) -> tuple[bool, EnrollFromInterestForm, Enrollment | None]:
        """Accept ``interest`` and turn it into an active enrollment."""
        form = EnrollFromInterestForm(data)
        if not form.is_valid():
            return False, form, None
        if interest.status not in ENROLLABLE_STATUSES:
            raise InterestStateError(f"Cannot enroll from an interest that is {interest.status}.")

        prop = interest.property
        enrollment = self._create(prop, interest.student, interest.student_name, form.cleaned_data)
        set_interest_status(self.auth, interest, BookingInterest.STATUS_ACCEPTED)
        change_counter(prop, self.auth, "enrolled_students_count", 1)
        change_counter(prop, self.auth, "interested_count", -1)
        logger.info("Landlord %s enrolled student %s from interest %s", self.landlord.pk, interest.student_id, interest.pk)
        return True, form, enrollment

    @transaction.atomic
    def enroll_student(self, prop: Property, data) -> tuple[bool, StudentEnrollmentForm, Enrollment | None]:
        """Enroll an existing student account found by email."""
        form = StudentEnrollmentForm(data)
        if not form.is_valid():
            return False, form, None
        email = form.cleaned_data["student_email"]
        student = User.objects.filter(email__iexact=email, role=User.ROLE_STUDENT).first()
        if student is None:
            raise StudentNotFoundError(f"No student account found for {email}.")

        enrollment = self._create(prop, student, form.cleaned_data["name"], form.cleaned_data)
        change_counter(prop, self.auth, "enrolled_students_count", 1)
        logger.info("Landlord %s enrolled student %s in property %s", self.landlord.pk, student.pk, prop.pk)
        return True, form, enrollment

    def edit(self, enrollment: Enrollment, data) -> tuple[bool, EnrollmentScheduleForm, Enrollment | None]:
        before = enrollment.to_document()
        # Fields left out of a partial edit keep their stored values.
        merged = {name: before[name] for name in Enrollment.SCHEDULE_FIELDS}
        merged.update({name: data[name] for name in Enrollment.SCHEDULE_FIELDS if name in data})
        form = EnrollmentScheduleForm(merged, instance=enrollment)
        if not form.is_valid():
            enrollment.refresh_from_db()
            return False, form, None
        try:
            enforce(ENROLLMENTS, UPDATE, self.auth, resource=before, data=enrollment.to_document())
        except RuleDenied:
            enrollment.refresh_from_db()
            raise
        enrollment.save(update_fields=list(Enrollment.SCHEDULE_FIELDS))
        return True, form, enrollment

    @transaction.atomic
    def remove(self, enrollment: Enrollment) -> None:
        enforce(ENROLLMENTS, DELETE, self.auth, resource=enrollment.to_document())
        prop = enrollment.property
        was_active = enrollment.is_active
        enrollment.delete()
        if was_active:
            change_counter(prop, self.auth, "enrolled_students_count", -1)
        logger.info("Landlord %s removed enrollment from property %s", self.landlord.pk, prop.pk)


class StudentRentalService:
    """The student's current tenancy and self checkout."""

    def __init__(self, student):
        self.student = student
        self.auth = AuthContext.for_user(student)

    def current(self) -> Enrollment | None:
        enrollment = (
            Enrollment.objects.filter(student=self.student, is_active=True)
            .select_related("property")
            .order_by("-check_out_date", "-id")
            .first()
        )
        if enrollment is not None:
            enforce(ENROLLMENTS, READ, self.auth, resource=enrollment.to_document())
        return enrollment

    @transaction.atomic
    def checkout(self, enrollment: Enrollment) -> Enrollment:
        now = timezone.now()
        before = enrollment.to_document()
        after = dict(before, is_active=False, actual_checkout_date=now)
        enforce(ENROLLMENTS, UPDATE, self.auth, resource=before, data=after, time=now)
        enrollment.is_active = False
        enrollment.actual_checkout_date = now
        enrollment.save(update_fields=["is_active", "actual_checkout_date"])
        change_counter(enrollment.property, self.auth, "enrolled_students_count", -1, time=now)
        logger.info("Student %s checked out of property %s", self.student.pk, enrollment.property_id)
        return enrollment
