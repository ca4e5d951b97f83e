from django.conf import settings
from django.db import models

from .base import DocumentMixin
from .property import Property


class Enrollment(DocumentMixin, models.Model):
    SCHEDULE_FIELDS = ("student_name", "check_in_date", "rent_due_date", "check_out_date")
    DOCUMENT_FIELDS = (
        "property_id",
        "property_name",
        "student_id",
        "student_name",
        "landlord_id",
        "check_in_date",
        "rent_due_date",
        "check_out_date",
        "is_active",
    )
    OPTIONAL_DOCUMENT_FIELDS = ("actual_checkout_date",)

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="enrollments")
    property_name = models.CharField(max_length=255)
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="enrollments",
    )
    student_name = models.CharField(max_length=255)
    landlord = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="managed_enrollments",
    )
    check_in_date = models.DateField()
    rent_due_date = models.DateField()
    check_out_date = models.DateField()
    is_active = models.BooleanField(default=True)
    actual_checkout_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-check_in_date", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        state = "active" if self.is_active else "checked out"
        return f"{self.student_name} at {self.property_name} ({state})"
