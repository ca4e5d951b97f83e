from django.conf import settings
from django.db import models

from .base import DocumentMixin
from .property import Property


class BookingInterest(DocumentMixin, models.Model):
    STATUS_PENDING = "pending"
    STATUS_CONTACTED = "contacted"
    STATUS_REJECTED = "rejected"
    STATUS_ACCEPTED = "accepted"
    STATUS_ARCHIVED = "archived"
    STATUS_CHOICES = (
        (STATUS_PENDING, "Pending"),
        (STATUS_CONTACTED, "Contacted"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_ARCHIVED, "Archived"),
    )

    DOCUMENT_FIELDS = (
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
    )
    OPTIONAL_DOCUMENT_FIELDS = ("national_id_photo_url", "student_id_photo_url", "updated_at")

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="booking_interests")
    property_name = models.CharField(max_length=255)
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="booking_interests",
    )
    student_name = models.CharField(max_length=255)
    student_email = models.EmailField()
    national_id = models.CharField(max_length=50)
    student_app_id = models.CharField(max_length=50)
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    national_id_photo_url = models.CharField(max_length=500, blank=True)
    student_id_photo_url = models.CharField(max_length=500, blank=True)
    message = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING)
    submitted_at = models.DateTimeField()
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-submitted_at", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"{self.student_name} interested in {self.property_name} ({self.status})"
