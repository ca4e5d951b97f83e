from django.conf import settings
from django.db import models
from django.utils import timezone

from .base import DocumentMixin

PLACEHOLDER_IMAGE = {"url": "https://placehold.co/600x400.png", "hint": "property exterior default"}


class Property(DocumentMixin, models.Model):
    TYPE_CHOICES = (
        ("Single Room", "Single Room"),
        ("Shared Room", "Shared Room"),
        ("Apartment", "Apartment"),
        ("House", "House"),
    )
    GENDER_CHOICES = (
        ("Male", "Male"),
        ("Female", "Female"),
        ("Mixed", "Mixed"),
        ("Any", "Any"),
    )

    COUNTER_FIELDS = (
        "view_count",
        "interested_count",
        "enrolled_students_count",
        "average_rating",
        "review_count",
    )
    EDITABLE_FIELDS = (
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
    )
    DOCUMENT_FIELDS = EDITABLE_FIELDS + ("landlord_id", "created_at", "updated_at") + COUNTER_FIELDS

    landlord = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        limit_choices_to={"role": "landlord"},
        related_name="properties",
    )
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    suburb = models.CharField(max_length=100, blank=True)
    description = models.TextField()
    property_type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    capacity = models.PositiveIntegerField()
    gender_preference = models.CharField(max_length=10, choices=GENDER_CHOICES, default="Any")
    amenities = models.JSONField(default=list, blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    # Each window is {"from": "YYYY-MM-DD", "to": "YYYY-MM-DD" | None}.
    availability = models.JSONField(default=list, blank=True)
    # Each image is {"url": ..., "hint": ...}.
    images = models.JSONField(default=list, blank=True)

    landlord_name = models.CharField(max_length=255)
    landlord_email = models.EmailField()
    landlord_phone_number = models.CharField(max_length=20)

    view_count = models.PositiveIntegerField(default=0)
    interested_count = models.PositiveIntegerField(default=0)
    enrolled_students_count = models.PositiveIntegerField(default=0)
    review_count = models.PositiveIntegerField(default=0)
    average_rating = models.FloatField(default=0)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "properties"

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return self.name

    @property
    def primary_image(self) -> dict:
        return self.images[0] if self.images else PLACEHOLDER_IMAGE
