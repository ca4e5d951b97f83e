from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .base import DocumentMixin
from .property import Property


class Review(DocumentMixin, models.Model):
    DOCUMENT_FIELDS = ("property_id", "student_id", "student_name", "rating", "comment", "date")

    property = models.ForeignKey(Property, on_delete=models.CASCADE, related_name="reviews")
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        limit_choices_to={"role": "student"},
        related_name="reviews",
    )
    student_name = models.CharField(max_length=255)
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField()
    date = models.DateTimeField()

    # No unique (property, student) constraint: one review per student is
    # checked by ReviewService only.
    class Meta:
        ordering = ["-date", "-id"]

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"Review for {self.property.name} by {self.student_name}"
