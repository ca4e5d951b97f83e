from django.contrib.auth.models import AbstractUser
from django.db import models

from .base import DocumentMixin


class User(DocumentMixin, AbstractUser):
    ROLE_STUDENT = "student"
    ROLE_LANDLORD = "landlord"
    ROLE_CHOICES = (
        (ROLE_STUDENT, "Student"),
        (ROLE_LANDLORD, "Landlord"),
    )

    STUDENT_ONLY_FIELDS = (
        "national_id",
        "student_id",
        "next_of_kin_name",
        "next_of_kin_phone_number",
        "national_id_photo_url",
        "student_id_photo_url",
    )

    DOCUMENT_FIELDS = ("uid", "name", "email", "phone_number", "role")
    OPTIONAL_DOCUMENT_FIELDS = ("profile_picture_url",) + STUDENT_ONLY_FIELDS

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_STUDENT)
    name = models.CharField(max_length=255)
    phone_number = models.CharField(max_length=20)
    profile_picture_url = models.CharField(max_length=500, blank=True)

    # Student-only details; kept blank for landlords.
    national_id = models.CharField(max_length=50, blank=True)
    student_id = models.CharField(max_length=50, blank=True)
    next_of_kin_name = models.CharField(max_length=255, blank=True)
    next_of_kin_phone_number = models.CharField(max_length=20, blank=True)
    national_id_photo_url = models.CharField(max_length=500, blank=True)
    student_id_photo_url = models.CharField(max_length=500, blank=True)
    saved_properties = models.ManyToManyField(
        "core.Property",
        blank=True,
        related_name="saved_by",
    )

    def __str__(self) -> str:  # pragma: no cover - simple display helper
        return f"{self.name or self.username} ({self.role})"

    @property
    def uid(self):
        return self.pk

    @property
    def is_student(self) -> bool:
        return self.role == self.ROLE_STUDENT

    @property
    def is_landlord(self) -> bool:
        return self.role == self.ROLE_LANDLORD

    @property
    def saved_property_ids(self) -> list[int]:
        if self.pk is None:
            return []
        return sorted(self.saved_properties.values_list("id", flat=True))

    def to_document(self) -> dict:
        document = super().to_document()
        if self.is_student:
            document["saved_property_ids"] = self.saved_property_ids
        return document
