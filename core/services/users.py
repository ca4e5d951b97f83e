from __future__ import annotations

import logging
from typing import Any

from django.db import transaction

from ..exceptions import RuleDenied, UploadError
from ..forms import DocumentUploadForm, ProfileForm, RegisterForm
from ..models import Property, User
from ..rules import CREATE, READ, UPDATE, AuthContext, enforce
from .uploads import StorageUploadService, profile_picture_dir, user_doc_dir

logger = logging.getLogger(__name__)

USERS = "users"

# Upload kind -> (profile field, student only)
DOCUMENT_TARGETS = {
    "profilePicture": ("profile_picture_url", False),
    "nationalId": ("national_id_photo_url", True),
    "studentId": ("student_id_photo_url", True),
}


class SignupService:
    """Create the login account and its profile document together."""

    def form(self, data: Any | None = None) -> RegisterForm:
        return RegisterForm(data)

    @transaction.atomic
    def register(self, data) -> tuple[bool, RegisterForm, User | None]:
        form = self.form(data)
        if not form.is_valid():
            return False, form, None
        user = form.save()
        enforce(USERS, CREATE, AuthContext.for_user(user), data=user.to_document())
        logger.info("Registered %s account %s", user.role, user.pk)
        return True, form, user


class ProfileService:
    """Self-service profile reads and updates."""

    def __init__(self, user: User, upload_service: StorageUploadService | None = None):
        self.user = user
        self.auth = AuthContext.for_user(user)
        self.upload_service = upload_service or StorageUploadService(user)

    def get(self) -> User:
        enforce(USERS, READ, self.auth, resource=self.user.to_document())
        return self.user

    def _write(self, before: dict[str, Any], fields: list[str]) -> User:
        try:
            enforce(USERS, UPDATE, self.auth, resource=before, data=self.user.to_document())
        except RuleDenied:
            self.user.refresh_from_db()
            raise
        self.user.save(update_fields=fields)
        return self.user

    def update(self, data) -> tuple[bool, ProfileForm, User | None]:
        before = self.user.to_document()
        form = ProfileForm(data, instance=self.user)
        if not form.is_valid():
            self.user.refresh_from_db()
            return False, form, None
        fields = [name for name, field in form.fields.items() if not field.disabled]
        self._write(before, fields)
        logger.info("User %s updated profile fields %s", self.user.pk, fields)
        return True, form, self.user

    def upload_document(self, data, files) -> tuple[bool, DocumentUploadForm, str | None]:
        form = DocumentUploadForm(data, files)
        if not form.is_valid():
            return False, form, None
        kind = form.cleaned_data["kind"]
        field_name, student_only = DOCUMENT_TARGETS[kind]
        if student_only and not self.user.is_student:
            raise UploadError("Only students can upload identity documents.")

        if kind == "profilePicture":
            directory = profile_picture_dir(self.user.pk)
        else:
            directory = user_doc_dir(self.user.pk, kind)
        url = self.upload_service.upload(form.cleaned_data["file"], directory)

        before = self.user.to_document()
        setattr(self.user, field_name, url)
        self._write(before, [field_name])
        return True, form, url

    def saved_properties(self):
        return self.user.saved_properties.all()

    @transaction.atomic
    def toggle_saved(self, prop: Property, save: bool | None = None) -> bool:
        """Save or unsave ``prop``; ``save=None`` flips the current state.

        Returns whether the property is saved afterwards.
        """
        before = self.user.to_document()
        saved_ids = list(before.get("saved_property_ids", []))
        currently_saved = prop.pk in saved_ids
        target = (not currently_saved) if save is None else save
        if target == currently_saved:
            return currently_saved
        after_ids = sorted(saved_ids + [prop.pk]) if target else [pk for pk in saved_ids if pk != prop.pk]
        enforce(USERS, UPDATE, self.auth, resource=before, data=dict(before, saved_property_ids=after_ids))
        if target:
            self.user.saved_properties.add(prop)
        else:
            self.user.saved_properties.remove(prop)
        return target
