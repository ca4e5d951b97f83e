from __future__ import annotations

import logging
import os
from uuid import uuid4

from django.core.files.storage import default_storage

from ..rules import WRITE, AuthContext, enforce_storage
from ..rules.storage import PROFILE_PICTURES, PROPERTY_IMAGES, USER_DOCS

logger = logging.getLogger(__name__)


def property_image_dir(landlord_id, property_key) -> str:
    return f"{PROPERTY_IMAGES}/{landlord_id}/{property_key}"


def user_doc_dir(user_id, kind: str) -> str:
    return f"{USER_DOCS}/{user_id}/{kind}"


def profile_picture_dir(user_id) -> str:
    return f"{PROFILE_PICTURES}/{user_id}"


class StorageUploadService:
    """Store uploaded files under rule-checked paths and hand back their URLs."""

    def __init__(self, user, storage=None):
        self.user = user
        self.auth = AuthContext.for_user(user)
        self.storage = storage or default_storage

    def build_path(self, directory: str, filename: str) -> str:
        extension = os.path.splitext(filename or "")[1].lstrip(".").lower() or "bin"
        return f"{directory}/{uuid4().hex}.{extension}"

    def plan(self, uploaded_file, directory: str) -> str:
        """Pick a storage path for ``uploaded_file`` and check the rules for it."""
        path = self.build_path(directory, getattr(uploaded_file, "name", ""))
        enforce_storage(
            WRITE,
            self.auth,
            path,
            size=getattr(uploaded_file, "size", None),
            content_type=getattr(uploaded_file, "content_type", None),
        )
        return path

    def url(self, path: str) -> str:
        return self.storage.url(path)

    def store(self, uploaded_file, path: str) -> str:
        stored_name = self.storage.save(path, uploaded_file)
        logger.info("Uploaded %s to %s", getattr(uploaded_file, "name", "file"), stored_name)
        return self.storage.url(stored_name)

    def upload(self, uploaded_file, directory: str) -> str:
        return self.store(uploaded_file, self.plan(uploaded_file, directory))
