"""Rules for uploaded files, keyed by storage path.

    propertyImages/{landlordId}/{propertyId}/<file>   <=5MB image/*, public read
    userDocs/{userId}/{nationalId|studentId}/<file>   <=5MB image/* or pdf, owner only
    profilePictures/{userId}/<file>                   <=2MB image/*, public read
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .base import READ, AuthContext, Decision

MB = 1024 * 1024
WRITE = "write"

PROPERTY_IMAGES = "propertyImages"
USER_DOCS = "userDocs"
PROFILE_PICTURES = "profilePictures"
USER_DOC_KINDS = ("nationalId", "studentId")


def is_image(content_type: str | None) -> bool:
    return bool(content_type) and content_type.startswith("image/")


def is_image_or_pdf(content_type: str | None) -> bool:
    return is_image(content_type) or content_type == "application/pdf"


@dataclass(frozen=True)
class PathRule:
    prefix: str
    segments: int
    max_size: int
    accepts: Callable[[str | None], bool]
    public_read: bool

    def owner_of(self, parts: list[str]) -> str:
        return parts[1]

    def matches(self, parts: list[str]) -> bool:
        if parts[0] != self.prefix or len(parts) < self.segments:
            return False
        return all(parts[: self.segments])


class UserDocRule(PathRule):
    def matches(self, parts: list[str]) -> bool:
        return super().matches(parts) and parts[2] in USER_DOC_KINDS


PATH_RULES = (
    PathRule(PROPERTY_IMAGES, 4, 5 * MB, is_image, public_read=True),
    UserDocRule(USER_DOCS, 4, 5 * MB, is_image_or_pdf, public_read=False),
    PathRule(PROFILE_PICTURES, 3, 2 * MB, is_image, public_read=True),
)


def split_path(path: str) -> list[str]:
    return [part for part in path.strip("/").split("/")]


def match_rule(path: str) -> tuple[PathRule | None, list[str]]:
    parts = split_path(path)
    for rule in PATH_RULES:
        if rule.matches(parts):
            return rule, parts
    return None, parts


def check_storage(
    operation: str,
    auth: AuthContext,
    path: str,
    *,
    size: int | None = None,
    content_type: str | None = None,
) -> Decision:
    rule, parts = match_rule(path)
    if rule is None:
        return Decision.deny(f"no storage rule matches {path!r}")
    is_owner = auth.is_authenticated and str(auth.uid) == rule.owner_of(parts)
    if operation == READ:
        if rule.public_read or is_owner:
            return Decision.allow()
        return Decision.deny("only the owner may read this file")
    if operation != WRITE:
        return Decision.deny(f"unknown storage operation {operation!r}")
    if not is_owner:
        return Decision.deny("only the owner may write this path")
    if size is None or size > rule.max_size:
        return Decision.deny(f"file exceeds {rule.max_size // MB}MB")
    if not rule.accepts(content_type):
        return Decision.deny(f"content type {content_type!r} not accepted")
    return Decision.allow()
