"""Helpers shared by the marketplace models."""

from __future__ import annotations

from typing import Any, Iterable


class DocumentMixin:
    """Expose a model instance as the flat document the access rules inspect.

    ``DOCUMENT_FIELDS`` lists the document keys; each key is read from the
    attribute of the same name, so foreign keys are listed by their ``*_id``
    attname. ``OPTIONAL_DOCUMENT_FIELDS`` are omitted while empty, the same
    way an unset field is simply absent from a stored document.
    """

    DOCUMENT_FIELDS: tuple[str, ...] = ()
    OPTIONAL_DOCUMENT_FIELDS: tuple[str, ...] = ()

    def to_document(self) -> dict[str, Any]:
        document = {name: getattr(self, name) for name in self.DOCUMENT_FIELDS}
        for name in self.OPTIONAL_DOCUMENT_FIELDS:
            value = getattr(self, name)
            if value not in (None, "", []):
                document[name] = value
        return document


def apply_document(instance, document: dict[str, Any], fields: Iterable[str]) -> None:
    """Copy ``fields`` from an approved document back onto ``instance``."""
    for name in fields:
        if name in document:
            setattr(instance, name, document[name])
