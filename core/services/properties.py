from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable
from uuid import uuid4

from django.db.models import F, Q
from django.utils import timezone

from ..forms import MAX_PROPERTY_IMAGES, PropertyForm, PropertyImageForm
from ..models import Property
from ..models.base import apply_document
from ..models.property import PLACEHOLDER_IMAGE
from ..rules import CREATE, DELETE, READ, UPDATE, AuthContext, enforce
from .uploads import StorageUploadService, property_image_dir

logger = logging.getLogger(__name__)

PROPERTIES = "properties"


def change_counter(prop: Property, auth: AuthContext, counter: str, delta: int, *, time=None) -> bool:
    """Atomically move ``counter`` by ``delta`` once the rules approve.

    Decrements never take a counter below zero; when the stored value is
    already too low nothing is written and ``False`` is returned.
    """
    time = time or timezone.now()
    prop.refresh_from_db(fields=[counter, "updated_at"])
    before = prop.to_document()
    if before[counter] + delta < 0:
        return False
    after = dict(before, **{counter: before[counter] + delta, "updated_at": time})
    enforce(PROPERTIES, UPDATE, auth, resource=before, data=after, time=time)
    queryset = Property.objects.filter(pk=prop.pk)
    if delta < 0:
        queryset = queryset.filter(**{f"{counter}__gte": -delta})
    updated = queryset.update(**{counter: F(counter) + delta, "updated_at": time})
    prop.refresh_from_db(fields=[counter, "updated_at"])
    return bool(updated)


@dataclass(frozen=True)
class PropertyFilters:
    """Value object holding filter parameters for catalog searches."""

    keyword: str = ""
    location: str = ""
    price_min: Decimal | None = None
    price_max: Decimal | None = None
    property_types: tuple[str, ...] = ()
    gender_preference: str = ""
    amenities: tuple[str, ...] = field(default_factory=tuple)


def _decimal_or_none(raw: Any) -> Decimal | None:
    raw = (str(raw) if raw is not None else "").strip()
    if not raw:
        return None
    try:
        return Decimal(raw)
    except (InvalidOperation, TypeError):
        return None


def list_param(data, name: str) -> tuple[str, ...]:
    if hasattr(data, "getlist"):
        values = data.getlist(name)
    else:
        values = data.get(name) or []
        if isinstance(values, str):
            values = [values]
    items = []
    for value in values:
        items.extend(part.strip() for part in str(value).split(",") if part.strip())
    return tuple(items)


class PropertyCatalogService:
    """Encapsulates querying logic for the public property catalog."""

    def __init__(self, base_queryset=None) -> None:
        self.base_queryset = base_queryset if base_queryset is not None else Property.objects.all()

    def build_filters(self, data) -> PropertyFilters:
        """Return validated filter parameters from raw request data."""
        location = (data.get("location") or "").strip()
        gender = (data.get("gender_preference") or "").strip()
        return PropertyFilters(
            keyword=(data.get("keyword") or "").strip(),
            location="" if location.lower() == "all" else location,
            price_min=_decimal_or_none(data.get("price_min")),
            price_max=_decimal_or_none(data.get("price_max")),
            property_types=list_param(data, "property_type"),
            gender_preference="" if gender.lower() in {"", "any", "all"} else gender,
            amenities=list_param(data, "amenities"),
        )

    def get_catalog(self, filters: PropertyFilters) -> list[Property]:
        """Apply filters and return matching listings, newest first."""
        queryset = self.base_queryset
        if filters.keyword:
            keyword = filters.keyword
            queryset = queryset.filter(
                Q(name__icontains=keyword)
                | Q(description__icontains=keyword)
                | Q(address__icontains=keyword)
                | Q(city__icontains=keyword)
                | Q(suburb__icontains=keyword)
            )
        if filters.location:
            queryset = queryset.filter(city__iexact=filters.location)
        if filters.price_min is not None:
            queryset = queryset.filter(price__gte=filters.price_min)
        if filters.price_max is not None:
            queryset = queryset.filter(price__lte=filters.price_max)
        if filters.property_types:
            queryset = queryset.filter(property_type__in=filters.property_types)
        if filters.gender_preference:
            queryset = queryset.filter(gender_preference__in=[filters.gender_preference, "Any"])

        properties = list(queryset.order_by("-created_at", "-id"))
        # Amenities are matched in Python against the stored JSON list.
        if filters.amenities:
            wanted = set(filters.amenities)
            properties = [prop for prop in properties if wanted.issubset(prop.amenities or [])]
        return properties

    @staticmethod
    def available_cities() -> Iterable[str]:
        return Property.objects.order_by("city").values_list("city", flat=True).distinct()


class PropertyDetailService:
    """Reads single listings on behalf of a (possibly anonymous) visitor."""

    def __init__(self, user=None) -> None:
        self.user = user
        self.auth = AuthContext.for_user(user)

    def get(self, prop: Property) -> Property:
        enforce(PROPERTIES, READ, self.auth, resource=prop.to_document())
        return prop

    def view(self, prop: Property) -> Property:
        """Read a listing and count the visit."""
        self.get(prop)
        change_counter(prop, self.auth, "view_count", 1)
        return prop

    def reviews(self, prop: Property):
        return prop.reviews.select_related("student").order_by("-date", "-id")


class PropertyListingService:
    """Create, edit and delete listings for a landlord."""

    def __init__(self, landlord, upload_service: StorageUploadService | None = None) -> None:
        self.landlord = landlord
        self.auth = AuthContext.for_user(landlord)
        self.upload_service = upload_service or StorageUploadService(landlord)

    def form(self, data: Any | None = None) -> PropertyForm:
        return PropertyForm(data)

    def image_forms(self, files, hints) -> list[PropertyImageForm]:
        files = list(files or [])[:MAX_PROPERTY_IMAGES]
        hints = list(hints or [])
        forms = []
        for index, upload in enumerate(files):
            hint = hints[index] if index < len(hints) else "property photo"
            forms.append(PropertyImageForm(data={"hint": hint}, files={"image": upload}))
        return forms

    def _landlord_contact(self) -> dict[str, Any]:
        landlord = self.landlord
        if not (landlord.name and landlord.email and landlord.phone_number):
            raise ValueError("Complete landlord information is missing to create a property.")
        return {
            "landlord_name": landlord.name,
            "landlord_email": landlord.email,
            "landlord_phone_number": landlord.phone_number,
        }

    def _plan_images(self, image_forms: list[PropertyImageForm], directory: str) -> list[tuple[PropertyImageForm, str]]:
        return [(image_form, self.upload_service.plan(image_form.cleaned_data["image"], directory)) for image_form in image_forms]

    def _planned_images(self, planned) -> list[dict[str, str]]:
        return [{"url": self.upload_service.url(path), "hint": image_form.cleaned_data["hint"]} for image_form, path in planned]

    def _store_images(self, planned) -> list[dict[str, str]]:
        # Nothing reaches storage until the listing write has been approved.
        images = []
        for image_form, path in planned:
            url = self.upload_service.store(image_form.cleaned_data["image"], path)
            images.append({"url": url, "hint": image_form.cleaned_data["hint"]})
        return images

    def create(self, data, files=None, hints=None) -> tuple[bool, PropertyForm, list, Property | None]:
        form = self.form(data)
        image_forms = self.image_forms(files, hints)
        images_valid = all([image_form.is_valid() for image_form in image_forms])
        if not form.is_valid() or not images_valid:
            return False, form, image_forms, None

        contact = self._landlord_contact()
        now = timezone.now()
        # No pk yet; uploads go under a fresh key.
        directory = property_image_dir(self.landlord.pk, uuid4().hex)
        planned = self._plan_images(image_forms, directory)
        images = self._planned_images(planned) or [dict(PLACEHOLDER_IMAGE)]

        prop = Property(landlord=self.landlord, created_at=now, updated_at=now, images=images, **contact)
        apply_document(prop, form.cleaned_data, Property.EDITABLE_FIELDS)
        enforce(PROPERTIES, CREATE, self.auth, data=prop.to_document(), time=now)
        if planned:
            prop.images = self._store_images(planned)
        prop.save()
        logger.info("Landlord %s created property %s", self.landlord.pk, prop.pk)
        return True, form, image_forms, prop

    def update(self, prop: Property, data, files=None, hints=None) -> tuple[bool, PropertyForm, list, Property | None]:
        form = self.form(data)
        image_forms = self.image_forms(files, hints)
        images_valid = all([image_form.is_valid() for image_form in image_forms])
        if not form.is_valid() or not images_valid:
            return False, form, image_forms, None

        now = timezone.now()
        before = prop.to_document()
        after = dict(before)
        after.update(form.cleaned_data)
        after.update(self._landlord_contact())
        after["updated_at"] = now
        planned = self._plan_images(image_forms, property_image_dir(self.landlord.pk, prop.pk))
        if planned:
            # New uploads replace the gallery; otherwise the stored images stay.
            after["images"] = self._planned_images(planned)
        enforce(PROPERTIES, UPDATE, self.auth, resource=before, data=after, time=now)
        if planned:
            after["images"] = self._store_images(planned)
        apply_document(prop, after, Property.EDITABLE_FIELDS + ("updated_at",))
        prop.save()
        logger.info("Landlord %s updated property %s", self.landlord.pk, prop.pk)
        return True, form, image_forms, prop

    def delete(self, prop: Property) -> None:
        enforce(PROPERTIES, DELETE, self.auth, resource=prop.to_document())
        property_id = prop.pk
        prop.delete()
        logger.info("Landlord %s deleted property %s", self.landlord.pk, property_id)

    def owned(self, prop: Property) -> bool:
        return prop.landlord_id == self.landlord.pk
