from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from django.db.models import Count, Q

from ..models import Property


@dataclass(frozen=True)
class LandlordDashboardStats:
    total_properties: int
    total_views: int
    total_interested: int
    total_enrolled: int


class LandlordDashboardService:
    """Aggregate data required for the landlord dashboard."""

    def __init__(self, landlord):
        self.landlord = landlord

    def properties(self) -> list[Property]:
        queryset = (
            Property.objects.filter(landlord=self.landlord)
            .annotate(
                active_enrollments=Count("enrollments", filter=Q(enrollments__is_active=True), distinct=True),
                pending_interests=Count(
                    "booking_interests",
                    filter=Q(booking_interests__status="pending"),
                    distinct=True,
                ),
            )
            .order_by("-created_at", "-id")
        )
        return list(queryset)

    def stats(self, properties: Iterable[Property]) -> LandlordDashboardStats:
        props = list(properties)
        return LandlordDashboardStats(
            total_properties=len(props),
            total_views=sum(prop.view_count for prop in props),
            total_interested=sum(prop.interested_count for prop in props),
            total_enrolled=sum(prop.active_enrollments for prop in props),
        )
