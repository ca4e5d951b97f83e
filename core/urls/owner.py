"""Landlord-focused URL patterns."""

from django.urls import path

from ..views import owner

urlpatterns = [
    path("api/landlord/dashboard/", owner.LandlordDashboardView.as_view(), name="landlord_dashboard"),
    path("api/landlord/properties/", owner.LandlordPropertyCreateView.as_view(), name="landlord_property_create"),
    path(
        "api/landlord/properties/<int:pk>/",
        owner.LandlordPropertyDetailView.as_view(),
        name="landlord_property_detail",
    ),
    path(
        "api/landlord/properties/<int:pk>/interests/",
        owner.LandlordPropertyInterestsView.as_view(),
        name="landlord_property_interests",
    ),
    path(
        "api/landlord/interests/<int:pk>/status/",
        owner.InterestStatusView.as_view(),
        name="landlord_interest_status",
    ),
    path(
        "api/landlord/interests/<int:pk>/enroll/",
        owner.EnrollFromInterestView.as_view(),
        name="landlord_interest_enroll",
    ),
    path(
        "api/landlord/properties/<int:pk>/enrollments/",
        owner.PropertyEnrollmentsView.as_view(),
        name="landlord_property_enrollments",
    ),
    path(
        "api/landlord/enrollments/<int:pk>/",
        owner.EnrollmentDetailView.as_view(),
        name="landlord_enrollment_detail",
    ),
]
