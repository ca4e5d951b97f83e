"""Student URL patterns: saved listings, interests and rentals."""

from django.urls import path

from ..views import booking

urlpatterns = [
    path("api/saved/", booking.SavedPropertyListView.as_view(), name="saved_list"),
    path("api/saved/<int:pk>/", booking.SavedPropertyToggleView.as_view(), name="saved_toggle"),
    path(
        "api/properties/<int:pk>/interests/",
        booking.InterestCreateView.as_view(),
        name="interest_create",
    ),
    path("api/interests/", booking.StudentInterestListView.as_view(), name="student_interests"),
    path("api/interests/<int:pk>/archive/", booking.InterestArchiveView.as_view(), name="interest_archive"),
    path("api/rental/", booking.RentalView.as_view(), name="rental"),
    path("api/rental/<int:pk>/checkout/", booking.CheckoutView.as_view(), name="rental_checkout"),
]
