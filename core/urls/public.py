"""Public-facing URL patterns."""

from django.urls import path

from ..views import public

urlpatterns = [
    path("api/catalogs/", public.CatalogsView.as_view(), name="catalogs"),
    path("api/properties/", public.PropertyListView.as_view(), name="property_list"),
    path("api/properties/<int:pk>/", public.PropertyDetailView.as_view(), name="property_detail"),
    path("api/properties/<int:pk>/reviews/", public.PropertyReviewsView.as_view(), name="property_reviews"),
    path("api/reviews/<int:pk>/", public.ReviewDetailView.as_view(), name="review_detail"),
]
