from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..api.base import ServiceAPIView
from ..api.permissions import IsStudent
from ..api.serializers import PropertySerializer, ReviewSerializer
from ..forms import AMENITIES, CITIES
from ..models import Property, Review
from ..services.properties import PropertyCatalogService, PropertyDetailService
from ..services.reviews import ReviewService


class CatalogsView(ServiceAPIView):
    """Reference lists used to build search filters and listing forms."""

    def get(self, request):
        return Response(
            {
                "amenities": AMENITIES,
                "property_types": [value for value, _ in Property.TYPE_CHOICES],
                "gender_preferences": [value for value, _ in Property.GENDER_CHOICES],
                "cities": CITIES,
                "listed_cities": list(PropertyCatalogService.available_cities()),
            }
        )


class PropertyListView(ServiceAPIView):
    catalog_service_class = PropertyCatalogService

    def get(self, request):
        service = self.catalog_service_class()
        filters = service.build_filters(request.query_params)
        properties = service.get_catalog(filters)
        return Response(PropertySerializer(properties, many=True).data)


class PropertyDetailView(ServiceAPIView):
    """Public listing page; every visit counts as a view."""

    def get(self, request, pk):
        prop = get_object_or_404(Property, pk=pk)
        PropertyDetailService(request.user).view(prop)
        review_service = ReviewService(request.user)
        eligibility = review_service.eligibility(prop)
        data = PropertySerializer(prop).data
        data["user_can_review"] = eligibility.can_review
        data["review_eligibility_reason"] = eligibility.reason
        return Response(data)


class PropertyReviewsView(ServiceAPIView):
    def get_permissions(self):
        if self.request.method == "POST":
            return [IsStudent()]
        return [AllowAny()]

    def get(self, request, pk):
        prop = get_object_or_404(Property, pk=pk)
        reviews = PropertyDetailService(request.user).reviews(prop)
        return Response(ReviewSerializer(reviews, many=True).data)

    def post(self, request, pk):
        prop = get_object_or_404(Property, pk=pk)
        success, form, review = ReviewService(request.user).add(prop, request.data)
        if not success:
            return self.form_error_response(form)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


class ReviewDetailView(ServiceAPIView):
    permission_classes = [IsAuthenticated]

    def get_review(self, pk) -> Review:
        return get_object_or_404(Review.objects.select_related("property"), pk=pk)

    def patch(self, request, pk):
        success, form, review = ReviewService(request.user).edit(self.get_review(pk), request.data)
        if not success:
            return self.form_error_response(form)
        return Response(ReviewSerializer(review).data)

    def delete(self, request, pk):
        ReviewService(request.user).delete(self.get_review(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)
