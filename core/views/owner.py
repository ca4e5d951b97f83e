from dataclasses import asdict

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response

from ..api.base import ServiceAPIView
from ..api.permissions import IsLandlord
from ..api.serializers import (
    BookingInterestSerializer,
    EnrollmentSerializer,
    LandlordPropertySerializer,
    PropertySerializer,
)
from ..models import BookingInterest, Enrollment, Property
from ..services.enrollments import EnrollmentService
from ..services.interests import LandlordInterestService
from ..services.owner import LandlordDashboardService
from ..services.properties import PropertyDetailService, PropertyListingService, list_param


class LandlordAPIView(ServiceAPIView):
    permission_classes = [IsLandlord]

    def get_owned_property(self, pk) -> Property:
        return get_object_or_404(Property, pk=pk, landlord=self.request.user)


def image_hints(data):
    if hasattr(data, "getlist"):
        return data.getlist("image_hints")
    return data.get("image_hints") or []


def listing_errors(form, image_forms):
    errors = form.errors.get_json_data()
    image_errors = [image_form.errors.get_json_data() for image_form in image_forms if image_form.errors]
    if image_errors:
        errors["images"] = image_errors
    return errors


class LandlordDashboardView(LandlordAPIView):
    service_class = LandlordDashboardService

    def get(self, request):
        service = self.service_class(request.user)
        properties = service.properties()
        return Response(
            {
                "properties": LandlordPropertySerializer(properties, many=True).data,
                "stats": asdict(service.stats(properties)),
            }
        )


class LandlordPropertyCreateView(LandlordAPIView):
    def post(self, request):
        service = PropertyListingService(request.user)
        success, form, image_forms, prop = service.create(
            request.data,
            request.FILES.getlist("images"),
            image_hints(request.data),
        )
        if not success:
            return Response({"errors": listing_errors(form, image_forms)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(PropertySerializer(prop).data, status=status.HTTP_201_CREATED)


class LandlordPropertyDetailView(LandlordAPIView):
    """Manage one listing; reading it here does not count as a view."""

    def get(self, request, pk):
        prop = PropertyDetailService(request.user).get(self.get_owned_property(pk))
        return Response(PropertySerializer(prop).data)

    def put(self, request, pk):
        prop = get_object_or_404(Property, pk=pk)
        service = PropertyListingService(request.user)
        success, form, image_forms, prop = service.update(
            prop,
            request.data,
            request.FILES.getlist("images"),
            image_hints(request.data),
        )
        if not success:
            return Response({"errors": listing_errors(form, image_forms)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(PropertySerializer(prop).data)

    def delete(self, request, pk):
        prop = get_object_or_404(Property, pk=pk)
        PropertyListingService(request.user).delete(prop)
        return Response(status=status.HTTP_204_NO_CONTENT)


class LandlordPropertyInterestsView(LandlordAPIView):
    def get(self, request, pk):
        prop = self.get_owned_property(pk)
        statuses = list_param(request.query_params, "status")
        interests = LandlordInterestService(request.user).for_property(prop, statuses)
        return Response(BookingInterestSerializer(interests, many=True).data)


class InterestStatusView(LandlordAPIView):
    def post(self, request, pk):
        interest = get_object_or_404(BookingInterest.objects.select_related("property"), pk=pk)
        success, form, interest = LandlordInterestService(request.user).update_status(interest, request.data)
        if not success:
            return self.form_error_response(form)
        return Response(BookingInterestSerializer(interest).data)


class EnrollFromInterestView(LandlordAPIView):
    def post(self, request, pk):
        interest = get_object_or_404(BookingInterest.objects.select_related("property", "student"), pk=pk)
        success, form, enrollment = EnrollmentService(request.user).enroll_from_interest(interest, request.data)
        if not success:
            return self.form_error_response(form)
        return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)


class PropertyEnrollmentsView(LandlordAPIView):
    """Active enrollments of a listing; POST enrolls a student directly."""

    def get(self, request, pk):
        prop = self.get_owned_property(pk)
        enrollments = EnrollmentService(request.user).for_property(prop)
        return Response(EnrollmentSerializer(enrollments, many=True).data)

    def post(self, request, pk):
        prop = get_object_or_404(Property, pk=pk)
        success, form, enrollment = EnrollmentService(request.user).enroll_student(prop, request.data)
        if not success:
            return self.form_error_response(form)
        return Response(EnrollmentSerializer(enrollment).data, status=status.HTTP_201_CREATED)


class EnrollmentDetailView(LandlordAPIView):
    def get_enrollment(self, pk) -> Enrollment:
        return get_object_or_404(Enrollment.objects.select_related("property"), pk=pk)

    def patch(self, request, pk):
        success, form, enrollment = EnrollmentService(request.user).edit(self.get_enrollment(pk), request.data)
        if not success:
            return self.form_error_response(form)
        return Response(EnrollmentSerializer(enrollment).data)

    def delete(self, request, pk):
        EnrollmentService(request.user).remove(self.get_enrollment(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)
