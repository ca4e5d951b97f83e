from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response

from ..api.base import ServiceAPIView
from ..api.permissions import IsStudent
from ..api.serializers import BookingInterestSerializer, EnrollmentSerializer, PropertySerializer
from ..models import BookingInterest, Enrollment, Property
from ..services.enrollments import StudentRentalService
from ..services.interests import StudentInterestService
from ..services.users import ProfileService

__all__ = [
    "SavedPropertyListView",
    "SavedPropertyToggleView",
    "InterestCreateView",
    "StudentInterestListView",
    "InterestArchiveView",
    "RentalView",
    "CheckoutView",
]


class StudentAPIView(ServiceAPIView):
    permission_classes = [IsStudent]


class SavedPropertyListView(StudentAPIView):
    def get(self, request):
        properties = ProfileService(request.user).saved_properties()
        return Response(PropertySerializer(properties, many=True).data)


class SavedPropertyToggleView(StudentAPIView):
    """POST saves a listing, DELETE removes it from the saved list."""

    def _toggle(self, request, pk, save):
        prop = get_object_or_404(Property, pk=pk)
        saved = ProfileService(request.user).toggle_saved(prop, save=save)
        return Response({"property_id": prop.pk, "saved": saved})

    def post(self, request, pk):
        return self._toggle(request, pk, True)

    def delete(self, request, pk):
        return self._toggle(request, pk, False)


class InterestCreateView(StudentAPIView):
    def post(self, request, pk):
        prop = get_object_or_404(Property, pk=pk)
        success, form, interest = StudentInterestService(request.user).submit(prop, request.data)
        if not success:
            return self.form_error_response(form)
        return Response(BookingInterestSerializer(interest).data, status=status.HTTP_201_CREATED)


class StudentInterestListView(StudentAPIView):
    def get(self, request):
        interests = StudentInterestService(request.user).interests()
        return Response(BookingInterestSerializer(interests, many=True).data)


class InterestArchiveView(StudentAPIView):
    def post(self, request, pk):
        interest = get_object_or_404(BookingInterest.objects.select_related("property"), pk=pk)
        interest = StudentInterestService(request.user).archive(interest)
        return Response(BookingInterestSerializer(interest).data)


class RentalView(StudentAPIView):
    """The student's current tenancy with its listing, if any."""

    def get(self, request):
        enrollment = StudentRentalService(request.user).current()
        if enrollment is None:
            return Response({"enrollment": None, "property": None})
        return Response(
            {
                "enrollment": EnrollmentSerializer(enrollment).data,
                "property": PropertySerializer(enrollment.property).data,
            }
        )


class CheckoutView(StudentAPIView):
    def post(self, request, pk):
        enrollment = get_object_or_404(Enrollment.objects.select_related("property"), pk=pk)
        enrollment = StudentRentalService(request.user).checkout(enrollment)
        return Response(EnrollmentSerializer(enrollment).data)
