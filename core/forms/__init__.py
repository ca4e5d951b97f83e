from .auth import RegisterForm
from .owner import (
    AMENITIES,
    AMENITY_CHOICES,
    CITIES,
    MAX_PROPERTY_IMAGES,
    EnrollFromInterestForm,
    EnrollmentScheduleForm,
    InterestStatusForm,
    PropertyForm,
    PropertyImageForm,
    StudentEnrollmentForm,
)
from .review import ReviewForm
from .student import BookingInterestForm, DocumentUploadForm, ProfileForm

__all__ = [
    "RegisterForm",
    "ProfileForm",
    "DocumentUploadForm",
    "BookingInterestForm",
    "PropertyForm",
    "PropertyImageForm",
    "EnrollFromInterestForm",
    "StudentEnrollmentForm",
    "EnrollmentScheduleForm",
    "InterestStatusForm",
    "ReviewForm",
    "AMENITIES",
    "AMENITY_CHOICES",
    "CITIES",
    "MAX_PROPERTY_IMAGES",
]
