from datetime import date

from django import forms

from ..models import BookingInterest, Enrollment, Property
from .student import validate_stay_dates

AMENITIES = sorted(
    [
        "Wi-Fi",
        "Laundry",
        "Kitchen",
        "Furnished",
        "Parking",
        "Study Area",
        "Air Conditioning",
        "Gym Access",
        "Common Room",
        "Bike Storage",
        "Garden",
        "Library Access",
        "Balcony",
        "River View",
        "Pet Friendly",
        "Swimming Pool",
    ]
)
AMENITY_CHOICES = [(amenity, amenity) for amenity in AMENITIES]

CITIES = sorted(
    [
        "Beitbridge", "Bindura", "Bulawayo", "Chegutu", "Chinhoyi",
        "Chipinge", "Chiredzi", "Chitungwiza", "Epworth", "Gokwe",
        "Gwanda", "Gweru", "Harare", "Hwange", "Kadoma", "Kariba",
        "Karoi", "Kwekwe", "Marondera", "Masvingo", "Mutare",
        "Norton", "Plumtree", "Redcliff", "Rusape", "Ruwa", "Shamva",
        "Shurugwi", "Victoria Falls", "Zvishavane",
    ]
)

MAX_PROPERTY_IMAGES = 5


def _parse_iso_date(raw, label: str) -> date:
    if isinstance(raw, date):
        return raw
    try:
        return date.fromisoformat(str(raw).strip())
    except ValueError:
        raise forms.ValidationError(f"Invalid '{label}' date format: {raw}. Please use YYYY-MM-DD.")


class PropertyForm(forms.Form):
    name = forms.CharField(min_length=3, max_length=255)
    address = forms.CharField(min_length=5, max_length=255)
    city = forms.CharField(min_length=2, max_length=100)
    suburb = forms.CharField(min_length=2, max_length=100)
    description = forms.CharField(min_length=20)
    property_type = forms.ChoiceField(choices=Property.TYPE_CHOICES)
    capacity = forms.IntegerField(min_value=1)
    gender_preference = forms.ChoiceField(choices=Property.GENDER_CHOICES)
    amenities = forms.MultipleChoiceField(choices=AMENITY_CHOICES)
    price = forms.DecimalField(min_value=1, max_digits=10, decimal_places=2)
    availability = forms.JSONField()

    def clean_availability(self):
        windows = self.cleaned_data.get("availability")
        if not isinstance(windows, list) or not windows:
            raise forms.ValidationError("At least one availability period is required.")
        cleaned = []
        for window in windows:
            if not isinstance(window, dict) or not window.get("from"):
                raise forms.ValidationError("Each availability period needs a start date.")
            start = _parse_iso_date(window["from"], "from")
            end = None
            raw_end = window.get("to")
            if raw_end and str(raw_end).strip():
                end = _parse_iso_date(raw_end, "to")
                if end < start:
                    raise forms.ValidationError(
                        f"Availability 'to' date ({end}) cannot be before 'from' date ({start})."
                    )
            cleaned.append({"from": start.isoformat(), "to": end.isoformat() if end else None})
        return cleaned


class PropertyImageForm(forms.Form):
    image = forms.ImageField()
    hint = forms.CharField(max_length=20)


class EnrollFromInterestForm(forms.Form):
    check_in_date = forms.DateField()
    rent_due_date = forms.DateField()
    check_out_date = forms.DateField()

    def clean(self):
        cleaned_data = super().clean()
        validate_stay_dates(self, "check_in_date", "rent_due_date", "check_out_date")
        return cleaned_data


class StudentEnrollmentForm(EnrollFromInterestForm):
    """Enroll an existing student account directly, without an interest."""

    student_email = forms.EmailField()
    name = forms.CharField(min_length=2, max_length=255)


class EnrollmentScheduleForm(forms.ModelForm):
    class Meta:
        model = Enrollment
        fields = list(Enrollment.SCHEDULE_FIELDS)

    def clean(self):
        cleaned_data = super().clean()
        validate_stay_dates(self, "check_in_date", "rent_due_date", "check_out_date")
        return cleaned_data


class InterestStatusForm(forms.Form):
    status = forms.ChoiceField(choices=BookingInterest.STATUS_CHOICES)
