from django import forms

from ..models import BookingInterest, User
from .auth import STUDENT_DETAIL_FIELDS, normalize_phone

DOCUMENT_KIND_CHOICES = (
    ("profilePicture", "Profile picture"),
    ("nationalId", "National ID"),
    ("studentId", "Student ID"),
)


class ProfileForm(forms.ModelForm):
    """Editable profile fields; student details are offered to students only."""

    class Meta:
        model = User
        fields = ["name", "phone_number", *STUDENT_DETAIL_FIELDS]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.instance.is_student:
            for field_name in STUDENT_DETAIL_FIELDS:
                self.fields.pop(field_name, None)
        # Partial updates: anything not submitted keeps its stored value.
        for field_name, field in self.fields.items():
            field.required = False
            if self.data and field_name not in self.data:
                field.disabled = True

    def clean_name(self):
        name = (self.cleaned_data.get("name") or "").strip()
        if not name:
            raise forms.ValidationError("Name cannot be blank.")
        return name

    def clean_phone_number(self):
        phone = normalize_phone(self.cleaned_data.get("phone_number"))
        if not phone:
            raise forms.ValidationError("Phone number cannot be blank.")
        return phone

    def clean_next_of_kin_phone_number(self):
        return normalize_phone(self.cleaned_data.get("next_of_kin_phone_number"))


class DocumentUploadForm(forms.Form):
    kind = forms.ChoiceField(choices=DOCUMENT_KIND_CHOICES)
    file = forms.FileField()


def validate_stay_dates(form, *ordered_fields):
    """Require each date in ``ordered_fields`` to fall strictly after the previous one."""
    labels = {
        "check_in_date": "check-in date",
        "rent_due_date": "rent due date",
        "check_out_date": "check-out date",
    }
    for earlier, later in zip(ordered_fields, ordered_fields[1:]):
        first = form.cleaned_data.get(earlier)
        second = form.cleaned_data.get(later)
        if first and second and second <= first:
            form.add_error(later, f"{labels[later].capitalize()} must be after {labels[earlier]}.")


class BookingInterestForm(forms.ModelForm):
    student_name = forms.CharField(min_length=2, max_length=255)
    national_id = forms.CharField(min_length=5, max_length=20)
    student_app_id = forms.CharField(min_length=3, max_length=15)

    class Meta:
        model = BookingInterest
        fields = [
            "student_name",
            "student_email",
            "national_id",
            "student_app_id",
            "check_in_date",
            "check_out_date",
            "message",
        ]

    def clean(self):
        cleaned_data = super().clean()
        validate_stay_dates(self, "check_in_date", "check_out_date")
        return cleaned_data
