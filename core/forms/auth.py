from django import forms

from ..models import User

STUDENT_DETAIL_FIELDS = ("national_id", "student_id", "next_of_kin_name", "next_of_kin_phone_number")


def normalize_phone(value: str) -> str:
    """Return ``value`` reduced to digits (keeping a leading +), or raise."""
    value = (value or "").strip()
    if not value:
        return value
    prefix = "+" if value.startswith("+") else ""
    digits_only = "".join(ch for ch in value if ch.isdigit())
    if not 9 <= len(digits_only) <= 15:
        raise forms.ValidationError("Phone number must contain between 9 and 15 digits.")
    return prefix + digits_only


class RegisterForm(forms.ModelForm):
    password1 = forms.CharField(label="Password", widget=forms.PasswordInput, min_length=6)
    password2 = forms.CharField(label="Confirm Password", widget=forms.PasswordInput)

    class Meta:
        model = User
        fields = [
            "email",
            "name",
            "phone_number",
            "role",
            "national_id",
            "student_id",
            "next_of_kin_name",
            "next_of_kin_phone_number",
        ]

    def clean(self):
        cleaned_data = super().clean()
        password1 = cleaned_data.get("password1")
        password2 = cleaned_data.get("password2")
        if password1 and password2 and password1 != password2:
            self.add_error("password2", "Passwords do not match.")
        # Student details are silently dropped for landlords.
        if cleaned_data.get("role") == User.ROLE_LANDLORD:
            for field_name in STUDENT_DETAIL_FIELDS:
                cleaned_data[field_name] = ""
        return cleaned_data

    def clean_email(self):
        email = (self.cleaned_data.get("email") or "").strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("An account with this email already exists.")
        return email

    def clean_phone_number(self):
        return normalize_phone(self.cleaned_data.get("phone_number"))

    def clean_next_of_kin_phone_number(self):
        return normalize_phone(self.cleaned_data.get("next_of_kin_phone_number"))

    def save(self, commit=True):
        user = super().save(commit=False)
        user.username = self.cleaned_data["email"]
        user.set_password(self.cleaned_data["password1"])
        if commit:
            user.save()
        return user
