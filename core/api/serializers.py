from rest_framework import serializers

from ..formatting import format_display_date
from ..models import BookingInterest, Enrollment, Property, Review, User


class UserSerializer(serializers.ModelSerializer):
    """Serializer exposing the current user's own profile document."""

    uid = serializers.IntegerField(source='pk', read_only=True)
    saved_property_ids = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = (
            'uid',
            'email',
            'role',
            'name',
            'phone_number',
            'profile_picture_url',
            'national_id',
            'student_id',
            'next_of_kin_name',
            'next_of_kin_phone_number',
            'national_id_photo_url',
            'student_id_photo_url',
            'saved_property_ids',
        )
        read_only_fields = fields

    def get_saved_property_ids(self, obj):
        return obj.saved_property_ids if obj.is_student else []

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not instance.is_student:
            for name in User.STUDENT_ONLY_FIELDS + ('saved_property_ids',):
                data.pop(name, None)
        return data


class PropertySerializer(serializers.ModelSerializer):
    landlord_id = serializers.IntegerField(read_only=True)
    primary_image = serializers.JSONField(read_only=True)

    class Meta:
        model = Property
        fields = ('id', 'landlord_id', 'primary_image') + Property.EDITABLE_FIELDS + Property.COUNTER_FIELDS + (
            'created_at',
            'updated_at',
        )
        read_only_fields = fields


class LandlordPropertySerializer(PropertySerializer):
    active_enrollments = serializers.IntegerField(read_only=True)
    pending_interests = serializers.IntegerField(read_only=True)

    class Meta(PropertySerializer.Meta):
        fields = PropertySerializer.Meta.fields + ('active_enrollments', 'pending_interests')
        read_only_fields = fields


class ReviewSerializer(serializers.ModelSerializer):
    property_id = serializers.IntegerField(read_only=True)
    student_id = serializers.IntegerField(read_only=True)
    display_date = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = ('id', 'property_id', 'student_id', 'student_name', 'rating', 'comment', 'date', 'display_date')
        read_only_fields = fields

    def get_display_date(self, obj):
        return format_display_date(obj.date)


class BookingInterestSerializer(serializers.ModelSerializer):
    property_id = serializers.IntegerField(read_only=True)
    student_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = BookingInterest
        fields = ('id',) + BookingInterest.DOCUMENT_FIELDS + BookingInterest.OPTIONAL_DOCUMENT_FIELDS
        read_only_fields = fields


class EnrollmentSerializer(serializers.ModelSerializer):
    property_id = serializers.IntegerField(read_only=True)
    student_id = serializers.IntegerField(read_only=True)
    landlord_id = serializers.IntegerField(read_only=True)
    display_dates = serializers.SerializerMethodField()

    class Meta:
        model = Enrollment
        fields = ('id',) + Enrollment.DOCUMENT_FIELDS + Enrollment.OPTIONAL_DOCUMENT_FIELDS + ('display_dates',)
        read_only_fields = fields

    def get_display_dates(self, obj):
        return {
            'check_in_date': format_display_date(obj.check_in_date),
            'rent_due_date': format_display_date(obj.rent_due_date),
            'check_out_date': format_display_date(obj.check_out_date),
            'actual_checkout_date': format_display_date(obj.actual_checkout_date),
        }
