from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import BookingInterest, Enrollment, Property, Review, User


@admin.register(User)
class CustomUserAdmin(BaseUserAdmin):
	list_display = ('email', 'name', 'role', 'phone_number', 'is_staff')
	list_filter = BaseUserAdmin.list_filter + ('role',)
	search_fields = ('email', 'name', 'phone_number')
	fieldsets = BaseUserAdmin.fieldsets + (
		('Profile', {'fields': ('role', 'name', 'phone_number', 'profile_picture_url')}),
		(
			'Student details',
			{
				'fields': (
					'national_id',
					'student_id',
					'next_of_kin_name',
					'next_of_kin_phone_number',
					'national_id_photo_url',
					'student_id_photo_url',
					'saved_properties',
				),
			},
		),
	)
	add_fieldsets = BaseUserAdmin.add_fieldsets + (
		(
			'Profile',
			{
				'classes': ('wide',),
				'fields': ('email', 'role', 'name', 'phone_number'),
			},
		),
	)


@admin.register(Property)
class PropertyAdmin(admin.ModelAdmin):
	list_display = ('name', 'landlord', 'property_type', 'city', 'price', 'view_count', 'enrolled_students_count')
	list_filter = ('property_type', 'gender_preference', 'city')
	search_fields = ('name', 'city', 'suburb', 'landlord__email', 'landlord__name')
	readonly_fields = ('view_count', 'interested_count', 'enrolled_students_count', 'average_rating', 'review_count')


@admin.register(BookingInterest)
class BookingInterestAdmin(admin.ModelAdmin):
	list_display = ('student_name', 'property_name', 'status', 'submitted_at')
	list_filter = ('status',)
	search_fields = ('student_name', 'student_email', 'property_name')


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
	list_display = ('student_name', 'property_name', 'check_in_date', 'check_out_date', 'is_active')
	list_filter = ('is_active',)


admin.site.register(Review)
