from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from .exceptions import PERMISSION_DENIED_MESSAGE
from .models import BookingInterest, Enrollment, Property
from .test_services import (
    MEDIA_ROOT,
    interest_form_data,
    make_image,
    make_property,
    make_user,
    property_form_data,
    stay_dates,
)


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class APITestBase(APITestCase):
    def setUp(self):
        self.landlord = make_user('lena@example.com', role='landlord')
        self.other_landlord = make_user('omar@example.com', role='landlord')
        self.student = make_user('sam@example.com')
        self.property = make_property(self.landlord)

    def as_user(self, user):
        self.client.force_authenticate(user=user)


class AuthAPITests(APITestBase):
    def test_signup_and_me(self):
        response = self.client.post(
            reverse('auth_signup'),
            {
                'email': 'new@example.com',
                'name': 'New Landlord',
                'phone_number': '0771234567',
                'role': 'landlord',
                'password1': 'secret1',
                'password2': 'secret1',
            },
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['role'], 'landlord')
        self.assertNotIn('national_id', response.data)

        me = self.client.get(reverse('auth_me'))
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['email'], 'new@example.com')

    def test_signup_validation_errors(self):
        response = self.client.post(reverse('auth_signup'), {'email': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data['errors'])

    def test_login(self):
        response = self.client.post(
            reverse('auth_login'), {'email': 'sam@example.com', 'password': 'secret1'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        bad = self.client.post(reverse('auth_login'), {'email': 'sam@example.com', 'password': 'x'}, format='json')
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)

    def test_me_requires_login(self):
        self.assertEqual(self.client.get(reverse('auth_me')).status_code, status.HTTP_403_FORBIDDEN)

    def test_patch_profile(self):
        self.as_user(self.student)
        response = self.client.patch(reverse('auth_me'), {'next_of_kin_name': 'Pat'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data['next_of_kin_name'], 'Pat')

    def test_upload_document(self):
        self.as_user(self.student)
        response = self.client.post(
            reverse('auth_documents'), {'kind': 'nationalId', 'file': make_image()}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['user']['national_id_photo_url'], response.data['url'])

    def test_landlord_id_upload_is_bad_request(self):
        self.as_user(self.landlord)
        response = self.client.post(
            reverse('auth_documents'), {'kind': 'studentId', 'file': make_image()}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PublicAPITests(APITestBase):
    def test_catalog_search_is_public(self):
        make_property(self.landlord, name='Riverside Flat', city='Bulawayo')
        response = self.client.get(reverse('property_list'), {'location': 'Bulawayo'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([item['name'] for item in response.data], ['Riverside Flat'])

    def test_detail_counts_views(self):
        response = self.client.get(reverse('property_detail', args=[self.property.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['view_count'], 1)
        self.assertFalse(response.data['user_can_review'])

    def test_missing_property_is_404(self):
        response = self.client.get(reverse('property_detail', args=[9999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_catalogs(self):
        response = self.client.get(reverse('catalogs'))
        self.assertIn('Wi-Fi', response.data['amenities'])
        self.assertIn('Apartment', response.data['property_types'])
        self.assertEqual(response.data['listed_cities'], ['Harare'])

    def test_review_flow(self):
        url = reverse('property_reviews', args=[self.property.pk])
        self.assertEqual(self.client.post(url, {'rating': 4, 'comment': 'Nice'}).status_code, 403)

        self.as_user(self.student)
        response = self.client.post(url, {'rating': 4, 'comment': 'Nice'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        duplicate = self.client.post(url, {'rating': 5, 'comment': 'Again'}, format='json')
        self.assertEqual(duplicate.status_code, status.HTTP_400_BAD_REQUEST)

        listing = self.client.get(url)
        self.assertEqual(len(listing.data), 1)
        self.assertEqual(listing.data[0]['rating'], 4)

        review_url = reverse('review_detail', args=[response.data['id']])
        self.as_user(make_user('tia@example.com'))
        denied = self.client.patch(review_url, {'rating': 1}, format='json')
        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(denied.data['detail'], PERMISSION_DENIED_MESSAGE)

        self.as_user(self.student)
        self.assertEqual(self.client.delete(review_url).status_code, status.HTTP_204_NO_CONTENT)


class StudentAPITests(APITestBase):
    def setUp(self):
        super().setUp()
        self.as_user(self.student)

    def test_saved_toggle(self):
        url = reverse('saved_toggle', args=[self.property.pk])
        self.assertTrue(self.client.post(url).data['saved'])
        self.assertEqual(len(self.client.get(reverse('saved_list')).data), 1)
        self.assertFalse(self.client.delete(url).data['saved'])

    def test_landlord_cannot_use_student_endpoints(self):
        self.as_user(self.landlord)
        self.assertEqual(self.client.get(reverse('saved_list')).status_code, status.HTTP_403_FORBIDDEN)

    def test_interest_submit_and_archive(self):
        response = self.client.post(
            reverse('interest_create', args=[self.property.pk]), interest_form_data(), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['status'], 'pending')

        interests = self.client.get(reverse('student_interests'))
        self.assertEqual(len(interests.data), 1)

        archived = self.client.post(reverse('interest_archive', args=[response.data['id']]))
        self.assertEqual(archived.status_code, status.HTTP_200_OK)
        self.assertEqual(archived.data['status'], 'archived')

    def test_foreign_accepted_interest_archive_forbidden(self):
        owner = make_user('tia@example.com')
        interest = BookingInterest.objects.create(
            property=self.property,
            property_name=self.property.name,
            student=owner,
            student_name='Tia',
            student_email='tia@example.com',
            national_id='63-123456A70',
            student_app_id='H180124',
            check_in_date='2024-06-01',
            check_out_date='2024-12-01',
            status=BookingInterest.STATUS_ACCEPTED,
            submitted_at=self.property.created_at,
        )
        response = self.client.post(reverse('interest_archive', args=[interest.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['detail'], PERMISSION_DENIED_MESSAGE)
        interest.refresh_from_db()
        self.assertEqual(interest.status, BookingInterest.STATUS_ACCEPTED)

    def test_interest_form_errors(self):
        response = self.client.post(
            reverse('interest_create', args=[self.property.pk]),
            interest_form_data(check_out_date='2024-05-01'),
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('check_out_date', response.data['errors'])

    def test_rental_and_checkout(self):
        self.assertIsNone(self.client.get(reverse('rental')).data['enrollment'])
        enrollment = Enrollment.objects.create(
            property=self.property,
            property_name=self.property.name,
            student=self.student,
            student_name='Sam',
            landlord=self.landlord,
            check_in_date='2024-06-01',
            rent_due_date='2024-06-05',
            check_out_date='2024-12-01',
        )
        Property.objects.filter(pk=self.property.pk).update(enrolled_students_count=1)

        rental = self.client.get(reverse('rental'))
        self.assertEqual(rental.data['enrollment']['id'], enrollment.pk)
        self.assertEqual(rental.data['enrollment']['display_dates']['check_in_date'], 'Jun 01, 2024')
        self.assertEqual(rental.data['property']['id'], self.property.pk)

        response = self.client.post(reverse('rental_checkout', args=[enrollment.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['is_active'])
        self.property.refresh_from_db()
        self.assertEqual(self.property.enrolled_students_count, 0)


class LandlordAPITests(APITestBase):
    def setUp(self):
        super().setUp()
        self.as_user(self.landlord)

    def test_dashboard(self):
        response = self.client.get(reverse('landlord_dashboard'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats']['total_properties'], 1)
        self.assertEqual(response.data['properties'][0]['active_enrollments'], 0)

    def test_create_property_multipart(self):
        data = property_form_data(availability='[{"from": "2024-07-01", "to": null}]')
        data['images'] = [make_image('front.png')]
        data['image_hints'] = ['front view']
        response = self.client.post(reverse('landlord_property_create'), data, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data['images'][0]['hint'], 'front view')

    def test_create_property_errors(self):
        response = self.client.post(
            reverse('landlord_property_create'), property_form_data(price='0'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('price', response.data['errors'])

    def test_manage_read_skips_view_count(self):
        response = self.client.get(reverse('landlord_property_detail', args=[self.property.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['view_count'], 0)

    def test_edit_and_delete_own_property_only(self):
        url = reverse('landlord_property_detail', args=[self.property.pk])
        self.as_user(self.other_landlord)
        self.assertEqual(self.client.put(url, property_form_data(), format='json').status_code, 403)
        self.assertEqual(self.client.delete(url).status_code, 403)

        self.as_user(self.landlord)
        response = self.client.put(url, property_form_data(name='Renamed Rooms'), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data['name'], 'Renamed Rooms')
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)

    def test_interest_to_enrollment_flow(self):
        interest = BookingInterest.objects.create(
            property=self.property,
            property_name=self.property.name,
            student=self.student,
            student_name='Sam',
            student_email='sam@example.com',
            national_id='63-123456A70',
            student_app_id='H180123',
            check_in_date='2024-06-01',
            check_out_date='2024-12-01',
            submitted_at=self.property.created_at,
        )
        Property.objects.filter(pk=self.property.pk).update(interested_count=1)

        listing = self.client.get(reverse('landlord_property_interests', args=[self.property.pk]), {'status': 'pending'})
        self.assertEqual([item['id'] for item in listing.data], [interest.pk])
        several = self.client.get(
            reverse('landlord_property_interests', args=[self.property.pk]), {'status': 'rejected,pending'}
        )
        self.assertEqual([item['id'] for item in several.data], [interest.pk])
        rejected_only = self.client.get(reverse('landlord_property_interests', args=[self.property.pk]), {'status': 'rejected'})
        self.assertEqual(rejected_only.data, [])

        contacted = self.client.post(reverse('landlord_interest_status', args=[interest.pk]), {'status': 'contacted'})
        self.assertEqual(contacted.data['status'], 'contacted')
        invalid = self.client.post(reverse('landlord_interest_status', args=[interest.pk]), {'status': 'pending'})
        self.assertEqual(invalid.status_code, status.HTTP_403_FORBIDDEN)

        enrolled = self.client.post(reverse('landlord_interest_enroll', args=[interest.pk]), stay_dates(), format='json')
        self.assertEqual(enrolled.status_code, status.HTTP_201_CREATED, enrolled.data)
        again = self.client.post(reverse('landlord_interest_enroll', args=[interest.pk]), stay_dates(), format='json')
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)

        self.property.refresh_from_db()
        self.assertEqual(self.property.enrolled_students_count, 1)
        self.assertEqual(self.property.interested_count, 0)

        enrollments_url = reverse('landlord_property_enrollments', args=[self.property.pk])
        self.assertEqual(len(self.client.get(enrollments_url).data), 1)

        enrollment_url = reverse('landlord_enrollment_detail', args=[enrolled.data['id']])
        edited = self.client.patch(enrollment_url, {'rent_due_date': '2024-06-07'}, format='json')
        self.assertEqual(edited.status_code, status.HTTP_200_OK, edited.data)
        self.assertEqual(edited.data['rent_due_date'], '2024-06-07')
        self.assertEqual(self.client.delete(enrollment_url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.get(enrollments_url).data, [])

    def test_direct_enrollment_unknown_student(self):
        response = self.client.post(
            reverse('landlord_property_enrollments', args=[self.property.pk]),
            stay_dates(student_email='ghost@example.com', name='Ghost'),
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_landlord_cannot_list_interests(self):
        self.as_user(self.other_landlord)
        response = self.client.get(reverse('landlord_property_interests', args=[self.property.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
