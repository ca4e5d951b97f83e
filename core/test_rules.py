from datetime import date, datetime, timezone as dt_timezone

from django.test import SimpleTestCase

from .exceptions import PERMISSION_DENIED_MESSAGE, RuleDenied
from .rules import CREATE, DELETE, READ, UPDATE, AuthContext, enforce, evaluate
from .rules.properties import (
    EnrollmentCountChange,
    InterestIncrement,
    LandlordEdit,
    RatingUpdate,
    ViewIncrement,
    classify_update,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=dt_timezone.utc)
EARLIER = datetime(2024, 4, 1, 9, 0, tzinfo=dt_timezone.utc)

STUDENT = AuthContext(uid=1, role="student")
OTHER_STUDENT = AuthContext(uid=2, role="student")
LANDLORD = AuthContext(uid=10, role="landlord")
OTHER_LANDLORD = AuthContext(uid=11, role="landlord")
ANONYMOUS = AuthContext.anonymous()


def property_doc(**overrides):
    doc = {
        "name": "Hillside Rooms",
        "address": "12 College Road",
        "city": "Harare",
        "suburb": "Mount Pleasant",
        "description": "Quiet rooms close to campus with fast Wi-Fi.",
        "property_type": "Single Room",
        "capacity": 4,
        "gender_preference": "Any",
        "amenities": ["Wi-Fi"],
        "price": 120,
        "availability": [{"from": "2024-06-01", "to": None}],
        "images": [],
        "landlord_name": "Lena Landlord",
        "landlord_email": "lena@example.com",
        "landlord_phone_number": "+263771234567",
        "landlord_id": LANDLORD.uid,
        "created_at": EARLIER,
        "updated_at": EARLIER,
        "view_count": 3,
        "interested_count": 2,
        "enrolled_students_count": 1,
        "average_rating": 4.0,
        "review_count": 2,
    }
    doc.update(overrides)
    return doc


def check_property_update(auth, before, **changes):
    after = dict(before, updated_at=NOW, **changes)
    return evaluate("properties", UPDATE, auth, resource=before, data=after, time=NOW)


class EnforceTests(SimpleTestCase):
    def test_denial_carries_only_blanket_message(self):
        with self.assertRaises(RuleDenied) as ctx:
            enforce("properties", CREATE, STUDENT, data=property_doc(), time=NOW)
        self.assertEqual(str(ctx.exception), PERMISSION_DENIED_MESSAGE)
        self.assertTrue(ctx.exception.reason)

    def test_unknown_collection_is_denied(self):
        self.assertFalse(evaluate("payments", READ, LANDLORD))


class UserRulesTests(SimpleTestCase):
    def student_doc(self, **overrides):
        doc = {
            "uid": STUDENT.uid,
            "name": "Sam Student",
            "email": "sam@example.com",
            "phone_number": "+263770000001",
            "role": "student",
            "national_id": "63-123456A70",
        }
        doc.update(overrides)
        return doc

    def test_user_reads_only_own_document(self):
        doc = self.student_doc()
        self.assertTrue(evaluate("users", READ, STUDENT, resource=doc))
        self.assertFalse(evaluate("users", READ, OTHER_STUDENT, resource=doc))
        self.assertFalse(evaluate("users", READ, ANONYMOUS, resource=doc))

    def test_create_requires_matching_uid(self):
        self.assertTrue(evaluate("users", CREATE, STUDENT, data=self.student_doc()))
        self.assertFalse(evaluate("users", CREATE, OTHER_STUDENT, data=self.student_doc()))

    def test_landlord_cannot_carry_student_fields(self):
        doc = {
            "uid": LANDLORD.uid,
            "name": "Lena",
            "email": "lena@example.com",
            "phone_number": "+263771234567",
            "role": "landlord",
        }
        self.assertTrue(evaluate("users", CREATE, LANDLORD, data=doc))
        self.assertFalse(evaluate("users", CREATE, LANDLORD, data=dict(doc, national_id="X1234")))

    def test_invalid_role_is_rejected(self):
        self.assertFalse(evaluate("users", CREATE, STUDENT, data=self.student_doc(role="admin")))

    def test_student_cannot_change_identity_fields(self):
        before = self.student_doc()
        for name, value in (("role", "landlord"), ("uid", 99), ("email", "new@example.com")):
            with self.subTest(field=name):
                after = dict(before, **{name: value})
                self.assertFalse(evaluate("users", UPDATE, STUDENT, resource=before, data=after))

    def test_student_updates_own_profile(self):
        before = self.student_doc()
        after = dict(before, next_of_kin_name="Pat Parent", saved_property_ids=[4])
        self.assertTrue(evaluate("users", UPDATE, STUDENT, resource=before, data=after))
        self.assertFalse(evaluate("users", UPDATE, OTHER_STUDENT, resource=before, data=after))

    def test_users_cannot_be_deleted(self):
        self.assertFalse(evaluate("users", DELETE, STUDENT, resource=self.student_doc()))


class PropertyCreateTests(SimpleTestCase):
    def new_doc(self, **overrides):
        counters = dict(view_count=0, interested_count=0, enrolled_students_count=0, average_rating=0, review_count=0)
        return property_doc(**{**counters, "created_at": NOW, "updated_at": NOW, **overrides})

    def test_landlord_creates_own_listing(self):
        self.assertTrue(evaluate("properties", CREATE, LANDLORD, data=self.new_doc(), time=NOW))

    def test_student_create_rejected_regardless_of_payload(self):
        self.assertFalse(evaluate("properties", CREATE, STUDENT, data=self.new_doc(), time=NOW))
        self.assertFalse(
            evaluate("properties", CREATE, STUDENT, data=self.new_doc(landlord_id=STUDENT.uid), time=NOW)
        )

    def test_landlord_id_must_match(self):
        self.assertFalse(evaluate("properties", CREATE, OTHER_LANDLORD, data=self.new_doc(), time=NOW))

    def test_counters_start_at_zero(self):
        self.assertFalse(evaluate("properties", CREATE, LANDLORD, data=self.new_doc(view_count=5), time=NOW))

    def test_missing_or_extra_keys_rejected(self):
        doc = self.new_doc()
        del doc["suburb"]
        self.assertFalse(evaluate("properties", CREATE, LANDLORD, data=doc, time=NOW))
        self.assertFalse(evaluate("properties", CREATE, LANDLORD, data=self.new_doc(featured=True), time=NOW))

    def test_timestamps_must_be_request_time(self):
        self.assertFalse(evaluate("properties", CREATE, LANDLORD, data=self.new_doc(created_at=EARLIER), time=NOW))

    def test_reads_are_public(self):
        self.assertTrue(evaluate("properties", READ, ANONYMOUS, resource=property_doc()))


class PropertyUpdateShapeTests(SimpleTestCase):
    def test_classifier_picks_variant(self):
        before = property_doc()
        cases = (
            ({"view_count": 4}, ViewIncrement),
            ({"interested_count": 3}, InterestIncrement),
            ({"enrolled_students_count": 2}, EnrollmentCountChange),
            ({"average_rating": 4.5, "review_count": 3}, RatingUpdate),
            ({"price": 150}, LandlordEdit),
        )
        for changes, expected in cases:
            with self.subTest(changes=changes):
                after = dict(before, updated_at=NOW, **changes)
                self.assertIsInstance(classify_update(before, after), expected)

    def test_anyone_increments_views_by_one(self):
        before = property_doc()
        self.assertTrue(check_property_update(ANONYMOUS, before, view_count=4))
        self.assertFalse(check_property_update(ANONYMOUS, before, view_count=5))
        self.assertFalse(check_property_update(ANONYMOUS, before, view_count=2))

    def test_extra_key_with_counter_change_rejected(self):
        before = property_doc()
        self.assertFalse(check_property_update(ANONYMOUS, before, view_count=4, name="Renamed"))
        self.assertFalse(check_property_update(STUDENT, before, interested_count=3, view_count=4))

    def test_counter_change_must_stamp_updated_at(self):
        before = property_doc()
        after = dict(before, view_count=4)
        self.assertFalse(evaluate("properties", UPDATE, ANONYMOUS, resource=before, data=after, time=NOW))

    def test_interest_count_rules(self):
        before = property_doc()
        self.assertTrue(check_property_update(STUDENT, before, interested_count=3))
        self.assertFalse(check_property_update(STUDENT, before, interested_count=1))
        self.assertTrue(check_property_update(LANDLORD, before, interested_count=1))
        self.assertFalse(check_property_update(OTHER_LANDLORD, before, interested_count=1))
        self.assertFalse(check_property_update(LANDLORD, before, interested_count=3))

    def test_enrollment_count_rules(self):
        before = property_doc()
        self.assertTrue(check_property_update(LANDLORD, before, enrolled_students_count=2))
        self.assertTrue(check_property_update(LANDLORD, before, enrolled_students_count=0))
        self.assertFalse(check_property_update(LANDLORD, before, enrolled_students_count=3))
        self.assertTrue(check_property_update(STUDENT, before, enrolled_students_count=0))
        self.assertFalse(check_property_update(STUDENT, before, enrolled_students_count=2))

    def test_counters_never_negative(self):
        before = property_doc(enrolled_students_count=0)
        self.assertFalse(check_property_update(LANDLORD, before, enrolled_students_count=-1))

    def test_rating_update_by_student(self):
        before = property_doc()
        self.assertTrue(check_property_update(STUDENT, before, average_rating=4.3, review_count=3))
        self.assertTrue(check_property_update(STUDENT, before, average_rating=3.5))
        self.assertFalse(check_property_update(LANDLORD, before, average_rating=5.0))
        self.assertFalse(check_property_update(STUDENT, before, average_rating=5.5))
        self.assertFalse(check_property_update(STUDENT, before, average_rating=4.3, review_count=4))

    def test_landlord_edit(self):
        before = property_doc()
        self.assertTrue(check_property_update(LANDLORD, before, price=150, description="Now with a garden."))
        self.assertFalse(check_property_update(OTHER_LANDLORD, before, price=150))
        self.assertFalse(check_property_update(STUDENT, before, price=150))
        self.assertFalse(check_property_update(LANDLORD, before, landlord_id=OTHER_LANDLORD.uid))
        self.assertFalse(check_property_update(LANDLORD, before, created_at=NOW))

    def test_landlord_edit_cannot_touch_counters(self):
        before = property_doc()
        self.assertFalse(check_property_update(LANDLORD, before, price=150, view_count=4))

    def test_delete_by_owner_only(self):
        self.assertTrue(evaluate("properties", DELETE, LANDLORD, resource=property_doc()))
        self.assertFalse(evaluate("properties", DELETE, OTHER_LANDLORD, resource=property_doc()))


class ReviewRulesTests(SimpleTestCase):
    def review_doc(self, **overrides):
        doc = {
            "property_id": 5,
            "student_id": STUDENT.uid,
            "student_name": "Sam Student",
            "rating": 4,
            "comment": "Great place to stay.",
            "date": NOW,
        }
        doc.update(overrides)
        return doc

    def test_student_creates_review(self):
        self.assertTrue(evaluate("reviews", CREATE, STUDENT, data=self.review_doc(), time=NOW))

    def test_create_validation(self):
        bad = (
            (LANDLORD, self.review_doc(student_id=LANDLORD.uid)),
            (OTHER_STUDENT, self.review_doc()),
            (STUDENT, self.review_doc(rating=6)),
            (STUDENT, self.review_doc(rating=0)),
            (STUDENT, self.review_doc(rating=4.5)),
            (STUDENT, self.review_doc(comment="   ")),
            (STUDENT, self.review_doc(date=EARLIER)),
            (STUDENT, self.review_doc(helpful=True)),
        )
        for auth, doc in bad:
            with self.subTest(doc=doc):
                self.assertFalse(evaluate("reviews", CREATE, auth, data=doc, time=NOW))

    def test_author_edits_and_deletes(self):
        before = self.review_doc(date=EARLIER)
        after = dict(before, rating=5, date=NOW)
        self.assertTrue(evaluate("reviews", UPDATE, STUDENT, resource=before, data=after, time=NOW))
        self.assertFalse(evaluate("reviews", UPDATE, OTHER_STUDENT, resource=before, data=after, time=NOW))
        moved = dict(after, property_id=6)
        self.assertFalse(evaluate("reviews", UPDATE, STUDENT, resource=before, data=moved, time=NOW))
        self.assertTrue(evaluate("reviews", DELETE, STUDENT, resource=before))
        self.assertFalse(evaluate("reviews", DELETE, OTHER_STUDENT, resource=before))

    def test_duplicate_reviews_are_not_a_rule_concern(self):
        # The same student may pass the create check twice for one property.
        doc = self.review_doc()
        self.assertTrue(evaluate("reviews", CREATE, STUDENT, data=doc, time=NOW))
        self.assertTrue(evaluate("reviews", CREATE, STUDENT, data=dict(doc), time=NOW))


class BookingInterestRulesTests(SimpleTestCase):
    related = {"property": property_doc()}

    def interest_doc(self, **overrides):
        doc = {
            "property_id": 5,
            "property_name": "Hillside Rooms",
            "student_id": STUDENT.uid,
            "student_name": "Sam Student",
            "student_email": "sam@example.com",
            "national_id": "63-123456A70",
            "student_app_id": "H180123",
            "check_in_date": date(2024, 6, 1),
            "check_out_date": date(2024, 12, 1),
            "message": "",
            "status": "pending",
            "submitted_at": NOW,
        }
        doc.update(overrides)
        return doc

    def create(self, auth, doc):
        return evaluate("bookingInterests", CREATE, auth, data=doc, related=self.related, time=NOW)

    def update(self, auth, before, status):
        after = dict(before, status=status, updated_at=NOW)
        return evaluate(
            "bookingInterests", UPDATE, auth, resource=before, data=after, related=self.related, time=NOW
        )

    def test_student_submits_pending_interest(self):
        self.assertTrue(self.create(STUDENT, self.interest_doc()))
        self.assertTrue(self.create(STUDENT, self.interest_doc(national_id_photo_url="https://x/id.png")))

    def test_create_validation(self):
        self.assertFalse(self.create(LANDLORD, self.interest_doc(student_id=LANDLORD.uid)))
        self.assertFalse(self.create(OTHER_STUDENT, self.interest_doc()))
        self.assertFalse(self.create(STUDENT, self.interest_doc(status="accepted")))
        self.assertFalse(self.create(STUDENT, self.interest_doc(submitted_at=EARLIER)))
        self.assertFalse(self.create(STUDENT, self.interest_doc(check_out_date=date(2024, 5, 1))))
        doc = self.interest_doc()
        del doc["student_app_id"]
        self.assertFalse(self.create(STUDENT, doc))

    def test_create_requires_existing_property(self):
        doc = self.interest_doc()
        self.assertFalse(evaluate("bookingInterests", CREATE, STUDENT, data=doc, time=NOW))

    def test_read_by_student_or_property_landlord(self):
        doc = self.interest_doc()
        for auth, allowed in ((STUDENT, True), (LANDLORD, True), (OTHER_STUDENT, False), (OTHER_LANDLORD, False)):
            with self.subTest(auth=auth):
                decision = evaluate("bookingInterests", READ, auth, resource=doc, related=self.related)
                self.assertEqual(bool(decision), allowed)

    def test_landlord_transitions(self):
        allowed = (("pending", "contacted"), ("pending", "accepted"), ("contacted", "rejected"), ("accepted", "archived"))
        denied = (("pending", "archived"), ("rejected", "accepted"), ("archived", "pending"), ("accepted", "pending"))
        for current, new in allowed:
            with self.subTest(current=current, new=new):
                self.assertTrue(self.update(LANDLORD, self.interest_doc(status=current), new))
        for current, new in denied:
            with self.subTest(current=current, new=new):
                self.assertFalse(self.update(LANDLORD, self.interest_doc(status=current), new))

    def test_student_archives_unless_accepted(self):
        self.assertTrue(self.update(STUDENT, self.interest_doc(status="pending"), "archived"))
        self.assertTrue(self.update(STUDENT, self.interest_doc(status="rejected"), "archived"))
        self.assertFalse(self.update(STUDENT, self.interest_doc(status="accepted"), "archived"))
        self.assertFalse(self.update(STUDENT, self.interest_doc(status="pending"), "contacted"))
        self.assertFalse(self.update(OTHER_STUDENT, self.interest_doc(status="pending"), "archived"))

    def test_update_must_change_status_and_stamp(self):
        before = self.interest_doc()
        after = dict(before, status="contacted", message="hi", updated_at=NOW)
        self.assertFalse(
            evaluate("bookingInterests", UPDATE, LANDLORD, resource=before, data=after, related=self.related, time=NOW)
        )
        after = dict(before, status="contacted", updated_at=EARLIER)
        self.assertFalse(
            evaluate("bookingInterests", UPDATE, LANDLORD, resource=before, data=after, related=self.related, time=NOW)
        )

    def test_interests_cannot_be_deleted(self):
        self.assertFalse(evaluate("bookingInterests", DELETE, STUDENT, resource=self.interest_doc()))


class EnrollmentRulesTests(SimpleTestCase):
    related = {"property": property_doc()}

    def enrollment_doc(self, **overrides):
        doc = {
            "property_id": 5,
            "property_name": "Hillside Rooms",
            "student_id": STUDENT.uid,
            "student_name": "Sam Student",
            "landlord_id": LANDLORD.uid,
            "check_in_date": date(2024, 6, 1),
            "rent_due_date": date(2024, 6, 5),
            "check_out_date": date(2024, 12, 1),
            "is_active": True,
        }
        doc.update(overrides)
        return doc

    def test_landlord_enrolls_into_own_property(self):
        doc = self.enrollment_doc()
        self.assertTrue(evaluate("enrollments", CREATE, LANDLORD, data=doc, related=self.related))
        self.assertFalse(evaluate("enrollments", CREATE, STUDENT, data=doc, related=self.related))
        other = self.enrollment_doc(landlord_id=OTHER_LANDLORD.uid)
        self.assertFalse(evaluate("enrollments", CREATE, OTHER_LANDLORD, data=other, related=self.related))

    def test_create_must_be_active_without_checkout(self):
        self.assertFalse(
            evaluate("enrollments", CREATE, LANDLORD, data=self.enrollment_doc(is_active=False), related=self.related)
        )
        doc = self.enrollment_doc(actual_checkout_date=NOW)
        self.assertFalse(evaluate("enrollments", CREATE, LANDLORD, data=doc, related=self.related))

    def test_landlord_edits_schedule_only(self):
        before = self.enrollment_doc()
        after = dict(before, rent_due_date=date(2024, 6, 10))
        self.assertTrue(evaluate("enrollments", UPDATE, LANDLORD, resource=before, data=after))
        after = dict(before, is_active=False)
        self.assertFalse(evaluate("enrollments", UPDATE, LANDLORD, resource=before, data=after))

    def test_student_checkout(self):
        before = self.enrollment_doc()
        after = dict(before, is_active=False, actual_checkout_date=NOW)
        self.assertTrue(evaluate("enrollments", UPDATE, STUDENT, resource=before, data=after, time=NOW))
        self.assertFalse(evaluate("enrollments", UPDATE, OTHER_STUDENT, resource=before, data=after, time=NOW))

    def test_is_active_only_goes_true_to_false(self):
        before = self.enrollment_doc(is_active=False, actual_checkout_date=EARLIER)
        after = dict(before, is_active=True, actual_checkout_date=NOW)
        self.assertFalse(evaluate("enrollments", UPDATE, STUDENT, resource=before, data=after, time=NOW))

    def test_student_checkout_needs_server_stamp(self):
        before = self.enrollment_doc()
        after = dict(before, is_active=False, actual_checkout_date=EARLIER)
        self.assertFalse(evaluate("enrollments", UPDATE, STUDENT, resource=before, data=after, time=NOW))
        after = dict(before, is_active=False)
        self.assertFalse(evaluate("enrollments", UPDATE, STUDENT, resource=before, data=after, time=NOW))

    def test_read_and_delete(self):
        doc = self.enrollment_doc()
        self.assertTrue(evaluate("enrollments", READ, STUDENT, resource=doc))
        self.assertTrue(evaluate("enrollments", READ, LANDLORD, resource=doc))
        self.assertFalse(evaluate("enrollments", READ, OTHER_STUDENT, resource=doc))
        self.assertTrue(evaluate("enrollments", DELETE, LANDLORD, resource=doc))
        self.assertFalse(evaluate("enrollments", DELETE, STUDENT, resource=doc))
