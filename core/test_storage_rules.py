from django.test import SimpleTestCase

from .rules import READ, WRITE, AuthContext
from .rules.storage import MB, check_storage

OWNER = AuthContext(uid=7, role="landlord")
STRANGER = AuthContext(uid=8, role="student")
STUDENT = AuthContext(uid=9, role="student")


class PropertyImagePathTests(SimpleTestCase):
    path = "propertyImages/7/42/front.jpg"

    def test_public_read(self):
        self.assertTrue(check_storage(READ, AuthContext.anonymous(), self.path))

    def test_owner_writes_small_images(self):
        self.assertTrue(check_storage(WRITE, OWNER, self.path, size=2 * MB, content_type="image/jpeg"))

    def test_write_limits(self):
        self.assertFalse(check_storage(WRITE, STRANGER, self.path, size=MB, content_type="image/jpeg"))
        self.assertFalse(check_storage(WRITE, OWNER, self.path, size=6 * MB, content_type="image/jpeg"))
        self.assertFalse(check_storage(WRITE, OWNER, self.path, size=MB, content_type="application/pdf"))
        self.assertFalse(check_storage(WRITE, OWNER, self.path, content_type="image/jpeg"))


class UserDocPathTests(SimpleTestCase):
    def test_owner_only_read_and_write(self):
        path = "userDocs/9/nationalId/scan.pdf"
        self.assertTrue(check_storage(READ, STUDENT, path))
        self.assertFalse(check_storage(READ, STRANGER, path))
        self.assertFalse(check_storage(READ, AuthContext.anonymous(), path))
        self.assertTrue(check_storage(WRITE, STUDENT, path, size=4 * MB, content_type="application/pdf"))
        self.assertTrue(check_storage(WRITE, STUDENT, path, size=MB, content_type="image/png"))
        self.assertFalse(check_storage(WRITE, STUDENT, path, size=MB, content_type="text/plain"))

    def test_unknown_document_kind_denied(self):
        path = "userDocs/9/passport/scan.pdf"
        self.assertFalse(check_storage(WRITE, STUDENT, path, size=MB, content_type="application/pdf"))


class ProfilePicturePathTests(SimpleTestCase):
    path = "profilePictures/9/me.png"

    def test_two_megabyte_limit(self):
        self.assertTrue(check_storage(WRITE, STUDENT, self.path, size=2 * MB, content_type="image/png"))
        self.assertFalse(check_storage(WRITE, STUDENT, self.path, size=2 * MB + 1, content_type="image/png"))
        self.assertTrue(check_storage(READ, STRANGER, self.path))


class UnknownPathTests(SimpleTestCase):
    def test_other_paths_denied(self):
        for path in ("uploads/9/file.png", "profilePictures", "propertyImages/7/front.jpg"):
            with self.subTest(path=path):
                self.assertFalse(check_storage(READ, OWNER, path))
                self.assertFalse(check_storage(WRITE, OWNER, path, size=1, content_type="image/png"))
