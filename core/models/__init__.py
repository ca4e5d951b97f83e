"""Core application data models exposed as a flat module-level API."""

from .enrollment import Enrollment
from .interest import BookingInterest
from .property import Property
from .review import Review
from .user import User

__all__ = [
    "User",
    "Property",
    "Review",
    "BookingInterest",
    "Enrollment",
]
