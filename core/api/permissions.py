from rest_framework.permissions import BasePermission


class IsStudent(BasePermission):
    """Only student accounts can access the endpoint."""

    message = "Only student accounts can access that page."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, 'role', None) == 'student')


class IsLandlord(BasePermission):
    """Only landlord accounts can access the endpoint."""

    message = "You do not have permission to access that page."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and getattr(user, 'role', None) == 'landlord')
