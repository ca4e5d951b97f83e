from django.contrib.auth import login, logout
from django.contrib.auth.forms import AuthenticationForm
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..services.users import ProfileService, SignupService
from .base import ServiceAPIView
from .serializers import UserSerializer


class SignupView(ServiceAPIView):
    """Register a student or landlord account and start a session."""

    service_class = SignupService

    def post(self, request):
        success, form, user = self.service_class().register(request.data)
        if not success:
            return self.form_error_response(form)
        login(request, user, backend='django.contrib.auth.backends.ModelBackend')
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(ServiceAPIView):
    def post(self, request):
        # Accounts are keyed by email; the form still calls it "username".
        data = {
            'username': (request.data.get('email') or request.data.get('username') or '').strip().lower(),
            'password': request.data.get('password') or '',
        }
        form = AuthenticationForm(request._request, data=data)
        if not form.is_valid():
            return Response({'detail': 'Invalid email or password.'}, status=status.HTTP_400_BAD_REQUEST)
        login(request, form.get_user())
        return Response(UserSerializer(form.get_user()).data)


class LogoutView(ServiceAPIView):
    def post(self, request):
        logout(request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CurrentUserView(ServiceAPIView):
    """Return or update the authenticated user's profile information."""

    permission_classes = [IsAuthenticated]

    def get_service(self) -> ProfileService:
        return ProfileService(self.request.user)

    def get(self, request):
        return Response(UserSerializer(self.get_service().get()).data)

    def patch(self, request):
        success, form, user = self.get_service().update(request.data)
        if not success:
            return self.form_error_response(form)
        return Response(UserSerializer(user).data)


class DocumentUploadView(ServiceAPIView):
    """Upload a profile picture or an identity document photo."""

    permission_classes = [IsAuthenticated]

    def post(self, request):
        service = ProfileService(request.user)
        success, form, url = service.upload_document(request.data, request.FILES)
        if not success:
            return self.form_error_response(form)
        return Response(
            {'kind': form.cleaned_data['kind'], 'url': url, 'user': UserSerializer(request.user).data},
            status=status.HTTP_201_CREATED,
        )
