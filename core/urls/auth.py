"""Authentication-focused API endpoints."""

from django.urls import path

from ..api import views

urlpatterns = [
    path('api/auth/signup/', views.SignupView.as_view(), name='auth_signup'),
    path('api/auth/login/', views.LoginView.as_view(), name='auth_login'),
    path('api/auth/logout/', views.LogoutView.as_view(), name='auth_logout'),
    path('api/auth/me/', views.CurrentUserView.as_view(), name='auth_me'),
    path('api/auth/me/documents/', views.DocumentUploadView.as_view(), name='auth_documents'),
]
