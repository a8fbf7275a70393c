"""permission_plus API v1 URLs."""

from django.urls import path

from permission_plus.rest_api.v1 import views

urlpatterns = [
    path("guards/", views.PermissionGuardListView.as_view(), name="guard-list"),
    path("roles/", views.RoleListView.as_view(), name="role-list"),
    path("permissions/me", views.PermissionsMeView.as_view(), name="permissions-me"),
    path("permissions/validate/me", views.PermissionValidationMeView.as_view(), name="permission-validation-me"),
]
