"""permission_plus URLs."""

from django.urls import include, path

from permission_plus.rest_api import urls

app_name = "permission_plus"

urlpatterns = [
    path("authz/", include((urls, "permission_plus"))),
]
