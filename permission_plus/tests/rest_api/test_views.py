"""
Unit tests for the permission_plus REST API views.

This test suite validates permission validation for the request user, the
grouped permissions of the request user, and the guard and role listings.
"""

from unittest.mock import patch

from ddt import data, ddt, unpack
from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from permission_plus import api
from permission_plus.rest_api.data import ApiPermission
from permission_plus.tests.api.test_assignments import BaseAccessControlTestCase
from permission_plus.tests.test_utils import make_guard, make_role

User = get_user_model()


class ViewTestMixin(BaseAccessControlTestCase):
    """Mixin providing users and API permissions for view tests."""

    @classmethod
    def setUpTestData(cls):
        """Create the API permissions, a reader role and the users."""
        super().setUpTestData()
        make_guard("access-control", ApiPermission.values(), en="Access control")
        make_role("access-control-viewer", ApiPermission.values())
        cls.admin_user = User.objects.create_user(username="admin", email="admin@example.com", is_staff=True)
        cls.reader_user = User.objects.create_user(username="reader", email="reader@example.com")
        cls.regular_user = User.objects.create_user(username="regular", email="regular@example.com")
        api.assign_roles(cls.reader_user, "access-control-viewer")
        api.assign_roles(cls.regular_user, "editor")

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(user=self.regular_user)


@ddt
class TestPermissionValidationMeView(ViewTestMixin):
    """Test suite for PermissionValidationMeView."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.url = reverse("permission_plus:permission-validation-me")

    @data(
        ([{"permission": "edit-post"}], [True]),
        ([{"permission": "delete-post"}], [False]),
        ([{"permission": "unknown"}], [False]),
        (
            [{"permission": "edit-post"}, {"permission": "view-post"}, {"permission": "view-invoice"}],
            [True, True, False],
        ),
    )
    @unpack
    def test_permission_validation_success(self, request_data: list[dict], permission_map: list[bool]):
        """Test successful permission validation requests.

        Expected result:
            - Returns 200 OK status
            - Returns correct permission validation results
        """
        expected_response = [dict(item, allowed=allowed) for item, allowed in zip(request_data, permission_map)]

        response = self.client.post(self.url, data=request_data, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, expected_response)

    @data(
        [{}],
        [{"permission": ""}],
        [{"permission": "p" * 256}],
        [{"permission": "edit-post"}, {}],
    )
    def test_permission_validation_invalid_data(self, invalid_data: list[dict]):
        """Test permission validation with invalid request data.

        Expected result:
            - Returns 400 BAD REQUEST status
        """
        response = self.client.post(self.url, data=invalid_data, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_permission_validation_unauthenticated(self):
        """Test permission validation without authentication.

        Expected result:
            - Returns 401 UNAUTHORIZED status
        """
        self.client.force_authenticate(user=None)

        response = self.client.post(self.url, data=[{"permission": "edit-post"}], format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_permission_validation_exception_handling(self):
        """Test that unexpected errors produce a 500 response."""
        with patch.object(api, "has_permission_to", side_effect=Exception()):
            response = self.client.post(self.url, data=[{"permission": "edit-post"}], format="json")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {"message": "An error occurred while validating permissions"})


class TestPermissionsMeView(ViewTestMixin):
    """Test suite for PermissionsMeView."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.url = reverse("permission_plus:permissions-me")

    def test_grouped_direct_permissions(self):
        """Test listing the direct permissions of the user.

        Expected result:
            - Only directly granted permissions are grouped by guard.
        """
        api.give_permissions(self.regular_user, "edit-post", "view-invoice")

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data,
            [
                {"key": "posts", "name": "المنشورات", "permissions": [{"key": "edit-post", "name": "edit-post"}]},
                {
                    "key": "billing",
                    "name": "Billing",
                    "permissions": [{"key": "view-invoice", "name": "view-invoice"}],
                },
            ],
        )

    def test_no_direct_permissions(self):
        """Test that permissions held through roles are not listed."""
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])


@ddt
class TestPermissionGuardListView(ViewTestMixin):
    """Test suite for PermissionGuardListView."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.url = reverse("permission_plus:guard-list")

    @data(
        ("en", "Posts"),
        ("ar", "المنشورات"),
        ("fr", "Posts"),
    )
    @unpack
    def test_list_guards(self, locale: str, posts_name: str):
        """Test listing guards with names resolved for a locale.

        Expected result:
            - Returns 200 OK status with every guard and its permissions
        """
        self.client.force_authenticate(user=self.reader_user)

        response = self.client.get(self.url, {"locale": locale})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([guard["key"] for guard in response.data], ["posts", "billing", "access-control"])
        self.assertEqual(response.data[0]["name"], posts_name)
        self.assertCountEqual(
            [permission["key"] for permission in response.data[0]["permissions"]],
            ["edit-post", "delete-post", "view-post"],
        )

    @data(
        ("admin", status.HTTP_200_OK),
        ("reader", status.HTTP_200_OK),
        ("regular", status.HTTP_403_FORBIDDEN),
        (None, status.HTTP_401_UNAUTHORIZED),
    )
    @unpack
    def test_list_guards_permissions(self, username: str | None, status_code: int):
        """Test access to the guard listing.

        Expected result:
            - Staff and holders of the API permission are allowed.
        """
        user = User.objects.get(username=username) if username else None
        self.client.force_authenticate(user=user)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status_code)


@ddt
class TestRoleListView(ViewTestMixin):
    """Test suite for RoleListView."""

    def setUp(self):
        """Set up test fixtures."""
        super().setUp()
        self.url = reverse("permission_plus:role-list")
        self.client.force_authenticate(user=self.reader_user)

    def test_list_roles(self):
        """Test listing roles with permissions and subject counts.

        Expected result:
            - Returns 200 OK status with paginated roles
        """
        api.assign_roles(self.alice, "editor")

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 4)
        editor = response.data["results"][0]
        self.assertEqual(editor["role"], "editor")
        self.assertEqual(editor["name"], "editor")
        self.assertCountEqual(editor["permissions"], ["edit-post", "view-post"])
        # The team group, the regular user and alice.
        self.assertEqual(editor["subject_count"], 3)

    @data(
        ({"page": 1, "page_size": 2}, 2, True),
        ({"page": 2, "page_size": 2}, 2, False),
        ({"page_size": 10}, 4, False),
    )
    @unpack
    def test_pagination(self, query_params: dict, expected_count: int, has_next: bool):
        """Test role list pagination.

        Expected result:
            - Returns the requested page size and next link
        """
        response = self.client.get(self.url, query_params)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["results"]), expected_count)
        self.assertEqual(response.data["next"] is not None, has_next)

    @data(
        ("admin", status.HTTP_200_OK),
        ("reader", status.HTTP_200_OK),
        ("regular", status.HTTP_403_FORBIDDEN),
        (None, status.HTTP_401_UNAUTHORIZED),
    )
    @unpack
    def test_list_roles_permissions(self, username: str | None, status_code: int):
        """Test access to the role listing."""
        user = User.objects.get(username=username) if username else None
        self.client.force_authenticate(user=user)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status_code)
