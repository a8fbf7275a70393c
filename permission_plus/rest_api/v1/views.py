"""
REST API views for permission_plus.

This module provides Django REST Framework views exposing permission guards,
roles and the request user's permissions.
"""

import logging

import edx_api_doc_tools as apidocs
from django.db.models import Count
from django.http import HttpRequest
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from permission_plus import api
from permission_plus.rest_api.data import ApiPermission
from permission_plus.rest_api.decorators import view_auth_classes
from permission_plus.rest_api.v1.paginators import AccessControlPagination
from permission_plus.rest_api.v1.permissions import AccessControlPermission, authz_permissions
from permission_plus.rest_api.v1.serializers import (
    GroupedPermissionsResponseSerializer,
    ListRolesResponseSerializer,
    LocaleQuerySerializer,
    PermissionGuardSerializer,
    PermissionValidationResponseSerializer,
    PermissionValidationSerializer,
)

logger = logging.getLogger(__name__)


@view_auth_classes()
class PermissionValidationMeView(APIView):
    """
    API view for validating the permissions of the authenticated user.

    Permissions are granted directly, through the user's roles, or through the
    roles of the active groups the user belongs to.

    **Endpoints**

    - POST: Validate one or more permissions for the authenticated user

    **Request Format**

    Expects a list of objects, each containing:

    - permission: The permission key to validate (e.g., 'edit-post')

    **Response Format**

    Returns a list of validation results, each containing:

    - permission: The requested permission key
    - allowed: Boolean indicating if the user has the permission

    **Authentication and Permissions**

    - Requires authenticated user.

    **Example Request**

    POST /authz/v1/permissions/validate/me

    .. code-block:: json

        [
            {"permission": "edit-post"},
            {"permission": "delete-post"}
        ]

    **Example Response**

    .. code-block:: json

        [
            {"permission": "edit-post", "allowed": true},
            {"permission": "delete-post", "allowed": false}
        ]
    """

    @apidocs.schema(
        body=PermissionValidationSerializer(help_text="The permissions to validate", many=True),
        responses={
            status.HTTP_200_OK: PermissionValidationResponseSerializer,
            status.HTTP_400_BAD_REQUEST: "The request data is invalid",
            status.HTTP_401_UNAUTHORIZED: "The user is not authenticated",
        },
    )
    def post(self, request: HttpRequest) -> Response:
        """Validate one or more permissions for the authenticated user."""
        serializer = PermissionValidationSerializer(data=request.data, many=True)
        serializer.is_valid(raise_exception=True)

        response_data = []
        for item in serializer.validated_data:
            permission = item["permission"]
            try:
                allowed = api.has_permission_to(request.user, permission)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error(f"Error validating permission {permission} for user {request.user.pk}: {e}")
                return Response(
                    data={"message": "An error occurred while validating permissions"},
                    status=status.HTTP_500_INTERNAL_SERVER_ERROR,
                )
            response_data.append({"permission": permission, "allowed": allowed})

        serializer = PermissionValidationResponseSerializer(response_data, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


@view_auth_classes()
class PermissionsMeView(APIView):
    """
    API view listing the permissions granted directly to the authenticated user, grouped by guard.

    **Endpoints**

    - GET: Retrieve the user's direct permissions grouped by guard

    **Response Format**

    Returns a list of guard groups in the order their guard is first seen.
    Names are resolved in Arabic first, then English.

    **Authentication and Permissions**

    - Requires authenticated user.

    **Example Response**

    .. code-block:: json

        [
            {
                "key": "posts",
                "name": "Posts",
                "permissions": [{"key": "edit-post", "name": "Edit"}]
            }
        ]
    """

    @apidocs.schema(
        responses={
            status.HTTP_200_OK: GroupedPermissionsResponseSerializer(many=True),
            status.HTTP_401_UNAUTHORIZED: "The user is not authenticated",
        },
    )
    def get(self, request: HttpRequest) -> Response:
        """Retrieve the user's direct permissions grouped by guard."""
        permissions = api.get_subject_permissions(request.user).order_by("pk")
        grouped = api.group_permissions_by_guard(permissions)
        serializer = GroupedPermissionsResponseSerializer(grouped, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)


@view_auth_classes()
class PermissionGuardListView(APIView):
    """API view for retrieving the permission guards and their permissions.

    **Endpoints**

    - GET: Retrieve all guards with their permissions

    **Query Parameters**

    - locale (Optional): The locale used to resolve names. Defaults to the active language.

    **Authentication and Permissions**

    - Requires authenticated user.
    - Requires the ``view-permission-guards`` permission.

    **Example Request**

    GET /authz/v1/guards/?locale=ar

    **Example Response**

    .. code-block:: json

        [
            {
                "key": "posts",
                "name": "المنشورات",
                "permissions": [{"key": "edit-post", "name": "تعديل"}]
            }
        ]
    """

    permission_classes = [AccessControlPermission]

    @apidocs.schema(
        parameters=[
            apidocs.query_parameter("locale", str, description="The locale used to resolve names"),
        ],
        responses={
            status.HTTP_200_OK: PermissionGuardSerializer(many=True),
            status.HTTP_401_UNAUTHORIZED: "The user is not authenticated or does not have the required permissions",
        },
    )
    @authz_permissions([ApiPermission.VIEW_GUARDS.value])
    def get(self, request: HttpRequest) -> Response:
        """Retrieve all guards with their permissions."""
        query = LocaleQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        guards = api.access_control().guards().list(relations=["permissions"])
        context = {"locale": query.validated_data["locale"] or None}
        serializer = PermissionGuardSerializer(guards, many=True, context=context)
        return Response(serializer.data, status=status.HTTP_200_OK)


@view_auth_classes()
class RoleListView(APIView):
    """API view for retrieving roles and their permissions.

    **Endpoints**

    - GET: Retrieve all roles with their permission keys

    **Query Parameters**

    - locale (Optional): The locale used to resolve names
    - page (Optional): Page number for pagination
    - page_size (Optional): Number of items per page

    **Response Format**

    Returns a paginated list of role objects, each containing:

    - role: The role key (e.g., 'editor')
    - name: The translated role name
    - permissions: List of permission keys granted by this role
    - subject_count: Number of subjects (including groups) holding this role

    **Authentication and Permissions**

    - Requires authenticated user.
    - Requires the ``view-roles`` permission.

    **Example Request**

    GET /authz/v1/roles/?page=1&page_size=10

    **Example Response**

    .. code-block:: json

        {
            "count": 1,
            "next": null,
            "previous": null,
            "results": [
                {
                    "role": "editor",
                    "name": "Editor",
                    "permissions": ["edit-post"],
                    "subject_count": 5
                }
            ]
        }
    """

    pagination_class = AccessControlPagination
    permission_classes = [AccessControlPermission]

    @apidocs.schema(
        parameters=[
            apidocs.query_parameter("locale", str, description="The locale used to resolve names"),
            apidocs.query_parameter("page", int, description="Page number for pagination"),
            apidocs.query_parameter("page_size", int, description="Number of items per page"),
        ],
        responses={
            status.HTTP_200_OK: ListRolesResponseSerializer(many=True),
            status.HTTP_401_UNAUTHORIZED: "The user is not authenticated or does not have the required permissions",
        },
    )
    @authz_permissions([ApiPermission.VIEW_ROLES.value])
    def get(self, request: HttpRequest) -> Response:
        """Retrieve all roles with their permission keys."""
        query = LocaleQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        roles = (
            api.access_control()
            .roles()
            .list(relations=["permissions"], materialize=False)
            .annotate(subject_count=Count("assignments", distinct=True))
        )

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(roles, request)
        context = {"locale": query.validated_data["locale"] or None}
        serializer = ListRolesResponseSerializer(page, many=True, context=context)
        return paginator.get_paginated_response(serializer.data)
