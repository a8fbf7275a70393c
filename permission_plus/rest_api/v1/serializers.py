"""Serializers for the permission_plus REST API."""

from rest_framework import serializers

from permission_plus.rest_api.v1.fields import TranslatedField


class PermissionKeyMixin(serializers.Serializer):  # pylint: disable=abstract-method
    """Mixin providing permission key field functionality."""

    permission = serializers.CharField(max_length=255)


class PermissionValidationSerializer(PermissionKeyMixin):  # pylint: disable=abstract-method
    """Serializer for permission validation request."""


class PermissionValidationResponseSerializer(PermissionValidationSerializer):  # pylint: disable=abstract-method
    """Serializer for permission validation response."""

    allowed = serializers.BooleanField()


class LocaleQuerySerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """Serializer for the optional ``locale`` query parameter."""

    locale = serializers.CharField(max_length=16, required=False, allow_blank=True, default="")


class PermissionSerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """Serializer for a permission with its translated name."""

    key = serializers.CharField()
    name = TranslatedField()


class PermissionGuardSerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """Serializer for a guard with its permissions."""

    key = serializers.CharField()
    name = TranslatedField()
    permissions = PermissionSerializer(many=True, source="permissions.all")


class ListRolesResponseSerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """Serializer for the roles list response."""

    role = serializers.CharField(source="key")
    name = TranslatedField()
    permissions = serializers.SerializerMethodField()
    subject_count = serializers.IntegerField()

    def get_permissions(self, obj) -> list[str]:
        """Return the keys of the role's permissions."""
        return [permission.key for permission in obj.permissions]


class GroupedPermissionSerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """Serializer for one permission inside a guard group."""

    key = serializers.CharField()
    name = serializers.CharField(allow_null=True)


class GroupedPermissionsResponseSerializer(serializers.Serializer):  # pylint: disable=abstract-method
    """Serializer for the permissions of a subject grouped by guard."""

    key = serializers.CharField(allow_null=True)
    name = serializers.CharField(allow_null=True)
    permissions = GroupedPermissionSerializer(many=True)
