"""Data classes and enums for the permission_plus REST API."""

from enum import Enum


class BaseEnum(str, Enum):
    """Base enum class."""

    @classmethod
    def values(cls):
        """List the values of the enum."""
        return [e.value for e in cls]


class ApiPermission(BaseEnum):
    """Permission keys guarding the REST API endpoints."""

    VIEW_GUARDS = "view-permission-guards"
    VIEW_ROLES = "view-roles"
