"""Entry point bundling the repositories.

Usage::

    from permission_plus.api import access_control

    access_control().roles().create({"key": "editor", "name": {"en": "Editor"}})
"""

from permission_plus.api.repositories import (
    GroupRepository,
    PermissionGuardRepository,
    PermissionRepository,
    RoleRepository,
)

__all__ = [
    "AccessControlManager",
    "access_control",
]


class AccessControlManager:
    """Singleton holding one repository per record kind.

    ``AccessControlManager()`` and ``access_control()`` return the same
    instance.

    Attributes:
        _instance (AccessControlManager): The shared instance.
    """

    _instance = None

    def __new__(cls):
        """Create the shared instance on first use."""
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._guards = PermissionGuardRepository()
            instance._permissions = PermissionRepository()
            instance._roles = RoleRepository()
            instance._groups = GroupRepository()
            cls._instance = instance
        return cls._instance

    def guards(self) -> PermissionGuardRepository:
        return self._guards

    def permissions(self) -> PermissionRepository:
        return self._permissions

    def roles(self) -> RoleRepository:
        return self._roles

    def groups(self) -> GroupRepository:
        return self._groups


def access_control() -> AccessControlManager:
    """Return the shared AccessControlManager."""
    return AccessControlManager()
