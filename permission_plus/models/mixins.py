"""Model mixin granting roles, permissions and groups to any model.

Usage::

    from permission_plus.models import HasAccessControl

    class Member(HasAccessControl, models.Model):
        username = models.CharField(max_length=150)

    member.assign_role("editor").assign_to_groups("team")
    member.has_permission_to("edit-post")

The mixin only adds generic relations (no columns) and delegates to the
functions in ``permission_plus.api``, which accept any model instance as a
subject. Deleting a subject that uses the mixin also deletes its assignment rows.
"""

from django.contrib.contenttypes.fields import GenericRelation
from django.db import models

__all__ = [
    "PERMISSIONS_PREFETCH",
    "HasAccessControl",
]

# Prefetch lookup that makes get_grouped_permissions_by_guard() available.
PERMISSIONS_PREFETCH = "permission_assignments__permission__permission_guard"


class HasAccessControl(models.Model):
    """Abstract mixin adding group, role and permission management to a model."""

    role_assignments = GenericRelation(
        "permission_plus.RoleAssignment",
        content_type_field="subject_type",
        object_id_field="subject_id",
    )
    permission_assignments = GenericRelation(
        "permission_plus.PermissionAssignment",
        content_type_field="subject_type",
        object_id_field="subject_id",
    )
    group_memberships = GenericRelation(
        "permission_plus.GroupMembership",
        content_type_field="groupable_type",
        object_id_field="groupable_id",
    )

    class Meta:
        abstract = True

    # Groups

    def assigned_groups(self) -> models.QuerySet:
        """Return the groups this instance belongs to."""
        from permission_plus.api import assignments  # pylint: disable=import-outside-toplevel

        return assignments.get_subject_groups(self)

    def assign_to_groups(self, *groups):
        """Join the given groups (ids, instances or keys). Existing memberships are kept."""
        from permission_plus.api import assignments  # pylint: disable=import-outside-toplevel

        assignments.assign_to_groups(self, *groups)
        return self

    def remove_from_groups(self, *groups):
        """Leave the given groups. Groups the instance is not in are ignored."""
        from permission_plus.api import assignments  # pylint: disable=import-outside-toplevel

        assignments.remove_from_groups(self, *groups)
        return self

    # Roles

    def assigned_roles(self) -> models.QuerySet:
        """Return the roles assigned directly to this instance."""
        from permission_plus.api import assignments  # pylint: disable=import-outside-toplevel

        return assignments.get_subject_roles(self)

    def assign_role(self, *roles):
        from permission_plus.api import assignments  # pylint: disable=import-outside-toplevel

        assignments.assign_roles(self, *roles)
        return self

    def remove_role(self, *roles):
        from permission_plus.api import assignments  # pylint: disable=import-outside-toplevel

        assignments.remove_roles(self, *roles)
        return self

    # Permissions

    def assigned_permissions(self) -> models.QuerySet:
        """Return the permissions granted directly to this instance."""
        from permission_plus.api import assignments  # pylint: disable=import-outside-toplevel

        return assignments.get_subject_permissions(self)

    def give_permission_to(self, *permissions):
        from permission_plus.api import assignments  # pylint: disable=import-outside-toplevel

        assignments.give_permissions(self, *permissions)
        return self

    def revoke_permission_to(self, *permissions):
        from permission_plus.api import assignments  # pylint: disable=import-outside-toplevel

        assignments.revoke_permissions(self, *permissions)
        return self

    # Checks

    def has_role(self, role_key: str) -> bool:
        from permission_plus.api import subjects  # pylint: disable=import-outside-toplevel

        return subjects.has_role(self, role_key)

    def has_permission_to(self, permission_key: str) -> bool:
        """Check the permission directly, through roles, and through active groups' roles."""
        from permission_plus.api import subjects  # pylint: disable=import-outside-toplevel

        return subjects.has_permission_to(self, permission_key)

    def in_group(self, group_key: str) -> bool:
        from permission_plus.api import subjects  # pylint: disable=import-outside-toplevel

        return subjects.in_group(self, group_key)

    def get_grouped_permissions_by_guard(self) -> list[dict]:
        """Group the prefetched direct permissions by their guard.

        Nothing is fetched here: unless ``permission_assignments`` was
        prefetched (see ``PERMISSIONS_PREFETCH``), the result is empty.

        Returns:
            list[dict]: See ``permission_plus.api.subjects.group_permissions_by_guard``.
        """
        from permission_plus.api import subjects  # pylint: disable=import-outside-toplevel

        if "permission_assignments" not in getattr(self, "_prefetched_objects_cache", {}):
            return []
        return subjects.group_permissions_by_guard(
            assignment.permission for assignment in self.permission_assignments.all()
        )
