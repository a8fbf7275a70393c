"""Core models for the access-control data model.

Guards bucket permissions by feature, roles bundle permissions, and groups
bundle roles for their members. Every record carries a unique ``key`` and a
translatable ``name`` stored as a locale mapping.

Role and group links reuse the polymorphic assignment tables: a role's
permissions are permission assignments whose subject is the role, and a
group's roles are role assignments whose subject is the group.
"""

from django.contrib.contenttypes.fields import GenericRelation
from django.contrib.contenttypes.models import ContentType
from django.db import models

from permission_plus.conf import get_table_name
from permission_plus.models.fields import TranslationsField
from permission_plus.translation import TranslatableMixin

__all__ = [
    "AccessControlModel",
    "PermissionGuard",
    "Permission",
    "Role",
    "Group",
]


class AccessControlModel(TranslatableMixin, models.Model):
    """Base model for the keyed, translatable access-control records."""

    key = models.CharField(max_length=255, unique=True)
    name = TranslationsField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    translatable = ("name",)

    class Meta:
        abstract = True

    def __str__(self):
        return self.key


class PermissionGuard(AccessControlModel):
    """A named bucket of permissions (e.g., 'posts', 'billing').

    .. no_pii:
    """

    class Meta:
        db_table = get_table_name("permission_guards")
        verbose_name = "Permission Guard"
        verbose_name_plural = "Permission Guards"


class Permission(AccessControlModel):
    """A single grantable ability, owned by exactly one guard.

    .. no_pii:
    """

    permission_guard = models.ForeignKey(
        PermissionGuard,
        on_delete=models.CASCADE,
        related_name="permissions",
    )

    class Meta:
        db_table = get_table_name("permissions")


class Role(AccessControlModel):
    """A named set of permissions that can be assigned to subjects and groups.

    .. no_pii:
    """

    # The role is the subject of these rows: they hold the role's permissions.
    permission_assignments = GenericRelation(
        "permission_plus.PermissionAssignment",
        content_type_field="subject_type",
        object_id_field="subject_id",
    )

    class Meta:
        db_table = get_table_name("roles")

    @property
    def permissions(self) -> list["Permission"]:
        """The role's permissions.

        Prefetch ``permission_assignments__permission`` to avoid one query per
        permission.
        """
        return [assignment.permission for assignment in self.permission_assignments.all()]

    @property
    def groups(self) -> models.QuerySet:
        """Groups holding this role."""
        group_type = ContentType.objects.get_for_model(Group)
        return Group.objects.filter(
            pk__in=self.assignments.filter(subject_type=group_type).values("subject_id"),
        )


class Group(AccessControlModel):
    """A set of member subjects sharing the roles held by the group.

    .. no_pii:
    """

    description = TranslationsField(blank=True, null=True)
    is_active = models.BooleanField(default=True)

    # The group is the subject of these rows: they hold the group's roles.
    role_assignments = GenericRelation(
        "permission_plus.RoleAssignment",
        content_type_field="subject_type",
        object_id_field="subject_id",
    )

    translatable = ("name", "description")

    class Meta:
        db_table = get_table_name("groups")

    @property
    def roles(self) -> list["Role"]:
        """The group's roles.

        Prefetch ``role_assignments__role`` to avoid one query per role.
        """
        return [assignment.role for assignment in self.role_assignments.all()]

    @property
    def members(self) -> list:
        """The subjects belonging to this group.

        Prefetch ``memberships__groupable`` to load them in one query per subject type.
        """
        return [membership.groupable for membership in self.memberships.all()]
