"""Polymorphic assignment models.

Each row links a role, permission or group to a subject identified by its
content type and primary key. Subjects can be any model: users, service
accounts, or the access-control records themselves (a role holding
permissions, a group holding roles).

Rows are unique per (target, subject type, subject id), so assigning twice
never creates duplicates, even when two requests race.
"""

from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.db import models

from permission_plus.conf import get_column_name, get_table_name
from permission_plus.models.core import Group, Permission, Role

__all__ = [
    "RoleAssignment",
    "PermissionAssignment",
    "GroupMembership",
]


class SubjectAssignment(models.Model):
    """Base model for rows pointing at a polymorphic subject."""

    subject_type = models.ForeignKey(ContentType, on_delete=models.CASCADE, related_name="+")
    subject_id = models.PositiveBigIntegerField(db_column=get_column_name("model_morph_key"))
    subject = GenericForeignKey("subject_type", "subject_id")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class RoleAssignment(SubjectAssignment):
    """A role held by a subject.

    .. no_pii:
    """

    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name="assignments")

    class Meta:
        db_table = get_table_name("role_assignments")
        indexes = [
            models.Index(fields=["subject_id", "subject_type"], name="pp_role_assign_subject_idx"),
            models.Index(fields=["role", "subject_id", "subject_type"], name="pp_role_assign_lookup_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["role", "subject_type", "subject_id"],
                name="pp_unique_role_assignment",
            ),
        ]

    def __str__(self):
        return f"{self.role_id} -> {self.subject_type_id}:{self.subject_id}"


class PermissionAssignment(SubjectAssignment):
    """A permission granted to a subject (a role, or any other model).

    .. no_pii:
    """

    permission = models.ForeignKey(Permission, on_delete=models.CASCADE, related_name="assignments")

    class Meta:
        db_table = get_table_name("permission_assignments")
        indexes = [
            models.Index(fields=["subject_id", "subject_type"], name="pp_perm_assign_subject_idx"),
            models.Index(fields=["permission", "subject_id", "subject_type"], name="pp_perm_assign_lookup_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["permission", "subject_type", "subject_id"],
                name="pp_unique_perm_assignment",
            ),
        ]

    def __str__(self):
        return f"{self.permission_id} -> {self.subject_type_id}:{self.subject_id}"


class GroupMembership(models.Model):
    """A subject belonging to a group.

    .. no_pii:
    """

    group = models.ForeignKey(Group, on_delete=models.CASCADE, related_name="memberships")
    groupable_type = models.ForeignKey(ContentType, on_delete=models.CASCADE, related_name="+")
    groupable_id = models.PositiveBigIntegerField(db_column=get_column_name("group_morph_key"))
    groupable = GenericForeignKey("groupable_type", "groupable_id")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = get_table_name("groupables")
        indexes = [
            models.Index(fields=["groupable_id", "groupable_type"], name="pp_groupable_subject_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["group", "groupable_type", "groupable_id"],
                name="unique_group_assignment",
            ),
        ]

    def __str__(self):
        return f"{self.group_id} -> {self.groupable_type_id}:{self.groupable_id}"
