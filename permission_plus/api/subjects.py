"""Authorization queries for subjects.

These functions answer the questions callers ask at request time: does the
subject hold a role, belong to a group, or have a permission. They accept any
saved model instance (or a ``SubjectData``) as the subject.
"""

import logging
from collections.abc import Iterable

from django.contrib.contenttypes.models import ContentType
from django.db.models import Q

from permission_plus.api.data import GROUPED_PERMISSIONS_LOCALES, SubjectData
from permission_plus.models import Group, GroupMembership, PermissionAssignment, Role, RoleAssignment
from permission_plus.translation import get_translations

logger = logging.getLogger(__name__)

__all__ = [
    "has_role",
    "in_group",
    "has_permission_to",
    "get_subject_permission_keys",
    "group_permissions_by_guard",
]


def has_role(subject, role_key: str) -> bool:
    """Check whether a role is assigned directly to the subject.

    Roles held through groups are not considered.
    """
    subject = SubjectData.from_subject(subject)
    return RoleAssignment.objects.filter(
        subject_type=subject.content_type,
        subject_id=subject.subject_id,
        role__key=role_key,
    ).exists()


def in_group(subject, group_key: str) -> bool:
    """Check whether the subject is a member of the group, active or not."""
    subject = SubjectData.from_subject(subject)
    return GroupMembership.objects.filter(
        groupable_type=subject.content_type,
        groupable_id=subject.subject_id,
        group__key=group_key,
    ).exists()


def _granting_assignments(subject: SubjectData) -> Q:
    """Build the filter for permission rows that grant something to ``subject``.

    A permission reaches the subject when it is assigned to the subject itself,
    to one of its roles, or to a role of an active group it belongs to.
    """
    role_type = ContentType.objects.get_for_model(Role)
    group_type = ContentType.objects.get_for_model(Group)
    subject_type = subject.content_type

    own_roles = RoleAssignment.objects.filter(
        subject_type=subject_type,
        subject_id=subject.subject_id,
    ).values("role_id")
    active_groups = GroupMembership.objects.filter(
        groupable_type=subject_type,
        groupable_id=subject.subject_id,
        group__is_active=True,
    ).values("group_id")
    group_roles = RoleAssignment.objects.filter(
        subject_type=group_type,
        subject_id__in=active_groups,
    ).values("role_id")

    return (
        Q(subject_type=subject_type, subject_id=subject.subject_id)
        | Q(subject_type=role_type, subject_id__in=own_roles)
        | Q(subject_type=role_type, subject_id__in=group_roles)
    )


def has_permission_to(subject, permission_key: str) -> bool:
    """Check whether the subject has a permission.

    Args:
        subject: A model instance or SubjectData.
        permission_key: The permission key (e.g., 'edit-post').

    Returns:
        bool: True if the permission is granted directly, through a role of the
        subject, or through a role of an active group the subject belongs to.

    Examples:
        >>> member.assign_role("editor")
        >>> has_permission_to(member, "edit-post")
        True
    """
    subject = SubjectData.from_subject(subject)
    allowed = (
        PermissionAssignment.objects.filter(permission__key=permission_key)
        .filter(_granting_assignments(subject))
        .exists()
    )
    logger.debug("Permission %s for subject %s: %s", permission_key, subject, allowed)
    return allowed


def get_subject_permission_keys(subject) -> set[str]:
    """Return the keys of every permission the subject has, however granted."""
    subject = SubjectData.from_subject(subject)
    return set(
        PermissionAssignment.objects.filter(_granting_assignments(subject))
        .values_list("permission__key", flat=True)
        .distinct()
    )


def _display_name(record) -> str | None:
    """Resolve a record's name trying the grouped-permissions locales in order."""
    translations = get_translations(record, "name") or {}
    for locale in GROUPED_PERMISSIONS_LOCALES:
        if translations.get(locale) is not None:
            return translations[locale]
    return None


def group_permissions_by_guard(permissions: Iterable) -> list[dict]:
    """Group permissions by the key of their guard.

    Groups keep the order in which their guard is first seen. Permissions
    without a guard are collected under a ``None`` key, and that group is
    only emitted when it is not empty.

    Args:
        permissions: Permission instances, ideally with ``permission_guard``
            already loaded.

    Returns:
        list[dict]: One entry per guard::

            {
                "key": "posts",
                "name": "Posts",
                "permissions": [{"key": "edit-post", "name": "Edit"}],
            }
    """
    groups = {}
    for permission in permissions:
        guard = permission.permission_guard if permission.permission_guard_id else None
        guard_key = guard.key if guard else None
        if guard_key not in groups:
            groups[guard_key] = {
                "key": guard_key,
                "name": _display_name(guard) if guard else None,
                "permissions": [],
            }
        groups[guard_key]["permissions"].append(
            {
                "key": permission.key,
                "name": _display_name(permission),
            }
        )
    return [group for group in groups.values() if group["permissions"]]
