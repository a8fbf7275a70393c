"""Assignment engine: links roles, permissions and groups to subjects.

A subject is any saved model instance (or a ``SubjectData``). References to
the linked records are given uniformly as numeric ids, objects exposing an
``id``, or ``key`` strings; see ``resolve_ids``.

- Assigning is idempotent: only missing rows are added.
- Removing a link that does not exist is a no-op.
- Set-sync replaces a link set with exactly the given references.
"""

import logging
from collections.abc import Iterable

from attrs import define
from django.db import models, transaction

from permission_plus.api.data import MixedReferenceError, SubjectData
from permission_plus.conf import get_model
from permission_plus.models import GroupMembership, PermissionAssignment, RoleAssignment

logger = logging.getLogger(__name__)

__all__ = [
    "is_numeric_reference",
    "resolve_ids",
    "assign_roles",
    "remove_roles",
    "give_permissions",
    "revoke_permissions",
    "assign_to_groups",
    "remove_from_groups",
    "unassign_subject_from_all",
    "sync_role_permissions",
    "sync_group_roles",
    "get_subject_roles",
    "get_subject_permissions",
    "get_subject_groups",
    "get_subjects_for_role",
    "get_group_members",
]


@define(frozen=True)
class AssignmentRelation:
    """Describes one polymorphic assignment table.

    Attributes:
        model: The assignment model.
        target_field: Name of the foreign key to the linked record.
        type_field: Name of the subject content type field.
        id_field: Name of the subject id field.
        binding: Entity kind whose bound model resolves keys.
    """

    model: type[models.Model]
    target_field: str
    type_field: str
    id_field: str
    binding: str

    @property
    def target_id_field(self) -> str:
        return f"{self.target_field}_id"

    @property
    def target_model(self) -> type[models.Model]:
        return self.model._meta.get_field(self.target_field).related_model

    def subject_lookup(self, subject) -> dict:
        """Return the filter selecting the rows of ``subject``."""
        subject = SubjectData.from_subject(subject)
        return {self.type_field: subject.content_type, self.id_field: subject.subject_id}


ROLE_ASSIGNMENTS = AssignmentRelation(
    model=RoleAssignment,
    target_field="role",
    type_field="subject_type",
    id_field="subject_id",
    binding="role",
)
PERMISSION_ASSIGNMENTS = AssignmentRelation(
    model=PermissionAssignment,
    target_field="permission",
    type_field="subject_type",
    id_field="subject_id",
    binding="permission",
)
GROUP_MEMBERSHIPS = AssignmentRelation(
    model=GroupMembership,
    target_field="group",
    type_field="groupable_type",
    id_field="groupable_id",
    binding="group",
)


def _flatten(references) -> list:
    """Flatten nested lists, tuples, sets and querysets of references."""
    flat = []
    for reference in references:
        if isinstance(reference, (list, tuple, set, frozenset, models.QuerySet)):
            flat.extend(_flatten(reference))
        else:
            flat.append(reference)
    return flat


def is_numeric_reference(reference) -> bool:
    """Whether ``reference`` is an id (an int or a string of decimal digits)."""
    if isinstance(reference, bool):
        return False
    if isinstance(reference, int):
        return True
    return isinstance(reference, str) and reference.isdecimal()


def _reference_form(reference) -> str | None:
    """Classify a reference as ``"id"``, ``"object"`` or ``"key"``, or None if invalid."""
    if is_numeric_reference(reference):
        return "id"
    if isinstance(reference, str):
        return "key"
    if not isinstance(reference, (bool, int)) and getattr(reference, "id", None) is not None:
        return "object"
    return None


def resolve_ids(references: Iterable, model: type[models.Model]) -> list[int]:
    """Resolve a uniform list of references to primary keys.

    - All numeric (ints or digit strings): used as ids directly.
    - All objects exposing an ``id``: their ids.
    - All other strings: looked up by ``key`` on ``model``. Unknown keys are dropped.

    Nested iterables are flattened first.

    Args:
        references: The references to resolve.
        model: The model used for key lookups.

    Returns:
        list[int]: The resolved ids, without duplicates.

    Raises:
        MixedReferenceError: If the references mix these forms, or one of
            them is none of them.

    Examples:
        >>> resolve_ids([1, "2"], Role)
        [1, 2]
        >>> resolve_ids(["editor", "viewer"], Role)
        [3, 4]
    """
    items = _flatten(references)
    if not items:
        return []

    forms = {_reference_form(item) for item in items}
    if len(forms) > 1 or None in forms:
        raise MixedReferenceError(
            f"References to {model.__name__} must all be ids, objects with an id, or keys; got {items!r}."
        )

    form = forms.pop()
    if form == "id":
        return list(dict.fromkeys(int(item) for item in items))

    if form == "object":
        return list(dict.fromkeys(item.id for item in items))

    keys = list(dict.fromkeys(items))
    ids_by_key = dict(model.objects.filter(key__in=keys).values_list("key", "id"))
    unknown = [key for key in keys if key not in ids_by_key]
    if unknown:
        logger.warning("Ignoring unknown %s keys: %s", model.__name__, ", ".join(unknown))
    return [ids_by_key[key] for key in keys if key in ids_by_key]


def _resolve(relation: AssignmentRelation, references) -> list[int]:
    return resolve_ids(references, get_model(relation.binding))


def _existing_target_ids(relation: AssignmentRelation, target_ids: list[int]) -> list[int]:
    """Keep only the ids of records that exist, preserving order."""
    existing = set(relation.target_model.objects.filter(pk__in=target_ids).values_list("pk", flat=True))
    missing = [pk for pk in target_ids if pk not in existing]
    if missing:
        logger.warning("Ignoring unknown %s ids: %s", relation.target_model.__name__, missing)
    return [pk for pk in target_ids if pk in existing]


def attach(relation: AssignmentRelation, subject, target_ids: list[int]) -> list[int]:
    """Add the links to ``target_ids`` that ``subject`` does not have yet.

    Returns:
        list[int]: The ids that were attached.
    """
    lookup = relation.subject_lookup(subject)
    target_ids = _existing_target_ids(relation, list(dict.fromkeys(target_ids)))
    if not target_ids:
        return []

    with transaction.atomic():
        current = set(
            relation.model.objects.filter(**lookup, **{f"{relation.target_id_field}__in": target_ids}).values_list(
                relation.target_id_field, flat=True
            )
        )
        missing = [pk for pk in target_ids if pk not in current]
        # Conflicts come from concurrent inserts of the same link and are benign.
        relation.model.objects.bulk_create(
            [relation.model(**lookup, **{relation.target_id_field: pk}) for pk in missing],
            ignore_conflicts=True,
        )

    return missing


def detach(relation: AssignmentRelation, subject, target_ids: list[int] | None = None) -> int:
    """Remove links from ``subject``; all of them when ``target_ids`` is None.

    Returns:
        int: The number of rows deleted.
    """
    queryset = relation.model.objects.filter(**relation.subject_lookup(subject))
    if target_ids is not None:
        queryset = queryset.filter(**{f"{relation.target_id_field}__in": target_ids})
    deleted, _ = queryset.delete()
    return deleted


def sync(relation: AssignmentRelation, subject, target_ids: list[int]) -> dict[str, list[int]]:
    """Replace the links of ``subject`` with exactly ``target_ids``.

    Rows already matching are left untouched.

    Returns:
        dict: ``{"attached": [...], "detached": [...]}``.
    """
    lookup = relation.subject_lookup(subject)
    target_ids = list(dict.fromkeys(target_ids))

    with transaction.atomic():
        current = list(relation.model.objects.filter(**lookup).values_list(relation.target_id_field, flat=True))
        detached = [pk for pk in current if pk not in target_ids]
        if detached:
            detach(relation, subject, detached)
        attached = attach(relation, subject, [pk for pk in target_ids if pk not in current])

    return {"attached": attached, "detached": detached}


def _log_change(action: str, relation: AssignmentRelation, subject, ids: list[int] | int):
    subject = SubjectData.from_subject(subject)
    logger.info("%s %s %s for subject %s", action, relation.target_model.__name__, ids, subject)


# Roles


def assign_roles(subject, *roles) -> list[int]:
    """Assign roles to a subject without removing the ones it already holds.

    Args:
        subject: A model instance or SubjectData.
        *roles: Role ids, Role instances, or role keys.

    Returns:
        list[int]: Ids of the newly assigned roles.
    """
    attached = attach(ROLE_ASSIGNMENTS, subject, _resolve(ROLE_ASSIGNMENTS, roles))
    _log_change("Assigned", ROLE_ASSIGNMENTS, subject, attached)
    return attached


def remove_roles(subject, *roles) -> int:
    """Remove roles from a subject. Roles it does not hold are ignored.

    Returns:
        int: The number of assignments removed.
    """
    removed = detach(ROLE_ASSIGNMENTS, subject, _resolve(ROLE_ASSIGNMENTS, roles))
    _log_change("Removed", ROLE_ASSIGNMENTS, subject, removed)
    return removed


# Permissions


def give_permissions(subject, *permissions) -> list[int]:
    """Grant permissions directly to a subject.

    Returns:
        list[int]: Ids of the newly granted permissions.
    """
    attached = attach(PERMISSION_ASSIGNMENTS, subject, _resolve(PERMISSION_ASSIGNMENTS, permissions))
    _log_change("Granted", PERMISSION_ASSIGNMENTS, subject, attached)
    return attached


def revoke_permissions(subject, *permissions) -> int:
    """Revoke directly granted permissions. Missing grants are ignored.

    Returns:
        int: The number of grants removed.
    """
    removed = detach(PERMISSION_ASSIGNMENTS, subject, _resolve(PERMISSION_ASSIGNMENTS, permissions))
    _log_change("Revoked", PERMISSION_ASSIGNMENTS, subject, removed)
    return removed


# Groups


def assign_to_groups(subject, *groups) -> list[int]:
    """Add a subject to groups, keeping its current memberships.

    Returns:
        list[int]: Ids of the newly joined groups.
    """
    attached = attach(GROUP_MEMBERSHIPS, subject, _resolve(GROUP_MEMBERSHIPS, groups))
    _log_change("Joined", GROUP_MEMBERSHIPS, subject, attached)
    return attached


def remove_from_groups(subject, *groups) -> int:
    """Remove a subject from groups. Groups it is not in are ignored.

    Returns:
        int: The number of memberships removed.
    """
    removed = detach(GROUP_MEMBERSHIPS, subject, _resolve(GROUP_MEMBERSHIPS, groups))
    _log_change("Left", GROUP_MEMBERSHIPS, subject, removed)
    return removed


def unassign_subject_from_all(subject) -> int:
    """Remove every role, permission and group link of a subject.

    Useful for subjects that do not use the ``HasAccessControl`` mixin, whose
    rows are not cascaded when the subject is deleted.

    Returns:
        int: The number of rows deleted.
    """
    with transaction.atomic():
        deleted = sum(
            detach(relation, subject) for relation in (ROLE_ASSIGNMENTS, PERMISSION_ASSIGNMENTS, GROUP_MEMBERSHIPS)
        )
    logger.info("Removed %d assignments from subject %s", deleted, SubjectData.from_subject(subject))
    return deleted


# Set-sync of the links held by roles and groups


def sync_role_permissions(role, permissions: Iterable) -> dict[str, list[int]]:
    """Make ``permissions`` exactly the role's permission set."""
    return sync(PERMISSION_ASSIGNMENTS, role, _resolve(PERMISSION_ASSIGNMENTS, permissions))


def sync_group_roles(group, roles: Iterable) -> dict[str, list[int]]:
    """Make ``roles`` exactly the group's role set."""
    return sync(ROLE_ASSIGNMENTS, group, _resolve(ROLE_ASSIGNMENTS, roles))


# Listings


def _targets_of(relation: AssignmentRelation, subject) -> models.QuerySet:
    linked = relation.model.objects.filter(**relation.subject_lookup(subject)).values(relation.target_id_field)
    return relation.target_model.objects.filter(pk__in=linked)


def get_subject_roles(subject) -> models.QuerySet:
    """Return the roles assigned directly to a subject."""
    return _targets_of(ROLE_ASSIGNMENTS, subject)


def get_subject_permissions(subject) -> models.QuerySet:
    """Return the permissions granted directly to a subject."""
    return _targets_of(PERMISSION_ASSIGNMENTS, subject).select_related("permission_guard")


def get_subject_groups(subject) -> models.QuerySet:
    """Return the groups a subject belongs to."""
    return _targets_of(GROUP_MEMBERSHIPS, subject)


def get_subjects_for_role(role) -> list:
    """Return every subject holding a role, groups included.

    Args:
        role: A Role instance, id, or key.
    """
    role_ids = resolve_ids([role], get_model("role"))
    assignments = RoleAssignment.objects.filter(role_id__in=role_ids).prefetch_related("subject")
    return [assignment.subject for assignment in assignments if assignment.subject is not None]


def get_group_members(group) -> list:
    """Return every member of a group.

    Args:
        group: A Group instance, id, or key.
    """
    group_ids = resolve_ids([group], get_model("group"))
    memberships = GroupMembership.objects.filter(group_id__in=group_ids).prefetch_related("groupable")
    return [membership.groupable for membership in memberships if membership.groupable is not None]
