"""Repositories for guards, permissions, roles and groups.

Each repository offers the same operations over one record kind:

- ``list(filters, relations, materialize)``
- ``show(id_or_key, relations)``
- ``create(data)``, ``update(pk, data)``, ``delete(pk)``

Missing records are reported with ``None`` (show/update) or ``False``
(delete) instead of raising. Writes that touch more than one table run in a
single transaction.
"""

import logging
from typing import ClassVar

from django.db import models, transaction
from django.db.models.fields.json import KeyTextTransform

from permission_plus.api import assignments
from permission_plus.api.assignments import is_numeric_reference
from permission_plus.conf import get_model

logger = logging.getLogger(__name__)

__all__ = [
    "BaseRepository",
    "PermissionGuardRepository",
    "PermissionRepository",
    "RoleRepository",
    "GroupRepository",
]


class BaseRepository:
    """CRUD operations shared by every record kind.

    Attributes:
        kind: The entity kind, resolved through ``PERMISSION_PLUS_MODELS``.
        fields: Attributes accepted from ``create``/``update`` payloads.
        relations: Public relation names mapped to prefetch lookups.
    """

    kind: ClassVar[str] = ""
    fields: ClassVar[tuple[str, ...]] = ("key", "name")
    relations: ClassVar[dict[str, str]] = {}
    children_relations: ClassVar[tuple[str, ...]] = ()

    @property
    def model(self) -> type[models.Model]:
        return get_model(self.kind)

    def get_queryset(self, relations=None) -> models.QuerySet:
        """Return the base queryset with the requested relations prefetched.

        Raises:
            ValueError: If a relation name is unknown for this kind.
        """
        queryset = self.model.objects.all()
        lookups = []
        for relation in relations or ():
            if relation not in self.relations:
                raise ValueError(
                    f"Unknown relation '{relation}' for {self.model.__name__}. "
                    f"Expected one of: {', '.join(sorted(self.relations))}."
                )
            lookups.append(self.relations[relation])
        return queryset.prefetch_related(*lookups) if lookups else queryset

    def list(self, filters: dict | None = None, relations=None, materialize: bool = True):
        """List records.

        Args:
            filters: Optional ``key`` (exact) and ``name`` (a ``{locale: text}``
                mapping; every pair must match).
            relations: Relation names to prefetch.
            materialize: Return a list when True, the unevaluated queryset otherwise.

        Returns:
            list | QuerySet: The matching records ordered by id.

        Examples:
            >>> RoleRepository().list({"name": {"en": "Editor"}}, relations=["permissions"])
            [<Role: editor>]
        """
        filters = filters or {}
        queryset = self.get_queryset(relations)

        if filters.get("key") is not None:
            queryset = queryset.filter(key=filters["key"])

        for index, (locale, text) in enumerate((filters.get("name") or {}).items()):
            alias = f"name_{index}"
            queryset = queryset.alias(**{alias: KeyTextTransform(locale, "name")}).filter(**{alias: text})

        queryset = queryset.order_by("pk")
        return list(queryset) if materialize else queryset

    def show(self, id_or_key, relations=None):
        """Return a record by id (numeric) or key, or None if absent."""
        lookup = {"pk": int(id_or_key)} if is_numeric_reference(id_or_key) else {"key": id_or_key}
        return self.get_queryset(relations).filter(**lookup).first()

    def get_attributes(self, data: dict) -> dict:
        return {field: data[field] for field in self.fields if field in data}

    def create(self, data: dict):
        """Create a record from ``data`` and return it."""
        with transaction.atomic():
            instance = self.model.objects.create(**self.get_attributes(data))
            self.save_children(instance, data, created=True)
        logger.info("Created %s %s", self.model.__name__, instance.key)
        return instance

    def update(self, pk, data: dict):
        """Update a record, returning it reloaded, or None if absent."""
        instance = self.model.objects.filter(pk=pk).first()
        if instance is None:
            return None

        with transaction.atomic():
            for field, value in self.get_attributes(data).items():
                setattr(instance, field, value)
            instance.save()
            self.save_children(instance, data, created=False)

        logger.info("Updated %s %s", self.model.__name__, instance.key)
        return self.show(instance.pk, self.children_relations)

    def delete(self, pk) -> bool:
        """Delete a record and its dependent rows. Returns False if absent."""
        instance = self.model.objects.filter(pk=pk).first()
        if instance is None:
            return False

        with transaction.atomic():
            self.delete_children(instance)
            instance.delete()

        logger.info("Deleted %s %s", self.model.__name__, instance.key)
        return True

    def save_children(self, instance, data: dict, created: bool):
        """Write nested records found in ``data``. Nothing by default."""

    def delete_children(self, instance):
        """Remove rows depending on ``instance`` before it is deleted."""


class PermissionGuardRepository(BaseRepository):
    """Guards, optionally written together with their permissions.

    ``create`` adds every entry of ``data["permissions"]``; ``update`` upserts
    each entry by ``id`` when given, otherwise by ``key``, among the guard's
    own permissions. Existing permissions missing from the payload are kept.

    A permission is never moved between guards: an entry whose id or key
    belongs to another guard raises ``ValueError`` and the write is rolled back.
    """

    kind = "permission_guard"
    relations = {"permissions": "permissions"}
    children_relations = ("permissions",)

    def save_children(self, instance, data, created):
        permission_model = get_model("permission")
        for payload in data.get("permissions") or ():
            attributes = {field: payload[field] for field in ("key", "name") if field in payload}
            lookup = {"pk": payload["id"]} if payload.get("id") is not None else {"key": payload["key"]}

            owner = permission_model.objects.filter(**lookup).exclude(permission_guard=instance).first()
            if owner is not None:
                raise ValueError(
                    f"Permission {owner.key!r} belongs to guard {owner.permission_guard.key!r}, not {instance.key!r}."
                )

            if created:
                instance.permissions.create(**attributes)
            else:
                instance.permissions.update_or_create(**lookup, defaults=attributes)

    def delete_children(self, instance):
        instance.permissions.all().delete()


class PermissionRepository(BaseRepository):
    """Single permissions. ``permission_guard`` accepts a guard, its id or its key."""

    kind = "permission"
    fields = ("key", "name", "permission_guard", "permission_guard_id")
    relations = {"permission_guard": "permission_guard", "assignments": "assignments"}

    def get_attributes(self, data):
        attributes = super().get_attributes(data)
        guard = attributes.get("permission_guard")
        if guard is not None and not isinstance(guard, models.Model):
            attributes.pop("permission_guard")
            guard_ids = assignments.resolve_ids([guard], get_model("permission_guard"))
            if not guard_ids:
                raise ValueError(f"Unknown permission guard: {guard!r}")
            attributes["permission_guard_id"] = guard_ids[0]
        return attributes

    def get_queryset(self, relations=None):
        return super().get_queryset(relations).select_related("permission_guard")


class RoleRepository(BaseRepository):
    """Roles. ``data["permissions"]`` (ids or keys) replaces the role's permission set.

    An empty list clears the set. Omitting the key leaves it untouched.
    """

    kind = "role"
    relations = {
        "permissions": "permission_assignments__permission",
        "assignments": "assignments",
    }
    children_relations = ("permissions",)

    def save_children(self, instance, data, created):
        if "permissions" in data:
            assignments.sync_role_permissions(instance, data["permissions"] or [])

    def delete_children(self, instance):
        instance.permission_assignments.all().delete()


class GroupRepository(BaseRepository):
    """Groups. ``data["roles"]`` (ids or keys) replaces the group's role set.

    An empty list clears the set. Omitting the key leaves it untouched.
    """

    kind = "group"
    fields = ("key", "name", "description", "is_active")
    relations = {
        "roles": "role_assignments__role",
        "memberships": "memberships",
        "members": "memberships__groupable",
    }
    children_relations = ("roles",)

    def save_children(self, instance, data, created):
        if "roles" in data:
            assignments.sync_group_roles(instance, data["roles"] or [])

    def delete_children(self, instance):
        instance.role_assignments.all().delete()
        instance.memberships.all().delete()
