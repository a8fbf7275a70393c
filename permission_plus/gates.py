"""Named access gates backed by permissions.

A gate is a boolean check registered under a key. Registering the permission
gates defines one gate per permission row, so callers can ask
``gate_registry.allows(user, "edit-post")`` (or ``user.has_perm("edit-post")``
through ``PermissionPlusBackend``) without knowing how permissions are stored.

Gates are not registered automatically at startup. Call
``register_permission_gates()`` once the database is ready; after that the
signal handlers in ``permission_plus.handlers`` keep the gates in sync with
permission rows.
"""

import logging
from collections.abc import Callable
from functools import partial

from django.db import DatabaseError

from permission_plus.api.subjects import has_permission_to
from permission_plus.conf import get_model

logger = logging.getLogger(__name__)

__all__ = [
    "GateRegistry",
    "gate_registry",
    "define_permission_gate",
    "register_permission_gates",
]


class GateRegistry:
    """Registry of gate checks keyed by name.

    Attributes:
        loaded (bool): Whether the permission gates have been registered.
    """

    def __init__(self):
        self._gates: dict[str, Callable] = {}
        self.loaded = False

    def define(self, key: str, check: Callable) -> None:
        """Register ``check(user)`` under ``key``, replacing any previous gate."""
        self._gates[key] = check

    def forget(self, key: str) -> None:
        """Remove a gate. Unknown keys are ignored."""
        self._gates.pop(key, None)

    def has(self, key: str) -> bool:
        return key in self._gates

    def keys(self) -> list[str]:
        return list(self._gates)

    def allows(self, user, key: str) -> bool:
        """Run the gate registered under ``key``. Unknown gates deny."""
        check = self._gates.get(key)
        if check is None:
            return False
        return bool(check(user))

    def clear(self) -> None:
        self._gates.clear()
        self.loaded = False


gate_registry = GateRegistry()


def define_permission_gate(permission_key: str, registry: GateRegistry | None = None) -> None:
    """Define the gate checking ``has_permission_to`` for one permission key."""
    registry = registry or gate_registry
    registry.define(permission_key, partial(_check_permission, permission_key=permission_key))


def _check_permission(user, permission_key: str) -> bool:
    return has_permission_to(user, permission_key)


def register_permission_gates(registry: GateRegistry | None = None, fail_silently: bool = False) -> int:
    """Define one gate per permission row.

    Args:
        registry: The registry to fill. Defaults to ``gate_registry``.
        fail_silently: Log database errors (e.g., the permissions table does
            not exist yet) and return 0 instead of raising.

    Returns:
        int: The number of gates defined.

    Raises:
        DatabaseError: If the permissions cannot be read and ``fail_silently`` is False.
    """
    registry = registry or gate_registry
    try:
        keys = list(get_model("permission").objects.values_list("key", flat=True))
    except DatabaseError:
        if not fail_silently:
            raise
        logger.exception("Could not register permission gates")
        return 0

    for key in keys:
        define_permission_gate(key, registry)
    registry.loaded = True
    logger.info("Registered %d permission gates", len(keys))
    return len(keys)
