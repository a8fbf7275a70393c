"""
Django authentication backend answering ``user.has_perm()`` through gates.
"""

from django.contrib.auth.backends import BaseBackend

from permission_plus.gates import gate_registry


class PermissionPlusBackend(BaseBackend):
    """Authorize ``user.has_perm(key)`` with the gate registered under ``key``.

    Add it to ``AUTHENTICATION_BACKENDS`` after the backends that authenticate
    users. It never authenticates anyone itself. Object-level checks, inactive
    and anonymous users are denied.
    """

    def has_perm(self, user_obj, perm, obj=None):
        if obj is not None:
            return False
        if not user_obj.is_active or user_obj.is_anonymous:
            return False
        return gate_registry.allows(user_obj, perm)
