"""Test cases for the gate registry and the authentication backend."""

from unittest.mock import Mock, patch

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.db import DatabaseError
from django.test import SimpleTestCase

from permission_plus.api import assignments
from permission_plus.backends import PermissionPlusBackend
from permission_plus.gates import GateRegistry, gate_registry, register_permission_gates
from permission_plus.tests.api.test_assignments import BaseAccessControlTestCase

User = get_user_model()


class TestGateRegistry(SimpleTestCase):
    """Test cases for defining and running gates."""

    def setUp(self):
        super().setUp()
        self.registry = GateRegistry()

    def test_define_and_allow(self):
        """Test that a defined gate runs its check."""
        self.registry.define("publish", lambda user: user == "alice")

        self.assertTrue(self.registry.has("publish"))
        self.assertTrue(self.registry.allows("alice", "publish"))
        self.assertFalse(self.registry.allows("bob", "publish"))

    def test_unknown_gate_denies(self):
        """Test that an undefined gate denies."""
        self.assertFalse(self.registry.allows("alice", "publish"))

    def test_forget(self):
        """Test forgetting gates, known or not."""
        self.registry.define("publish", lambda user: True)

        self.registry.forget("publish")
        self.registry.forget("missing")

        self.assertFalse(self.registry.has("publish"))
        self.assertEqual(self.registry.keys(), [])


class GateTestMixin:
    """Reset the shared gate registry around each test."""

    def setUp(self):
        super().setUp()
        gate_registry.clear()
        self.addCleanup(gate_registry.clear)


class TestRegisterPermissionGates(GateTestMixin, BaseAccessControlTestCase):
    """Test cases for register_permission_gates."""

    def test_one_gate_per_permission(self):
        """Test that every permission row gets a gate.

        Expected result:
            - The gates delegate to has_permission_to.
        """
        count = register_permission_gates()

        self.assertEqual(count, 4)
        self.assertTrue(gate_registry.loaded)
        self.assertCountEqual(gate_registry.keys(), ["edit-post", "delete-post", "view-post", "view-invoice"])

        self.alice.assign_role("viewer")
        self.assertTrue(gate_registry.allows(self.alice, "view-post"))
        self.assertFalse(gate_registry.allows(self.alice, "edit-post"))

    def test_custom_registry(self):
        """Test filling a registry other than the shared one."""
        registry = GateRegistry()

        register_permission_gates(registry)

        self.assertTrue(registry.has("view-invoice"))
        self.assertFalse(gate_registry.has("view-invoice"))

    @patch("permission_plus.gates.get_model")
    def test_database_errors_propagate(self, mock_get_model):
        """Test that errors are raised by default.

        Expected result:
            - DatabaseError reaches the caller and no gate is loaded.
        """
        mock_get_model.return_value = Mock(**{"objects.values_list.side_effect": DatabaseError("no table")})

        with self.assertRaises(DatabaseError):
            register_permission_gates()

        self.assertFalse(gate_registry.loaded)

    @patch("permission_plus.gates.get_model")
    def test_fail_silently(self, mock_get_model):
        """Test that errors can be logged and swallowed.

        Expected result:
            - 0 is returned and the error is logged.
        """
        mock_get_model.return_value = Mock(**{"objects.values_list.side_effect": DatabaseError("no table")})

        with self.assertLogs("permission_plus.gates", level="ERROR"):
            self.assertEqual(register_permission_gates(fail_silently=True), 0)

        self.assertFalse(gate_registry.loaded)


class TestPermissionPlusBackend(GateTestMixin, BaseAccessControlTestCase):
    """Test cases for user.has_perm() through the backend."""

    def setUp(self):
        super().setUp()
        register_permission_gates()
        self.user = User.objects.create_user(username="writer", email="writer@example.com")

    def test_has_perm_through_role(self):
        """Test that a user holding a role has its permissions."""
        assignments.assign_roles(self.user, "editor")

        self.assertTrue(self.user.has_perm("edit-post"))
        self.assertFalse(self.user.has_perm("view-invoice"))

    def test_inactive_user(self):
        """Test that inactive users are denied."""
        assignments.assign_roles(self.user, "editor")
        self.user.is_active = False

        self.assertFalse(PermissionPlusBackend().has_perm(self.user, "edit-post"))
        self.assertFalse(self.user.has_perm("edit-post"))

    def test_anonymous_user(self):
        """Test that anonymous users are denied."""
        self.assertFalse(PermissionPlusBackend().has_perm(AnonymousUser(), "edit-post"))
        self.assertFalse(AnonymousUser().has_perm("edit-post"))

    def test_object_permissions_are_denied(self):
        """Test that object-level checks are denied."""
        assignments.assign_roles(self.user, "editor")

        self.assertFalse(PermissionPlusBackend().has_perm(self.user, "edit-post", obj=self.alice))
