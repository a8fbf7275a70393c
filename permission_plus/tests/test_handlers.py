"""Behavioral tests for the permission_plus signal handlers.

Coverage confirms that gates follow permission rows once registered and that
deleting a user removes its assignments.
"""

from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.contrib.contenttypes.models import ContentType

from permission_plus.api import assignments
from permission_plus.gates import gate_registry, register_permission_gates
from permission_plus.models import GroupMembership, Permission, PermissionAssignment, RoleAssignment
from permission_plus.tests.api.test_assignments import BaseAccessControlTestCase
from permission_plus.tests.test_gates import GateTestMixin

User = get_user_model()


class TestPermissionGateHandlers(GateTestMixin, BaseAccessControlTestCase):
    """Confirm the post_save and post_delete handlers keep gates in sync."""

    def test_no_gates_before_registration(self):
        """Test that saving a permission defines nothing before registration."""
        Permission.objects.create(key="publish-post", name={"en": "Publish"}, permission_guard=self.posts)

        self.assertFalse(gate_registry.has("publish-post"))

    def test_saved_permission_gets_a_gate(self):
        """Test that a permission created after registration gets a gate."""
        register_permission_gates()

        Permission.objects.create(key="publish-post", name={"en": "Publish"}, permission_guard=self.posts)

        self.assertTrue(gate_registry.has("publish-post"))

    def test_renamed_permission_moves_its_gate(self):
        """Test that renaming a permission key replaces its gate.

        Expected result:
            - The new key has a gate and the previous key no longer does.
        """
        register_permission_gates()
        edit_post = Permission.objects.get(key="edit-post")

        edit_post.key = "edit-article"
        edit_post.save()

        self.assertTrue(gate_registry.has("edit-article"))
        self.assertFalse(gate_registry.has("edit-post"))
        self.assertEqual(len(gate_registry.keys()), Permission.objects.count())

    def test_deleted_permission_loses_its_gate(self):
        """Test that deleting a permission forgets its gate, also through a guard cascade."""
        register_permission_gates()

        Permission.objects.get(key="edit-post").delete()
        self.assertFalse(gate_registry.has("edit-post"))

        self.billing.delete()
        self.assertFalse(gate_registry.has("view-invoice"))


class TestUserDeletionHandler(BaseAccessControlTestCase):
    """Confirm that deleting a user removes its assignments."""

    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user(username="leaving", email="leaving@example.com")
        self.user_type = ContentType.objects.get_for_model(User)

    def test_assignments_are_removed(self):
        """Test that roles, permissions and memberships of the user are deleted."""
        assignments.assign_roles(self.user, "editor")
        assignments.give_permissions(self.user, "delete-post")
        assignments.assign_to_groups(self.user, "team")
        user_id = self.user.pk

        self.user.delete()

        self.assertFalse(RoleAssignment.objects.filter(subject_type=self.user_type, subject_id=user_id).exists())
        self.assertFalse(
            PermissionAssignment.objects.filter(subject_type=self.user_type, subject_id=user_id).exists()
        )
        self.assertFalse(GroupMembership.objects.filter(groupable_type=self.user_type, groupable_id=user_id).exists())

    @patch("permission_plus.handlers.unassign_subject_from_all")
    def test_errors_do_not_block_deletion(self, mock_unassign):
        """Test that a cleanup failure is logged and the user is still deleted."""
        mock_unassign.side_effect = Exception("boom")
        user_id = self.user.pk

        with self.assertLogs("permission_plus.handlers", level="ERROR"):
            self.user.delete()

        self.assertFalse(User.objects.filter(pk=user_id).exists())
