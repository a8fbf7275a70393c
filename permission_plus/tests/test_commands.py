"""
Tests for the `load_permissions` Django management command.
"""

import io
import json
import os
from tempfile import TemporaryDirectory
from unittest.mock import patch

from ddt import data, ddt
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from permission_plus.models import Group, Permission, PermissionGuard, Role
from permission_plus.tests.stubs.models import Member


@ddt
class LoadPermissionsCommandTests(TestCase):
    """
    Tests for the `load_permissions` Django management command.

    This test class verifies:
    - Loading guards, permissions, roles and groups from a JSON file
    - Idempotent reloading of the same definitions
    - Confirmation prompts when clearing existing records
    - File validation errors
    """

    def setUp(self):
        super().setUp()
        self.buffer = io.StringIO()
        self.command_name = "load_permissions"
        self.directory = TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)
        self.definitions = {
            "guards": [
                {
                    "key": "posts",
                    "name": {"en": "Posts", "ar": "المنشورات"},
                    "permissions": [
                        {"key": "edit-post", "name": {"en": "Edit"}},
                        {"key": "view-post", "name": {"en": "View"}},
                    ],
                }
            ],
            "roles": [{"key": "editor", "name": {"en": "Editor"}, "permissions": ["edit-post", "view-post"]}],
            "groups": [{"key": "team", "name": {"en": "Team"}, "roles": ["editor"]}],
        }

    def write_file(self, content: str) -> str:
        """Write ``content`` to a file in the temporary directory and return its path."""
        path = os.path.join(self.directory.name, "permissions.json")
        with open(path, "w", encoding="utf-8") as definitions_file:
            definitions_file.write(content)
        return path

    def test_load_definitions(self):
        """Test loading a definitions file.

        Expected result:
            - Every record is created with its links.
        """
        path = self.write_file(json.dumps(self.definitions))

        call_command(self.command_name, file_path=path, stdout=self.buffer)

        self.assertEqual(PermissionGuard.objects.get(key="posts").permissions.count(), 2)
        self.assertCountEqual([p.key for p in Role.objects.get(key="editor").permissions], ["edit-post", "view-post"])
        self.assertEqual(Group.objects.get(key="team").roles, [Role.objects.get(key="editor")])

        member = Member.objects.create(username="alice").assign_to_groups("team")
        self.assertTrue(member.has_permission_to("edit-post"))

    def test_reload_is_idempotent(self):
        """Test that loading the same file twice updates instead of duplicating."""
        path = self.write_file(json.dumps(self.definitions))

        call_command(self.command_name, file_path=path, stdout=self.buffer)
        self.definitions["roles"][0]["permissions"] = ["view-post"]
        path = self.write_file(json.dumps(self.definitions))
        call_command(self.command_name, file_path=path, stdout=self.buffer)

        self.assertEqual(Permission.objects.count(), 2)
        self.assertEqual([p.key for p in Role.objects.get(key="editor").permissions], ["view-post"])

    def test_digit_only_keys_match_by_key(self):
        """Test that a key made of digits is not mistaken for a primary key.

        Expected result:
            - A role keyed with the id of an existing role is created beside it.
        """
        editor = Role.objects.create(key="editor", name={"en": "Editor"})
        self.definitions["roles"] = [{"key": str(editor.pk), "name": {"en": "Numbered"}}]
        path = self.write_file(json.dumps(self.definitions))

        call_command(self.command_name, file_path=path, stdout=self.buffer)

        editor.refresh_from_db()
        self.assertEqual(editor.name, {"en": "Editor"})
        self.assertEqual(Role.objects.get(key=str(editor.pk)).name, {"en": "Numbered"})

    def test_default_file(self):
        """Test loading the bundled definitions."""
        call_command(self.command_name, stdout=self.buffer)

        self.assertTrue(Permission.objects.filter(key="view-roles").exists())
        self.assertTrue(Role.objects.filter(key="access-control-viewer").exists())

    @patch("permission_plus.management.commands.load_permissions.click.confirm")
    def test_clear_existing_confirmed(self, mock_confirm):
        """Test clearing existing records after confirmation.

        Expected result:
            - Records missing from the file are deleted.
        """
        mock_confirm.return_value = True
        Role.objects.create(key="obsolete", name={"en": "Obsolete"})
        PermissionGuard.objects.create(key="legacy", name={"en": "Legacy"})
        path = self.write_file(json.dumps(self.definitions))

        call_command(self.command_name, file_path=path, clear_existing=True, stdout=self.buffer)

        self.assertEqual(mock_confirm.call_count, 2)
        self.assertFalse(Role.objects.filter(key="obsolete").exists())
        self.assertFalse(PermissionGuard.objects.filter(key="legacy").exists())
        self.assertTrue(Role.objects.filter(key="editor").exists())

    @patch("permission_plus.management.commands.load_permissions.click.confirm")
    def test_clear_existing_declined(self, mock_confirm):
        """Test that declining the prompts keeps existing records."""
        mock_confirm.return_value = False
        Role.objects.create(key="obsolete", name={"en": "Obsolete"})
        path = self.write_file(json.dumps(self.definitions))

        call_command(self.command_name, file_path=path, clear_existing=True, stdout=self.buffer)

        self.assertTrue(Role.objects.filter(key="obsolete").exists())

    @data(
        "not json",
        "[1, 2]",
        '{"roles": [{"name": {"en": "No key"}}]}',
        '{"guards": [{"key": "a", "permissions": [{"key": "p"}]}, {"key": "b", "permissions": [{"key": "p"}]}]}',
        '{"roles": [{"key": "r", "permissions": ["1", "p"]}]}',
    )
    def test_invalid_definitions(self, content):
        """Test that invalid files raise CommandError."""
        path = self.write_file(content)

        with self.assertRaises(CommandError):
            call_command(self.command_name, file_path=path, stdout=self.buffer)

    def test_missing_file(self):
        """Test that a missing file raises CommandError."""
        with self.assertRaises(CommandError):
            call_command(self.command_name, file_path="/does/not/exist.json", stdout=self.buffer)
