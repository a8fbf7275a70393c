"""Django management command to load guards, permissions, roles and groups.

The command supports:
- Specifying the path to a JSON definitions file. Default is
  'permission_plus/fixtures/default_permissions.json'.
- Optionally clearing existing roles, groups and guards before loading.

The file holds three optional lists::

    {
        "guards": [{"key": "posts", "name": {"en": "Posts"}, "permissions": [{"key": "edit-post", "name": {...}}]}],
        "roles": [{"key": "editor", "name": {"en": "Editor"}, "permissions": ["edit-post"]}],
        "groups": [{"key": "team", "name": {"en": "Team"}, "roles": ["editor"]}]
    }

Records are upserted by key, so loading the same file twice is safe.
"""

import json
import os

import click
from django.core.management.base import BaseCommand, CommandError

from permission_plus import ROOT_DIRECTORY
from permission_plus.api import access_control


class Command(BaseCommand):
    """Django management command to load access-control definitions from a JSON file.

    Example Usage:
        python manage.py load_permissions --file-path /path/to/permissions.json
        python manage.py load_permissions --clear-existing
        python manage.py load_permissions
    """

    help = "Load permission guards, permissions, roles and groups from a JSON file."

    def add_arguments(self, parser) -> None:
        """Add command-line arguments to the argument parser.

        Args:
            parser: The Django argument parser instance to configure.
        """
        parser.add_argument(
            "--file-path",
            type=str,
            default=None,
            help="Path to the JSON definitions file",
        )
        parser.add_argument(
            "--clear-existing",
            action="store_true",
            help="Flag to clear existing roles, groups and guards before loading new ones",
        )

    def handle(self, *args, **options):
        """Execute the loading command.

        Args:
            *args: Positional command arguments (unused).
            **options: Command options including 'file_path' and 'clear_existing'.

        Raises:
            CommandError: If the file is not found or is not valid JSON.
        """
        file_path = options["file_path"] or os.path.join(ROOT_DIRECTORY, "fixtures", "default_permissions.json")
        definitions = self._read_definitions(file_path)

        manager = access_control()

        if options.get("clear_existing"):
            if click.confirm(
                click.style(
                    "Do you want to delete existing roles and groups? "
                    "(This will also delete the assignments related to them)",
                    fg="yellow",
                    bold=True,
                ),
                default=False,
            ):
                self._delete_all(manager.roles())
                self._delete_all(manager.groups())

            if click.confirm(
                click.style(
                    "Do you want to delete existing permission guards? "
                    "(This will also delete their permissions)",
                    fg="yellow",
                    bold=True,
                ),
                default=False,
            ):
                self._delete_all(manager.guards())

        for kind, repository in (
            ("guards", manager.guards()),
            ("roles", manager.roles()),
            ("groups", manager.groups()),
        ):
            for data in definitions.get(kind, []):
                self._upsert(repository, data)

    def _read_definitions(self, file_path: str) -> dict:
        """Read and validate the definitions file.

        Args:
            file_path: Path to the JSON file.

        Returns:
            dict: The parsed definitions.
        """
        if not os.path.exists(file_path):
            raise CommandError(f"Definitions file not found: {file_path}")

        with open(file_path, encoding="utf-8") as definitions_file:
            try:
                definitions = json.load(definitions_file)
            except json.JSONDecodeError as exc:
                raise CommandError(f"Invalid JSON in {file_path}: {exc}") from exc

        if not isinstance(definitions, dict):
            raise CommandError(f"Expected a JSON object in {file_path}")
        return definitions

    def _upsert(self, repository, data: dict):
        """Create the record described by ``data`` or update the one with the same key."""
        if not data.get("key"):
            raise CommandError(f"Missing key in definition: {data!r}")

        matches = repository.list({"key": data["key"]})
        try:
            if not matches:
                repository.create(data)
                click.echo(f"Created {repository.kind}: {data['key']}")
            else:
                repository.update(matches[0].pk, data)
                click.echo(f"Updated {repository.kind}: {data['key']}")
        except ValueError as exc:
            raise CommandError(f"Invalid {repository.kind} {data['key']!r}: {exc}") from exc

    def _delete_all(self, repository):
        """Delete every record of a repository.

        Args:
            repository: The repository whose records are deleted.
        """
        for instance in repository.list():
            if repository.delete(instance.pk):
                click.echo(f"Deleted {repository.kind}: {instance.key}")
