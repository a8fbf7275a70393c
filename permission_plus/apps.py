"""
permission_plus Django application initialization.
"""

from django.apps import AppConfig


class PermissionPlusConfig(AppConfig):
    """
    Configuration for the permission_plus Django application.
    """

    name = "permission_plus"
    verbose_name = "Permission Plus"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        """Connect the signal handlers.

        Gates are not registered here: the permissions table may not exist yet
        (e.g., while running the initial migration). Hosts call
        ``permission_plus.gates.register_permission_gates`` once the database
        is ready.
        """
        from permission_plus import handlers  # pylint: disable=import-outside-toplevel,unused-import
