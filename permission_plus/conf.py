"""Configuration accessors for permission_plus.

Every setting has a default, so the app works without any configuration.
Dictionary settings are merged key by key over their defaults, which lets a
project override a single table name or model binding.

Settings:
    PERMISSION_PLUS_MODELS: ``app_label.ModelName`` bindings per entity kind,
        used for key lookups.
    PERMISSION_PLUS_TABLES: Database table names.
    PERMISSION_PLUS_COLUMN_NAMES: Names of the polymorphic id columns.
    PERMISSION_PLUS_LANGUAGES: Ordered fallback locales for translatable fields.
"""

from django.apps import apps
from django.conf import settings

DEFAULTS = {
    "PERMISSION_PLUS_MODELS": {
        "permission": "permission_plus.Permission",
        "role": "permission_plus.Role",
        "permission_guard": "permission_plus.PermissionGuard",
        "group": "permission_plus.Group",
    },
    "PERMISSION_PLUS_TABLES": {
        "permission_guards": "permission_guards",
        "permissions": "permissions",
        "roles": "roles",
        "groups": "groups",
        "permission_assignments": "permission_assignments",
        "role_assignments": "role_assignments",
        "groupables": "groupables",
    },
    "PERMISSION_PLUS_COLUMN_NAMES": {
        "model_morph_key": "subject_id",
        "group_morph_key": "groupable_id",
    },
    "PERMISSION_PLUS_LANGUAGES": ["en", "ar", "fr"],
}


def get_setting(name: str):
    """Return a permission_plus setting, falling back to its default.

    Args:
        name: The setting name (e.g., 'PERMISSION_PLUS_TABLES').

    Returns:
        The configured value. Dictionaries are merged over the defaults.

    Raises:
        KeyError: If the name is not a permission_plus setting.
    """
    default = DEFAULTS[name]
    value = getattr(settings, name, None)
    if value is None:
        return default
    if isinstance(default, dict):
        return {**default, **value}
    return value


def get_table_name(name: str) -> str:
    """Return the configured database table name for a relation."""
    return get_setting("PERMISSION_PLUS_TABLES")[name]


def get_column_name(name: str) -> str:
    """Return the configured name of a polymorphic id column."""
    return get_setting("PERMISSION_PLUS_COLUMN_NAMES")[name]


def get_languages() -> list[str]:
    """Return the ordered list of fallback locales for translatable fields."""
    return list(get_setting("PERMISSION_PLUS_LANGUAGES"))


def get_model(kind: str):
    """Return the model class bound to an entity kind.

    The binding is an ``app_label.ModelName`` string taken from the
    ``PERMISSION_PLUS_MODELS`` setting.

    Args:
        kind: One of 'permission', 'role', 'permission_guard' or 'group'.

    Returns:
        type[Model]: The bound model class.
    """
    app_label, model_name = get_setting("PERMISSION_PLUS_MODELS")[kind].split(".")
    return apps.get_model(app_label, model_name, require_ready=False)
