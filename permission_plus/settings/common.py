"""
Common settings for permission_plus.
"""

import copy

from permission_plus.conf import DEFAULTS


def plugin_settings(settings):
    """
    Configure the default settings for permission_plus.

    Projects can call this function from their settings module to make the
    defaults visible on ``django.conf.settings``. Values already set are kept.

    Args:
        settings: The Django settings object
    """
    for name, default in DEFAULTS.items():
        if not hasattr(settings, name):
            setattr(settings, name, copy.deepcopy(default))
