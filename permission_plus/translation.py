"""Locale-aware resolution of translatable attributes.

Translatable attributes are stored as a mapping of locale code to text, for
example ``{"en": "Admin", "ar": "مشرف"}``. Reading one resolves the mapping to a
single string: the requested locale first, then the configured fallback
languages, then any other locale present in the mapping.

Resolution is always explicit. Models mixing in ``TranslatableMixin`` expose
``translate()`` instead of intercepting attribute access, and the current
locale is only read (``django.utils.translation.get_language``) when the
caller does not pass one.
"""

import json
import logging
from typing import ClassVar

from django.utils.translation import get_language

from permission_plus.conf import get_languages

logger = logging.getLogger(__name__)

__all__ = [
    "decode_translations",
    "get_locale_candidates",
    "resolve_translation",
    "get_translations",
    "resolve_translatable",
    "TranslatableMixin",
]


def decode_translations(value) -> dict | None:
    """Return the locale mapping held by a translatable value.

    Args:
        value: A mapping, or JSON text encoding one.

    Returns:
        dict | None: The mapping, or None if the value does not hold one.
    """
    if isinstance(value, dict):
        return value
    if isinstance(value, (str, bytes)):
        try:
            decoded = json.loads(value)
        except ValueError:
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


def get_locale_candidates(translations: dict, locale: str | None, fallback_locales: list[str]) -> list[str]:
    """Build the ordered, de-duplicated list of locales to try.

    The order is: the requested locale, the fallback locales, then the
    remaining keys of the mapping in their iteration order.

    Examples:
        >>> get_locale_candidates({"es": "x", "en": "y"}, "fr", ["en", "ar"])
        ['fr', 'en', 'ar', 'es']
    """
    candidates = []
    for candidate in [locale, *fallback_locales, *translations]:
        if candidate and candidate not in candidates:
            candidates.append(candidate)
    return candidates


def resolve_translation(translations, locale: str | None, fallback_locales: list[str] | None = None) -> str | None:
    """Resolve a locale mapping to a single display string.

    Locales whose value is None are skipped. If no candidate yields a value,
    the first value of the mapping is returned.

    Args:
        translations: The locale mapping (or JSON text encoding one).
        locale: The locale to prefer.
        fallback_locales: Ordered fallbacks. Defaults to the
            ``PERMISSION_PLUS_LANGUAGES`` setting.

    Returns:
        str | None: The resolved string, or None for an empty mapping.

    Examples:
        >>> resolve_translation({"en": "Admin", "ar": "مشرف"}, "ar")
        'مشرف'
        >>> resolve_translation({"en": "Admin", "ar": "مشرف"}, "de", [])
        'Admin'
    """
    mapping = decode_translations(translations)
    if not mapping:
        return None

    if fallback_locales is None:
        fallback_locales = get_languages()

    for candidate in get_locale_candidates(mapping, locale, fallback_locales):
        if mapping.get(candidate) is not None:
            return mapping[candidate]

    return next(iter(mapping.values()))


def get_translations(instance, attribute: str) -> dict | None:
    """Return every translation of a translatable attribute.

    Args:
        instance: An object declaring a ``translatable`` collection of attribute names.
        attribute: The attribute to read.

    Returns:
        dict | None: The locale mapping, or None if the attribute is not
        translatable or does not hold a mapping.
    """
    if attribute not in getattr(instance, "translatable", ()):
        return None
    return decode_translations(getattr(instance, attribute, None))


def resolve_translatable(instance, attribute: str, locale: str | None = None):
    """Read an attribute, resolving it to one string if it is translatable.

    Attributes not listed in ``instance.translatable`` are returned unchanged.

    Args:
        instance: The object to read from.
        attribute: The attribute name.
        locale: The locale to prefer. Defaults to the active language.

    Returns:
        The resolved string for translatable attributes, the raw value otherwise.
    """
    value = getattr(instance, attribute)
    if attribute not in getattr(instance, "translatable", ()):
        return value
    if locale is None:
        locale = get_language()
    return resolve_translation(value, locale)


class TranslatableMixin:
    """Mixin for objects with attributes stored as locale mappings.

    Subclasses list the translatable attribute names in ``translatable``.
    """

    translatable: ClassVar[tuple[str, ...]] = ()

    def translate(self, attribute: str, locale: str | None = None):
        """Resolve ``attribute`` for ``locale`` (the active language by default)."""
        return resolve_translatable(self, attribute, locale)

    def get_translations(self, attribute: str) -> dict | None:
        """Return every translation of ``attribute``."""
        return get_translations(self, attribute)

    def set_translations(self, attribute: str, value) -> None:
        """Store a locale mapping on a translatable attribute.

        Mappings are stored verbatim. JSON text is decoded when it encodes a
        mapping, and kept as-is otherwise.

        Raises:
            ValueError: If the attribute is not translatable.
        """
        if attribute not in self.translatable:
            raise ValueError(f"'{attribute}' is not a translatable attribute of {type(self).__name__}")

        decoded = decode_translations(value)
        setattr(self, attribute, decoded if decoded is not None else value)

    @property
    def display_name(self) -> str | None:
        """The name resolved for the active language."""
        return self.translate("name")
