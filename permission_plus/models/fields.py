"""Custom model fields."""

from django.db import models

from permission_plus.translation import decode_translations


class TranslationsField(models.JSONField):
    """JSON field holding a mapping of locale code to text.

    JSON text assigned to the field is decoded before saving, so
    ``{"en": "Admin"}`` and ``'{"en": "Admin"}'`` are stored as the same
    mapping. Text that does not decode to a mapping is stored as-is. Locale
    codes and completeness are never validated.
    """

    def pre_save(self, model_instance, add):
        """Decode serialized mappings and keep the instance in sync."""
        value = super().pre_save(model_instance, add)
        decoded = decode_translations(value)
        if decoded is not None and decoded is not value:
            setattr(model_instance, self.attname, decoded)
            return decoded
        return value
