"""Fields serializer for the permission_plus REST API."""

from rest_framework import serializers

from permission_plus.translation import resolve_translatable


class TranslatedField(serializers.Field):
    """Read-only field resolving a translatable attribute to one string.

    The locale is taken from the serializer context (``locale``), falling back
    to the active language.
    """

    def __init__(self, **kwargs):
        kwargs["read_only"] = True
        super().__init__(**kwargs)

    def get_attribute(self, instance):
        """Return the instance itself so the whole record reaches ``to_representation``."""
        return instance

    def to_representation(self, value):
        """Resolve the translatable attribute for the context locale."""
        return resolve_translatable(value, self.source, self.context.get("locale"))
