"""Data classes and errors shared by the access-control API."""

from attrs import define
from django.contrib.contenttypes.models import ContentType
from django.db import models

__all__ = [
    "SUBJECT_TYPE_SEPARATOR",
    "GROUPED_PERMISSIONS_LOCALES",
    "MixedReferenceError",
    "SubjectData",
]

SUBJECT_TYPE_SEPARATOR = "."

# Locales tried, in order, for the names in the permissions-by-guard read model.
GROUPED_PERMISSIONS_LOCALES = ("ar", "en")


class MixedReferenceError(ValueError):
    """Raised when a reference list mixes ids, instances and keys.

    References passed to assign/remove calls must all be of one form: numeric
    ids, objects exposing an ``id``, or key strings.
    """


@define(frozen=True)
class SubjectData:
    """A polymorphic subject: any model, identified by its type and id.

    Attributes:
        subject_type: The subject's model label (e.g., 'auth.user').
        subject_id: The subject's primary key.

    Examples:
        >>> subject = SubjectData(subject_type="auth.user", subject_id=7)
        >>> subject.app_label, subject.model
        ('auth', 'user')
    """

    subject_type: str
    subject_id: int

    def __attrs_post_init__(self):
        """Validate the subject type format and the id."""
        if self.subject_type.count(SUBJECT_TYPE_SEPARATOR) != 1:
            raise ValueError(f"Invalid subject_type format: '{self.subject_type}'. Expected 'app_label.model'.")
        if self.subject_id is None:
            raise ValueError("subject_id must not be None.")

    @property
    def app_label(self) -> str:
        return self.subject_type.split(SUBJECT_TYPE_SEPARATOR)[0]

    @property
    def model(self) -> str:
        return self.subject_type.split(SUBJECT_TYPE_SEPARATOR)[1]

    @property
    def content_type(self) -> ContentType:
        """The content type of the subject's model."""
        return ContentType.objects.get_by_natural_key(self.app_label, self.model)

    @classmethod
    def from_instance(cls, instance: models.Model) -> "SubjectData":
        """Build the subject for a saved model instance.

        Raises:
            ValueError: If the instance has not been saved.
        """
        if instance.pk is None:
            raise ValueError(f"Unsaved {type(instance).__name__} instances cannot hold assignments.")
        content_type = ContentType.objects.get_for_model(instance)
        return cls(subject_type=f"{content_type.app_label}.{content_type.model}", subject_id=instance.pk)

    @classmethod
    def from_subject(cls, subject: "SubjectData | models.Model") -> "SubjectData":
        """Normalize a subject given as SubjectData or as a model instance."""
        if isinstance(subject, cls):
            return subject
        if isinstance(subject, models.Model):
            return cls.from_instance(subject)
        raise TypeError(f"Expected a model instance or SubjectData, got {type(subject).__name__}.")
