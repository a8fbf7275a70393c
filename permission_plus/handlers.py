"""
Signal handlers for permission_plus.

These handlers keep the permission gates in sync with permission rows and
clean up the assignments of deleted users.
"""

import logging

from django.conf import settings
from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from permission_plus.api.assignments import unassign_subject_from_all
from permission_plus.gates import define_permission_gate, gate_registry
from permission_plus.models import Permission

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Permission)
def remember_stored_permission_key(sender, instance, **kwargs):  # pylint: disable=unused-argument
    """
    Remember the stored key of a permission about to be saved.

    The post_save handler uses it to forget the gate of a renamed permission.

    Args:
        sender: The model class (Permission).
        instance: The Permission instance being saved.
        **kwargs: Additional keyword arguments from the signal.
    """
    instance.stored_key = None
    if gate_registry.loaded and instance.pk is not None:
        instance.stored_key = sender.objects.filter(pk=instance.pk).values_list("key", flat=True).first()


@receiver(post_save, sender=Permission)
def define_gate_on_permission_save(sender, instance, **kwargs):  # pylint: disable=unused-argument
    """
    Define the gate of a saved permission once the gates are registered.

    A renamed permission loses the gate of its previous key.

    Args:
        sender: The model class (Permission).
        instance: The Permission instance being saved.
        **kwargs: Additional keyword arguments from the signal.
    """
    if not gate_registry.loaded:
        return

    stored_key = getattr(instance, "stored_key", None)
    if stored_key and stored_key != instance.key:
        gate_registry.forget(stored_key)
    define_permission_gate(instance.key)


@receiver(post_delete, sender=Permission)
def forget_gate_on_permission_delete(sender, instance, **kwargs):  # pylint: disable=unused-argument
    """
    Forget the gate of a deleted permission once the gates are registered.

    Args:
        sender: The model class (Permission).
        instance: The Permission instance being deleted.
        **kwargs: Additional keyword arguments from the signal.
    """
    if gate_registry.loaded:
        gate_registry.forget(instance.key)


@receiver(post_delete, sender=settings.AUTH_USER_MODEL)
def unassign_all_on_user_deletion(sender, instance, **kwargs):  # pylint: disable=unused-argument
    """
    Remove the roles, permissions and group memberships of a deleted user.

    Users do not carry the generic relations that cascade these rows.

    Args:
        sender: The user model class.
        instance: The user instance being deleted.
        **kwargs: Additional keyword arguments from the signal.
    """
    try:
        unassign_subject_from_all(instance)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        # Log but don't raise - the user deletion itself must not fail.
        logger.exception("Error removing assignments of deleted user %s", instance.pk, exc_info=exc)
