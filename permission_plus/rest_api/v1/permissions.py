"""Permissions for the permission_plus REST API."""

from functools import wraps

from rest_framework.permissions import BasePermission

from permission_plus import api


def authz_permissions(permissions: list[str]):
    """Attach the permission keys a view method requires.

    ``AccessControlPermission`` reads them from the handler.

    Examples:
        >>> class MyView(APIView):
        ...     @authz_permissions(["view-roles"])
        ...     def get(self, request):
        ...         pass
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            return func(*args, **kwargs)

        wrapper.required_permissions = permissions
        return wrapper

    return decorator


class AccessControlPermission(BasePermission):
    """Permission class validating the keys declared with ``@authz_permissions``.

    Superusers and staff members always pass. Other users need every key
    declared on the view method, however they hold it (directly, through a
    role, or through an active group). Methods without declared keys are
    allowed.

    Examples:
        >>> class MyView(APIView):
        ...     permission_classes = [AccessControlPermission]
        ...
        ...     @authz_permissions(["view-roles"])
        ...     def get(self, request):
        ...         pass
    """

    def get_required_permissions(self, request, view) -> list[str]:
        """Extract required permission keys from the view method.

        Args:
            request: The Django REST framework request object.
            view: The view being accessed.

        Returns:
            list[str]: List of permission keys, or empty list if not defined.
        """
        method = request.method.lower()
        handler = getattr(view, method, None)
        if handler and hasattr(handler, "required_permissions"):
            return handler.required_permissions
        return []

    def has_permission(self, request, view) -> bool:
        if request.user.is_superuser or request.user.is_staff:
            return True
        return all(
            api.has_permission_to(request.user, permission)
            for permission in self.get_required_permissions(request, view)
        )
