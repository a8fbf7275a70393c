"""Decorators for the permission_plus REST API."""

from edx_rest_framework_extensions.auth.jwt.authentication import JwtAuthentication
from edx_rest_framework_extensions.auth.session.authentication import SessionAuthenticationAllowInactiveUser
from rest_framework.permissions import IsAuthenticated


def view_auth_classes(is_authenticated=True):
    """
    Function and class decorator that abstracts the authentication and permission checks for api views.

    Args:
        is_authenticated: Whether the view requires authentication.

    Returns:
        The decorated view or class.

    Examples:
        >>> @view_auth_classes(is_authenticated=False)
        ... class MyView(APIView):
        ...     def get(self, request):
        ...         return Response("Hello, world!")
    """

    def _decorator(func_or_class):
        """
        Requires either JWT or Session-based authentication.

        Args:
            func_or_class: The view or class to decorate.

        Returns:
            The decorated view or class.
        """
        func_or_class.authentication_classes = [
            JwtAuthentication,
            SessionAuthenticationAllowInactiveUser,
        ]
        if is_authenticated:
            func_or_class.permission_classes = [IsAuthenticated] + getattr(func_or_class, "permission_classes", [])
        return func_or_class

    return _decorator
