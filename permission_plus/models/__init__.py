"""Database models for the access-control framework.

Four record kinds (permission guards, permissions, roles and groups) plus the
polymorphic assignment rows linking them to subjects. Host models opt in to
holding roles, permissions and groups with the ``HasAccessControl`` mixin.
"""

from permission_plus.models.assignments import *
from permission_plus.models.core import *
from permission_plus.models.mixins import *
