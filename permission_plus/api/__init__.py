"""Public API for permission_plus.

Repositories manage guards, permissions, roles and groups; the assignment
functions link them to subjects (any saved model instance); the subject
queries answer role, group and permission checks.
"""

from permission_plus.api.assignments import *
from permission_plus.api.data import *
from permission_plus.api.manager import *
from permission_plus.api.repositories import *
from permission_plus.api.subjects import *
