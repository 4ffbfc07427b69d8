"""Role-based permission stores.

Provides:
- PermissionStore: direct (subject, object) → roles grants
- InheritablePermissionStore: adds subject and object inheritance
- ObservablePermissionStore: publishes change events to listeners
- RoleCollection / EMPTY_ROLES: read-only query results
"""

from .events import PermissionChangedAction, PermissionChangedEvent
from .inheritance import InheritablePermissionStore
from .observable import ObservablePermissionStore
from .roles import EMPTY_ROLES, RoleCollection
from .store import PermissionStore

__all__ = [
    "EMPTY_ROLES",
    "InheritablePermissionStore",
    "ObservablePermissionStore",
    "PermissionChangedAction",
    "PermissionChangedEvent",
    "PermissionStore",
    "RoleCollection",
]
