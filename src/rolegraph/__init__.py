from .config import LogLevel, PermissionsConfig, load_config_from_env
from .exceptions import ConfigurationError, InvalidArgumentError, RoleGraphError
from .graph import DependencyGraph
from .interfaces import InheritanceGraph, PermissionListener
from .logging import (
    PermissionsFormatter,
    PermissionsLoggerAdapter,
    get_permissions_logger,
    safe_preview,
    setup_logging,
)
from .permissions import (
    EMPTY_ROLES,
    InheritablePermissionStore,
    ObservablePermissionStore,
    PermissionChangedAction,
    PermissionChangedEvent,
    PermissionStore,
    RoleCollection,
)

__all__ = [
    'PermissionStore',
    'InheritablePermissionStore',
    'ObservablePermissionStore',
    'PermissionChangedAction',
    'PermissionChangedEvent',
    'RoleCollection',
    'EMPTY_ROLES',
    'DependencyGraph',
    'InheritanceGraph',
    'PermissionListener',
    'PermissionsConfig',
    'LogLevel',
    'load_config_from_env',
    'RoleGraphError',
    'InvalidArgumentError',
    'ConfigurationError',
    'safe_preview',
    'PermissionsFormatter',
    'PermissionsLoggerAdapter',
    'setup_logging',
    'get_permissions_logger',
]
