from .config import LogLevel, RightsConfig, load_config_from_env
from .exceptions import (
    ConfigurationError,
    ForbiddenAccess,
    ResetNotFoundError,
    RightsError,
    TypeMismatchError,
    UnknownCapabilityError,
    grpc_error_handler,
)
from .logging import (
    RightsFormatter,
    RightsLoggerAdapter,
    get_rights_logger,
    safe_preview,
    setup_logging,
)
from .permissions import (
    CapabilitySet,
    RightsOwner,
    declare_family,
    families_of,
    parse_flag,
    reset_defaults_for,
    with_capabilities,
)
from .security import (
    AuthorizationContext,
    BeforeFilter,
    GuardedService,
    authorization_scope,
    current_authorization,
    guarded,
)

__all__ = [
    'LogLevel',
    'RightsConfig',
    'load_config_from_env',
    'ConfigurationError',
    'ForbiddenAccess',
    'ResetNotFoundError',
    'RightsError',
    'TypeMismatchError',
    'UnknownCapabilityError',
    'grpc_error_handler',
    'RightsFormatter',
    'RightsLoggerAdapter',
    'get_rights_logger',
    'safe_preview',
    'setup_logging',
    'CapabilitySet',
    'RightsOwner',
    'declare_family',
    'families_of',
    'parse_flag',
    'reset_defaults_for',
    'with_capabilities',
    'AuthorizationContext',
    'BeforeFilter',
    'GuardedService',
    'authorization_scope',
    'current_authorization',
    'guarded',
]
