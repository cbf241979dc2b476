"""k1s0 authz library."""

from .builder import PolicyBuilder, condition, parse_field_specs
from .config import AuthzConfig, EngineSection, load_config
from .engine import AccessControl, parse_scope
from .exceptions import AuthzError, AuthzErrorCodes
from .models import (
    ALL,
    Condition,
    ConstraintGenerator,
    Denial,
    Effect,
    FieldGenerator,
    FieldMap,
    PolicyStore,
    RoleDefinition,
    ScopeDeclaration,
    ScopeRequest,
)
from .permission import Permission, match_field
from .resolver import RoleResolver

__all__ = [
    "AccessControl",
    "PolicyBuilder",
    "RoleResolver",
    "Permission",
    "ALL",
    "Condition",
    "ConstraintGenerator",
    "FieldGenerator",
    "FieldMap",
    "Effect",
    "Denial",
    "PolicyStore",
    "RoleDefinition",
    "ScopeDeclaration",
    "ScopeRequest",
    "AuthzConfig",
    "EngineSection",
    "load_config",
    "condition",
    "parse_field_specs",
    "parse_scope",
    "match_field",
    "AuthzError",
    "AuthzErrorCodes",
]
