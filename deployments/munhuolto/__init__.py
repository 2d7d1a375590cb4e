"""Munhuolto infrastructure: environment resolution, resource specs and CDK stacks."""

from .environment import EnvironmentContext, resolve_environment
from .errors import ConfigurationInvariantViolation, DomainError
from .identity_specs import build_identity_specs
from .outputs import emit
from .table_specs import build_table_specs
from .validation import ensure_valid

__all__ = [
    "EnvironmentContext",
    "resolve_environment",
    "ConfigurationInvariantViolation",
    "DomainError",
    "build_identity_specs",
    "build_table_specs",
    "ensure_valid",
    "emit",
]
