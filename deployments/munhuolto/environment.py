"""
Environment resolution for Munhuolto deployments.

Resolves the active deployment environment exactly once per synthesis and
derives the policy flags every spec builder depends on.

Precedence (highest first):
    environment name:  explicit > ENVIRONMENT > context 'environment' > 'dev'
    frontend URL:      explicit > FRONTEND_URL > context 'frontendUrl'
                       > 'http://localhost:3000'
    self sign-up:      explicit > ALLOW_SELF_SIGNUP == 'true' > not production

Resolution never raises. Empty or whitespace-only values count as unset.
"""

import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union


DEFAULT_ENVIRONMENT = 'dev'
DEFAULT_FRONTEND_URL = 'http://localhost:3000'
PRODUCTION_ENVIRONMENT = 'prod'
PROJECT_TAG = 'munhuolto'

ContextLookup = Union[Mapping[str, Any], Callable[[str], Any], None]


@dataclass(frozen=True)
class InputResolution:
    """Where to look for one input besides the explicit value."""

    env_key: str
    context_key: Optional[str] = None
    default: Optional[str] = None


ENVIRONMENT_INPUT = InputResolution(
    env_key='ENVIRONMENT',
    context_key='environment',
    default=DEFAULT_ENVIRONMENT,
)
FRONTEND_URL_INPUT = InputResolution(
    env_key='FRONTEND_URL',
    context_key='frontendUrl',
    default=DEFAULT_FRONTEND_URL,
)
SELF_SIGNUP_ENV_KEY = 'ALLOW_SELF_SIGNUP'


@dataclass(frozen=True)
class EnvironmentContext:
    """
    Resolved deployment environment.

    Attributes:
        name: Environment name (dev, staging, prod, ...)
        is_production: True only when name is exactly 'prod'
        frontend_url: Base URL of the frontend application
        allow_self_sign_up: Whether users may register themselves
    """
    name: str
    is_production: bool
    frontend_url: str
    allow_self_sign_up: bool

    @property
    def is_dev(self) -> bool:
        """Narrower than `not is_production`: staging is not dev."""
        return self.name == DEFAULT_ENVIRONMENT

    @property
    def tags(self) -> Dict[str, str]:
        return {
            'Environment': self.name,
            'Project': PROJECT_TAG,
        }

    def deployment_id(self, family: str) -> str:
        """Stack identifier for a resource family, e.g. MunhuoltoDatabase-dev."""
        return f'{family}-{self.name}'


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _lookup_context(context: ContextLookup, key: Optional[str]) -> Any:
    if context is None or key is None:
        return None
    if callable(context):
        return context(key)
    return context.get(key)


def resolve_input(
    explicit: Optional[str],
    resolution: InputResolution,
    env: Optional[Mapping[str, str]] = None,
    context: ContextLookup = None,
) -> Optional[str]:
    """Resolve one input from explicit value, environment, context or default."""
    if _present(explicit):
        return explicit.strip()

    env_value = (os.environ if env is None else env).get(resolution.env_key)
    if _present(env_value):
        return env_value.strip()

    context_value = _lookup_context(context, resolution.context_key)
    if _present(context_value):
        return str(context_value).strip()

    return resolution.default


def resolve_self_sign_up(
    explicit: Optional[bool],
    is_production: bool,
    env: Optional[Mapping[str, str]] = None,
) -> bool:
    """
    Resolve the self sign-up flag.

    Only a 'true' environment value switches it on; any other value falls
    through to the environment-based default (on outside production).
    """
    if explicit is not None:
        return bool(explicit)

    env_value = (os.environ if env is None else env).get(SELF_SIGNUP_ENV_KEY)
    if env_value == 'true':
        return True

    return not is_production


def resolve_environment(
    environment: Optional[str] = None,
    frontend_url: Optional[str] = None,
    allow_self_sign_up: Optional[bool] = None,
    env: Optional[Mapping[str, str]] = None,
    context: ContextLookup = None,
) -> EnvironmentContext:
    """
    Build the EnvironmentContext for this synthesis run.

    Args:
        environment: Explicit environment name override
        frontend_url: Explicit frontend URL override
        allow_self_sign_up: Explicit self sign-up override
        env: Process environment (defaults to os.environ)
        context: CDK context mapping or lookup function
            (e.g. app.node.try_get_context)

    Returns:
        Immutable EnvironmentContext

    Examples:
        >>> resolve_environment(env={}).name
        'dev'
        >>> resolve_environment(env={'ENVIRONMENT': 'prod'}).is_production
        True
    """
    name = resolve_input(environment, ENVIRONMENT_INPUT, env, context)
    is_production = name == PRODUCTION_ENVIRONMENT

    return EnvironmentContext(
        name=name,
        is_production=is_production,
        frontend_url=resolve_input(frontend_url, FRONTEND_URL_INPUT, env, context),
        allow_self_sign_up=resolve_self_sign_up(allow_self_sign_up, is_production, env),
    )
