"""
Identity store specs for Munhuolto.

Builds, in realization order:
1. User pool
2. Web client
3. Identity pool
4. Admin and user roles (trusting the identity pool)
5. Admin and user groups (bound to the roles)
6. Identity pool role attachment

Environment rules:
- Production: 12 character passwords with symbols, pool retained on delete
- Everything else: 8 character passwords, pool destroyed with the stack
- Localhost OAuth URLs only when the environment is exactly 'dev'
"""

from typing import Iterable, List, Tuple

from .environment import EnvironmentContext
from .role_specs import build_role_specs
from .specs import (
    CustomAttributeSpec,
    FederatedIdentitySpec,
    GroupSpec,
    IdentityClientSpec,
    IdentityStoreSpec,
    PasswordPolicySpec,
    RemovalPolicy,
    ResourceSpec,
    RoleAttachmentSpec,
    StandardAttributeSpec,
    ref,
)


USER_POOL = 'MunhuoltoUserPool'
USER_POOL_CLIENT = 'MunhuoltoUserPoolClient'
IDENTITY_POOL = 'MunhuoltoIdentityPool'
ADMIN_GROUP = 'AdminGroup'
USER_GROUP = 'UserGroup'
ROLE_ATTACHMENT = 'IdentityPoolRoleAttachment'

LOCAL_FRONTEND_URL = 'http://localhost:3000'

STANDARD_ATTRIBUTES = (
    StandardAttributeSpec('email'),
    StandardAttributeSpec('given_name'),
    StandardAttributeSpec('family_name'),
)

CUSTOM_ATTRIBUTES = (
    CustomAttributeSpec('role', min_len=1, max_len=20, mutable=True),
    CustomAttributeSpec('environment', min_len=1, max_len=10, mutable=False),
)


def removal_policy_for(context: EnvironmentContext) -> RemovalPolicy:
    if context.is_production:
        return RemovalPolicy.RETAIN
    return RemovalPolicy.DESTROY


def password_policy_for(context: EnvironmentContext) -> PasswordPolicySpec:
    if context.is_production:
        return PasswordPolicySpec(min_length=12, require_symbols=True)
    return PasswordPolicySpec(min_length=8, require_symbols=False)


def _unique(urls: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for url in urls:
        if url not in seen:
            seen.append(url)
    return tuple(seen)


def oauth_urls(context: EnvironmentContext) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """
    Callback and logout URLs for the web client.

    Returns:
        (callback_urls, logout_urls)
    """
    callback_urls = [
        f'{context.frontend_url}/callback',
        f'{context.frontend_url}/auth/callback',
    ]
    logout_urls = [
        f'{context.frontend_url}/logout',
        f'{context.frontend_url}/auth/logout',
    ]

    # Exactly dev, not every non-production environment
    if context.is_dev:
        callback_urls.append(f'{LOCAL_FRONTEND_URL}/callback')
        logout_urls.append(f'{LOCAL_FRONTEND_URL}/logout')

    return _unique(callback_urls), _unique(logout_urls)


def build_user_pool(context: EnvironmentContext) -> IdentityStoreSpec:
    return IdentityStoreSpec(
        logical_name=USER_POOL,
        user_pool_name=f'munhuolto-user-pool-{context.name}',
        self_sign_up_enabled=context.allow_self_sign_up,
        password_policy=password_policy_for(context),
        removal_policy=removal_policy_for(context),
        standard_attributes=STANDARD_ATTRIBUTES,
        custom_attributes=CUSTOM_ATTRIBUTES,
    )


def build_user_pool_client(context: EnvironmentContext) -> IdentityClientSpec:
    callback_urls, logout_urls = oauth_urls(context)
    return IdentityClientSpec(
        logical_name=USER_POOL_CLIENT,
        client_name=f'munhuolto-web-client-{context.name}',
        user_pool=ref(USER_POOL),
        callback_urls=callback_urls,
        logout_urls=logout_urls,
    )


def build_identity_pool(context: EnvironmentContext) -> FederatedIdentitySpec:
    return FederatedIdentitySpec(
        logical_name=IDENTITY_POOL,
        identity_pool_name=f'munhuolto-identity-pool-{context.name}',
        client_id=ref(USER_POOL_CLIENT, 'user_pool_client_id'),
        provider_name=ref(USER_POOL, 'user_pool_provider_name'),
    )


def build_groups(admin_role: str, user_role: str) -> Tuple[GroupSpec, GroupSpec]:
    """Admin group takes priority (lower precedence value) over user group."""
    admin_group = GroupSpec(
        logical_name=ADMIN_GROUP,
        group_name='admin',
        description='Admin users with full access',
        precedence=1,
        user_pool_id=ref(USER_POOL, 'user_pool_id'),
        role_arn=ref(admin_role, 'role_arn'),
    )
    user_group = GroupSpec(
        logical_name=USER_GROUP,
        group_name='user',
        description='Regular users with limited access',
        precedence=2,
        user_pool_id=ref(USER_POOL, 'user_pool_id'),
        role_arn=ref(user_role, 'role_arn'),
    )
    return admin_group, user_group


def build_role_attachment(user_role: str) -> RoleAttachmentSpec:
    return RoleAttachmentSpec(
        logical_name=ROLE_ATTACHMENT,
        identity_pool_id=ref(IDENTITY_POOL, 'ref'),
        authenticated_role_arn=ref(user_role, 'role_arn'),
        provider_name=ref(USER_POOL, 'user_pool_provider_name'),
        client_id=ref(USER_POOL_CLIENT, 'user_pool_client_id'),
    )


def build_identity_specs(
    context: EnvironmentContext,
    region: str,
    account: str,
) -> List[ResourceSpec]:
    """
    Build every identity-family spec in realization order.

    Args:
        context: Resolved environment
        region: AWS region for the table ARN pattern (may be a CDK token)
        account: AWS account for the table ARN pattern (may be a CDK token)

    Returns:
        Ordered list of specs; references only point at earlier entries
    """
    admin_role, user_role = build_role_specs(
        context,
        user_pool=USER_POOL,
        identity_pool=IDENTITY_POOL,
        region=region,
        account=account,
    )
    admin_group, user_group = build_groups(admin_role.logical_name, user_role.logical_name)

    return [
        build_user_pool(context),
        build_user_pool_client(context),
        build_identity_pool(context),
        admin_role,
        user_role,
        admin_group,
        user_group,
        build_role_attachment(user_role.logical_name),
    ]
