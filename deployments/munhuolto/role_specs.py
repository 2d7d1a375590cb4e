"""
Access role derivation for Munhuolto identity pool users.

Two roles are derived from the environment:

1. Admin role - Cognito user administration on the user pool, plus
   DynamoDB access. Production grants explicit CRUD/Query/Scan statements
   on the munhuolto table prefix; other environments attach the broad
   AmazonDynamoDBFullAccess managed policy instead.
2. User role - restricted DynamoDB item access (no Scan). Production scopes
   it to the table prefix; other environments use '*'. The '*' is a
   deliberate convenience for dev/staging and is only reachable through the
   non-production branch. Row-level isolation on the partition key is
   attached in every environment.
"""

from fnmatch import fnmatchcase
from typing import Dict, FrozenSet, Iterable, Tuple

from .environment import EnvironmentContext
from .specs import GrantCondition, RoleGrantSpec, RoleSpec, ref


TABLE_ARN_PREFIX = 'munhuolto-'

ADMIN_ROLE = 'AdminRole'
USER_ROLE = 'UserRole'

ADMIN_USER_POOL_ACTIONS = frozenset({
    'cognito-idp:AdminGetUser',
    'cognito-idp:AdminListGroupsForUser',
    'cognito-idp:AdminAddUserToGroup',
    'cognito-idp:AdminRemoveUserFromGroup',
    'cognito-idp:ListUsers',
})

USER_ITEM_ACTIONS = frozenset({
    'dynamodb:GetItem',
    'dynamodb:PutItem',
    'dynamodb:UpdateItem',
    'dynamodb:DeleteItem',
    'dynamodb:Query',
})

ADMIN_TABLE_ACTIONS = USER_ITEM_ACTIONS | {'dynamodb:Scan'}

DYNAMODB_FULL_ACCESS = 'AmazonDynamoDBFullAccess'

# Action patterns covered by the AWS managed policies we attach
MANAGED_POLICY_ACTIONS: Dict[str, FrozenSet[str]] = {
    DYNAMODB_FULL_ACCESS: frozenset({'dynamodb:*'}),
}

LEADING_KEY_CONDITION = GrantCondition(
    operator='ForAllValues:StringEquals',
    key='dynamodb:LeadingKeys',
    values=('${cognito-identity.amazonaws.com:sub}',),
)


def table_arn_pattern(region: str, account: str) -> str:
    """Production table ARN pattern (munhuolto-*) in one account/region."""
    return f'arn:aws:dynamodb:{region}:{account}:table/{TABLE_ARN_PREFIX}*'


def build_admin_role(
    context: EnvironmentContext,
    user_pool: str,
    identity_pool: str,
    table_pattern: str,
) -> RoleSpec:
    grants = [
        RoleGrantSpec(
            actions=ADMIN_USER_POOL_ACTIONS,
            resource_pattern=ref(user_pool, 'user_pool_arn'),
        ),
    ]

    if context.is_production:
        # No managed policies in production, custom statements only
        grants.append(RoleGrantSpec(
            actions=ADMIN_TABLE_ACTIONS,
            resource_pattern=table_pattern,
        ))
        managed_policies: Tuple[str, ...] = ()
    else:
        managed_policies = (DYNAMODB_FULL_ACCESS,)

    return RoleSpec(
        logical_name=ADMIN_ROLE,
        role_name=f'munhuolto-admin-role-{context.name}',
        policy_name='AdminPolicy',
        trusted_identity_pool=ref(identity_pool, 'ref'),
        grants=tuple(grants),
        managed_policies=managed_policies,
    )


def build_user_role(
    context: EnvironmentContext,
    identity_pool: str,
    table_pattern: str,
) -> RoleSpec:
    if context.is_production:
        resource_pattern = table_pattern
    else:
        resource_pattern = '*'

    return RoleSpec(
        logical_name=USER_ROLE,
        role_name=f'munhuolto-user-role-{context.name}',
        policy_name='UserPolicy',
        trusted_identity_pool=ref(identity_pool, 'ref'),
        grants=(
            RoleGrantSpec(
                actions=USER_ITEM_ACTIONS,
                resource_pattern=resource_pattern,
                condition=LEADING_KEY_CONDITION,
            ),
        ),
        restricted=True,
    )


def build_role_specs(
    context: EnvironmentContext,
    user_pool: str,
    identity_pool: str,
    region: str,
    account: str,
) -> Tuple[RoleSpec, RoleSpec]:
    """
    Derive the admin and user role specs.

    Args:
        context: Resolved environment
        user_pool: Logical name of the user pool spec
        identity_pool: Logical name of the identity pool spec
        region: AWS region (may be a CDK token)
        account: AWS account ID (may be a CDK token)

    Returns:
        (admin_role, user_role)
    """
    table_pattern = table_arn_pattern(region, account)
    return (
        build_admin_role(context, user_pool, identity_pool, table_pattern),
        build_user_role(context, identity_pool, table_pattern),
    )


def effective_actions(role: RoleSpec) -> FrozenSet[str]:
    """Granted action patterns including those of attached managed policies."""
    actions = set(role.granted_actions)
    for policy in role.managed_policies:
        actions.update(MANAGED_POLICY_ACTIONS.get(policy, ()))
    return frozenset(actions)


def actions_covered(actions: Iterable[str], patterns: Iterable[str]) -> bool:
    """True when every action matches at least one of the IAM patterns."""
    patterns = list(patterns)
    return all(
        any(fnmatchcase(action, pattern) for pattern in patterns)
        for action in actions
    )
