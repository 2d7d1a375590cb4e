"""
Provider-agnostic spec records for Munhuolto resources.

Each record holds the parameters needed to realize one managed resource.
Records are frozen: they are built once from an EnvironmentContext, checked
by the validators and then handed to the CDK adapter.

Cross-resource references are plain strings of the form
'ref:<LogicalName>.<attribute>'. The adapter resolves them against the
constructs it has already created, so a reference may only point at a
resource declared earlier in the same sequence.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import ClassVar, FrozenSet, Iterator, Optional, Tuple, Union


REF_PREFIX = 'ref:'

# Attribute name meaning "the realized construct itself"
CONSTRUCT_ATTRIBUTE = 'construct'


class BillingMode(str, Enum):
    PROVISIONED = 'PROVISIONED'
    PAY_PER_REQUEST = 'PAY_PER_REQUEST'


class RemovalPolicy(str, Enum):
    RETAIN = 'RETAIN'
    DESTROY = 'DESTROY'


class Projection(str, Enum):
    ALL = 'ALL'
    KEYS_ONLY = 'KEYS_ONLY'
    INCLUDE = 'INCLUDE'


def ref(logical_name: str, attribute: str = CONSTRUCT_ATTRIBUTE) -> str:
    """Reference an attribute of a resource realized earlier."""
    return f'{REF_PREFIX}{logical_name}.{attribute}'


def is_ref(value: object) -> bool:
    return isinstance(value, str) and value.startswith(REF_PREFIX)


def parse_ref(value: str) -> Tuple[str, str]:
    """Split 'ref:Name.attr' into ('Name', 'attr')."""
    if not is_ref(value):
        raise ValueError(f"Not a reference: '{value}'")
    logical_name, _, attribute = value[len(REF_PREFIX):].partition('.')
    if not logical_name or not attribute:
        raise ValueError(f"Malformed reference: '{value}'")
    return logical_name, attribute


def iter_references(spec: object) -> Iterator[str]:
    """Yield every reference string found anywhere inside a spec record."""
    if is_ref(spec):
        yield spec
    elif is_dataclass(spec):
        for f in fields(spec):
            yield from iter_references(getattr(spec, f.name))
    elif isinstance(spec, (tuple, list, frozenset, set)):
        for item in spec:
            yield from iter_references(item)


# Tables

@dataclass(frozen=True)
class CapacitySpec:
    billing_mode: BillingMode
    read_capacity: Optional[int] = None
    write_capacity: Optional[int] = None


@dataclass(frozen=True)
class SecondaryIndexSpec:
    index_name: str
    partition_key_attr: str
    capacity: CapacitySpec
    sort_key_attr: Optional[str] = None
    projection: Projection = Projection.ALL
    non_key_attributes: Tuple[str, ...] = ()

    @property
    def key_pair(self) -> Tuple[str, Optional[str]]:
        return (self.partition_key_attr, self.sort_key_attr)


@dataclass(frozen=True)
class TableSpec:
    kind: ClassVar[str] = 'Table'

    logical_name: str
    table_name: str
    partition_key_attr: str
    capacity: CapacitySpec
    point_in_time_recovery: bool
    removal_policy: RemovalPolicy
    sort_key_attr: Optional[str] = None
    secondary_indexes: Tuple[SecondaryIndexSpec, ...] = ()
    description: str = ''


# Identity store

@dataclass(frozen=True)
class PasswordPolicySpec:
    min_length: int
    require_symbols: bool
    require_lowercase: bool = True
    require_uppercase: bool = True
    require_digits: bool = True


@dataclass(frozen=True)
class StandardAttributeSpec:
    name: str
    required: bool = True
    mutable: bool = True


@dataclass(frozen=True)
class CustomAttributeSpec:
    name: str
    min_len: int
    max_len: int
    mutable: bool = True


@dataclass(frozen=True)
class IdentityStoreSpec:
    kind: ClassVar[str] = 'IdentityStore'

    logical_name: str
    user_pool_name: str
    self_sign_up_enabled: bool
    password_policy: PasswordPolicySpec
    removal_policy: RemovalPolicy
    sign_in_aliases: Tuple[str, ...] = ('email', 'username')
    auto_verify: Tuple[str, ...] = ('email',)
    standard_attributes: Tuple[StandardAttributeSpec, ...] = ()
    custom_attributes: Tuple[CustomAttributeSpec, ...] = ()
    account_recovery: str = 'EMAIL_ONLY'


@dataclass(frozen=True)
class IdentityClientSpec:
    kind: ClassVar[str] = 'IdentityClient'

    logical_name: str
    client_name: str
    user_pool: str
    callback_urls: Tuple[str, ...]
    logout_urls: Tuple[str, ...]
    generate_secret: bool = False
    auth_flows: Tuple[str, ...] = ('user_srp', 'user_password', 'admin_user_password')
    oauth_flows: Tuple[str, ...] = ('authorization_code_grant',)
    oauth_scopes: Tuple[str, ...] = ('email', 'openid', 'profile')
    identity_providers: Tuple[str, ...] = ('COGNITO',)


@dataclass(frozen=True)
class FederatedIdentitySpec:
    kind: ClassVar[str] = 'FederatedIdentity'

    logical_name: str
    identity_pool_name: str
    client_id: str
    provider_name: str
    allow_unauthenticated_identities: bool = False


# Access roles

@dataclass(frozen=True)
class GrantCondition:
    """Single IAM condition block, e.g. ForAllValues:StringEquals."""
    operator: str
    key: str
    values: Tuple[str, ...]


@dataclass(frozen=True)
class RoleGrantSpec:
    actions: FrozenSet[str]
    resource_pattern: str
    condition: Optional[GrantCondition] = None


@dataclass(frozen=True)
class RoleSpec:
    kind: ClassVar[str] = 'Role'

    logical_name: str
    role_name: str
    policy_name: str
    trusted_identity_pool: str
    grants: Tuple[RoleGrantSpec, ...]
    managed_policies: Tuple[str, ...] = ()
    restricted: bool = False
    federated_principal: str = 'cognito-identity.amazonaws.com'
    assume_role_action: str = 'sts:AssumeRoleWithWebIdentity'

    @property
    def granted_actions(self) -> FrozenSet[str]:
        actions = set()
        for grant in self.grants:
            actions.update(grant.actions)
        return frozenset(actions)


@dataclass(frozen=True)
class GroupSpec:
    kind: ClassVar[str] = 'Group'

    logical_name: str
    group_name: str
    description: str
    precedence: int
    user_pool_id: str
    role_arn: str


@dataclass(frozen=True)
class RoleAttachmentSpec:
    kind: ClassVar[str] = 'RoleAttachment'

    logical_name: str
    identity_pool_id: str
    authenticated_role_arn: str
    provider_name: str
    client_id: str
    mapping_type: str = 'Token'
    ambiguous_role_resolution: str = 'AuthenticatedRole'


ResourceSpec = Union[
    TableSpec,
    IdentityStoreSpec,
    IdentityClientSpec,
    FederatedIdentitySpec,
    RoleSpec,
    GroupSpec,
    RoleAttachmentSpec,
]


@dataclass(frozen=True)
class OutputRecord:
    key: str
    value: str
    description: str = field(default='')
