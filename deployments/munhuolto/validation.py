"""
Invariant validation for built specs.

All validation happens before any spec reaches the CDK adapter: a broken
invariant stops synthesis instead of producing a partial deployment.

Validates:
- Secondary index names are unique within a table
- Secondary index key pairs are unique within a table
- Secondary indexes share their table's capacity policy
- User role actions stay within the admin role's actions
- Restricted roles never Scan or administer the user pool
- Restricted roles never use a '*' resource in production
- Logical names are unique and references only point backwards
- Group precedences are unique

Each validator returns a list of {'field', 'message'} errors; an empty list
means the check passed.
"""

from typing import Dict, List, Optional, Sequence

from .environment import EnvironmentContext
from .errors import ConfigurationInvariantViolation
from .role_specs import ADMIN_ROLE, USER_ROLE, actions_covered, effective_actions
from .specs import GroupSpec, RoleSpec, TableSpec, iter_references, parse_ref


RESTRICTED_FORBIDDEN_PATTERNS = ('dynamodb:Scan', 'cognito-idp:*')

WILDCARD_RESOURCE = '*'


def validate_table_spec(spec: TableSpec) -> List[Dict[str, str]]:
    """
    Validate secondary indexes of one table.

    Args:
        spec: Table spec to check

    Returns:
        List of validation errors. Empty list if validation passes.
    """
    errors: List[Dict[str, str]] = []
    field_prefix = f'{spec.logical_name}.secondary_indexes'

    seen_names = set()
    seen_keys = {}
    for index in spec.secondary_indexes:
        if index.index_name in seen_names:
            errors.append({
                'field': f'{field_prefix}.{index.index_name}',
                'message': 'Duplicate index name'
            })
        seen_names.add(index.index_name)

        if index.key_pair in seen_keys:
            errors.append({
                'field': f'{field_prefix}.{index.index_name}',
                'message': f'Same key pair as index {seen_keys[index.key_pair]}'
            })
        else:
            seen_keys[index.key_pair] = index.index_name

        if index.capacity != spec.capacity:
            errors.append({
                'field': f'{field_prefix}.{index.index_name}.capacity',
                'message': 'Index capacity must match table capacity'
            })

    return errors


def validate_role_grants(
    admin_role: RoleSpec,
    user_role: RoleSpec,
    context: EnvironmentContext,
) -> List[Dict[str, str]]:
    """
    Validate the user role against the admin role.

    The user role must be a strict subset of the admin role in action scope:
    every user action matches an admin action pattern and the user role holds
    no Scan or user-pool administration actions.
    """
    errors: List[Dict[str, str]] = []

    user_actions = user_role.granted_actions
    admin_actions = effective_actions(admin_role)

    wider = sorted(a for a in user_actions if not actions_covered([a], admin_actions))
    if wider:
        errors.append({
            'field': f'{user_role.logical_name}.grants',
            'message': f'Actions not granted to {admin_role.logical_name}: {", ".join(wider)}'
        })

    errors.extend(validate_restricted_role(user_role, context))
    return errors


def validate_restricted_role(
    role: RoleSpec,
    context: EnvironmentContext,
) -> List[Dict[str, str]]:
    errors: List[Dict[str, str]] = []
    if not role.restricted:
        return errors

    forbidden = sorted(
        a for a in role.granted_actions
        if actions_covered([a], RESTRICTED_FORBIDDEN_PATTERNS)
    )
    if forbidden:
        errors.append({
            'field': f'{role.logical_name}.grants',
            'message': f'Restricted role may not hold: {", ".join(forbidden)}'
        })

    if role.managed_policies:
        errors.append({
            'field': f'{role.logical_name}.managed_policies',
            'message': 'Restricted role may not attach managed policies'
        })

    if context.is_production:
        for grant in role.grants:
            if grant.resource_pattern == WILDCARD_RESOURCE:
                errors.append({
                    'field': f'{role.logical_name}.grants.resource_pattern',
                    'message': 'Wildcard resource not allowed for restricted role in production'
                })

    return errors


def validate_declaration_order(specs: Sequence[object]) -> List[Dict[str, str]]:
    """
    Validate logical names and references across a spec sequence.

    A reference may only name a resource declared before the referencing
    spec, because the adapter realizes specs in sequence order.
    """
    errors: List[Dict[str, str]] = []
    declared = set()

    for spec in specs:
        name = spec.logical_name
        for reference in iter_references(spec):
            target, _ = parse_ref(reference)
            if target == name or target not in declared:
                errors.append({
                    'field': name,
                    'message': f'Reference to undeclared or later resource: {reference}'
                })

        if name in declared:
            errors.append({
                'field': name,
                'message': 'Duplicate logical name'
            })
        declared.add(name)

    return errors


def validate_groups(specs: Sequence[object]) -> List[Dict[str, str]]:
    errors: List[Dict[str, str]] = []
    precedences: Dict[int, str] = {}

    for spec in specs:
        if not isinstance(spec, GroupSpec):
            continue
        if spec.precedence in precedences:
            errors.append({
                'field': f'{spec.logical_name}.precedence',
                'message': f'Same precedence as {precedences[spec.precedence]}'
            })
        else:
            precedences[spec.precedence] = spec.logical_name

    return errors


def _find_role(specs: Sequence[object], logical_name: str) -> Optional[RoleSpec]:
    for spec in specs:
        if isinstance(spec, RoleSpec) and spec.logical_name == logical_name:
            return spec
    return None


def validate_specs(
    specs: Sequence[object],
    context: EnvironmentContext,
) -> List[Dict[str, str]]:
    """Run every applicable check over a spec sequence."""
    errors = validate_declaration_order(specs)
    errors.extend(validate_groups(specs))

    for spec in specs:
        if isinstance(spec, TableSpec):
            errors.extend(validate_table_spec(spec))
        elif isinstance(spec, RoleSpec) and spec.logical_name != USER_ROLE:
            errors.extend(validate_restricted_role(spec, context))

    admin_role = _find_role(specs, ADMIN_ROLE)
    user_role = _find_role(specs, USER_ROLE)
    if admin_role is not None and user_role is not None:
        errors.extend(validate_role_grants(admin_role, user_role, context))
    elif user_role is not None:
        errors.extend(validate_restricted_role(user_role, context))

    return errors


def ensure_valid(specs: Sequence[object], context: EnvironmentContext) -> None:
    """
    Raise ConfigurationInvariantViolation when any check fails.

    Raises:
        ConfigurationInvariantViolation: with every collected error in
            `details['errors']`
    """
    errors = validate_specs(specs, context)
    if errors:
        raise ConfigurationInvariantViolation(
            f'{len(errors)} configuration invariant(s) violated',
            errors,
        )
