"""
Stack output emission.

Turns realized identifiers into named OutputRecords. Emission order follows
the order of the identifier mapping, which follows declaration order.
Publishing the records (CfnOutput) is left to the stacks.
"""

from typing import Dict, List, Mapping, Sequence

from .environment import EnvironmentContext
from .specs import OutputRecord, TableSpec


IDENTITY_OUTPUT_DESCRIPTIONS: Dict[str, str] = {
    'Environment': 'Deployment Environment',
    'FrontendUrl': 'Frontend Application URL',
    'UserPoolId': 'Cognito User Pool ID',
    'UserPoolClientId': 'Cognito User Pool Client ID',
    'IdentityPoolId': 'Cognito Identity Pool ID',
    'UserPoolDomain': 'Cognito User Pool Domain',
    'AuthCallbackUrl': 'OAuth Callback URL',
}


def emit(
    realized_identifiers: Mapping[str, str],
    descriptions: Mapping[str, str] = None,
) -> List[OutputRecord]:
    """
    Build output records from realized identifiers.

    Args:
        realized_identifiers: Output key -> identifier, in declaration order
        descriptions: Output key -> description (missing keys get '')

    Returns:
        Output records in the same order as realized_identifiers
    """
    descriptions = descriptions or {}
    return [
        OutputRecord(key=key, value=value, description=descriptions.get(key, ''))
        for key, value in realized_identifiers.items()
    ]


def identity_identifiers(
    context: EnvironmentContext,
    region: str,
    user_pool_id: str,
    user_pool_client_id: str,
    identity_pool_id: str,
) -> Dict[str, str]:
    """Ordered identity outputs for the frontend application."""
    return {
        'Environment': context.name,
        'FrontendUrl': context.frontend_url,
        'UserPoolId': user_pool_id,
        'UserPoolClientId': user_pool_client_id,
        'IdentityPoolId': identity_pool_id,
        'UserPoolDomain': f'https://cognito-idp.{region}.amazonaws.com/{user_pool_id}',
        'AuthCallbackUrl': f'{context.frontend_url}/callback',
    }


def table_identifiers(
    specs: Sequence[TableSpec],
    table_names: Mapping[str, str],
) -> Dict[str, str]:
    """
    Ordered table name outputs.

    Args:
        specs: Table specs in declaration order
        table_names: Logical table name -> realized table name
    """
    return {
        f'{spec.logical_name}Name': table_names[spec.logical_name]
        for spec in specs
    }


def table_descriptions(specs: Sequence[TableSpec]) -> Dict[str, str]:
    return {f'{spec.logical_name}Name': spec.description for spec in specs}
