"""
Unit tests for stack output emission.
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'deployments'))

from munhuolto.environment import resolve_environment
from munhuolto.outputs import (
    IDENTITY_OUTPUT_DESCRIPTIONS,
    emit,
    identity_identifiers,
    table_descriptions,
    table_identifiers,
)
from munhuolto.specs import OutputRecord
from munhuolto.table_specs import build_table_specs


class TestEmit:
    """Test the generic emitter."""

    def test_preserves_order(self):
        records = emit({'B': '2', 'A': '1', 'C': '3'})
        assert [r.key for r in records] == ['B', 'A', 'C']

    def test_descriptions(self):
        records = emit({'UserPoolId': 'pool-1', 'Other': 'x'}, {'UserPoolId': 'Cognito User Pool ID'})
        assert records == [
            OutputRecord('UserPoolId', 'pool-1', 'Cognito User Pool ID'),
            OutputRecord('Other', 'x', ''),
        ]

    def test_empty(self):
        assert emit({}) == []

    def test_does_not_modify_input(self):
        identifiers = {'A': '1'}
        emit(identifiers, {'A': 'a'})
        assert identifiers == {'A': '1'}


class TestIdentityOutputs:
    """Test Cognito stack outputs."""

    def test_identity_outputs(self):
        context = resolve_environment(environment='prod', frontend_url='https://app.example.com', env={})
        records = emit(
            identity_identifiers(
                context,
                region='eu-north-1',
                user_pool_id='eu-north-1_abc',
                user_pool_client_id='client-1',
                identity_pool_id='eu-north-1:pool-1',
            ),
            IDENTITY_OUTPUT_DESCRIPTIONS,
        )
        values = {r.key: r.value for r in records}

        assert [r.key for r in records] == [
            'Environment',
            'FrontendUrl',
            'UserPoolId',
            'UserPoolClientId',
            'IdentityPoolId',
            'UserPoolDomain',
            'AuthCallbackUrl',
        ]
        assert values['Environment'] == 'prod'
        assert values['UserPoolDomain'] == 'https://cognito-idp.eu-north-1.amazonaws.com/eu-north-1_abc'
        assert values['AuthCallbackUrl'] == 'https://app.example.com/callback'
        assert all(r.description for r in records)


class TestTableOutputs:
    """Test database stack outputs."""

    def test_one_output_per_table_in_order(self):
        context = resolve_environment(environment='dev', env={})
        specs = build_table_specs(context)
        names = {spec.logical_name: spec.table_name for spec in specs}

        records = emit(table_identifiers(specs, names), table_descriptions(specs))

        assert [r.key for r in records] == [
            'WorkshopTableName',
            'ReservationFlatTableName',
            'ServiceCatalogTableName',
            'WorkshopServiceFlatTableName',
            'CarBrandTableName',
        ]
        assert records[0] == OutputRecord('WorkshopTableName', 'workshop-dev', 'Workshop Table Name')
