"""
Synthesis tests for the Munhuolto CDK stacks.

These synthesize real CloudFormation templates and therefore need the
Node.js runtime used by the CDK; they are skipped when it is missing.
"""

import os
import shutil
import sys

import pytest

if shutil.which('node') is None:
    pytest.skip('CDK synthesis requires Node.js', allow_module_level=True)

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'deployments'))

from aws_cdk import App
from aws_cdk.assertions import Match, Template

from munhuolto import database_stack as database_stack_module
from munhuolto.cognito_stack import MunhuoltoCognitoStack
from munhuolto.database_stack import MunhuoltoDatabaseStack
from munhuolto.environment import resolve_environment
from munhuolto.errors import ConfigurationInvariantViolation
from munhuolto.logger import create_logger


def _context(environment, **overrides):
    return resolve_environment(environment=environment, env={}, **overrides)


def _database_template(environment):
    context = _context(environment)
    stack = MunhuoltoDatabaseStack(
        App(),
        context.deployment_id('MunhuoltoDatabase'),
        context=context,
        logger=create_logger(correlation_id='test'),
    )
    return Template.from_stack(stack)


def _cognito_template(environment, **overrides):
    context = _context(environment, **overrides)
    stack = MunhuoltoCognitoStack(
        App(),
        context.deployment_id('MunhuoltoCognito'),
        context=context,
        logger=create_logger(correlation_id='test'),
    )
    return Template.from_stack(stack)


class TestDatabaseStack:
    """Test the synthesized database stack."""

    def test_dev_tables(self):
        template = _database_template('dev')
        template.resource_count_is('AWS::DynamoDB::Table', 5)
        template.has_resource_properties('AWS::DynamoDB::Table', {
            'TableName': 'workshop-dev',
            'BillingMode': 'PAY_PER_REQUEST',
        })
        template.has_resource('AWS::DynamoDB::Table', {
            'DeletionPolicy': 'Delete',
        })

    def test_prod_tables(self):
        template = _database_template('prod')
        template.has_resource_properties('AWS::DynamoDB::Table', {
            'TableName': 'carBrand-prod',
            'ProvisionedThroughput': {'ReadCapacityUnits': 5, 'WriteCapacityUnits': 5},
            'PointInTimeRecoverySpecification': {'PointInTimeRecoveryEnabled': True},
            'GlobalSecondaryIndexes': [
                Match.object_like({
                    'IndexName': 'name-index',
                    'Projection': {'ProjectionType': 'ALL'},
                    'ProvisionedThroughput': {'ReadCapacityUnits': 5, 'WriteCapacityUnits': 5},
                }),
            ],
        })
        template.has_resource('AWS::DynamoDB::Table', {
            'DeletionPolicy': 'Retain',
        })

    def test_workshop_service_inverted_index(self):
        template = _database_template('dev')
        template.has_resource_properties('AWS::DynamoDB::Table', {
            'TableName': 'workshop_service_flat-dev',
            'GlobalSecondaryIndexes': [
                Match.object_like({
                    'IndexName': 'service-workshop-index',
                    'KeySchema': [
                        {'AttributeName': 'SK', 'KeyType': 'HASH'},
                        {'AttributeName': 'PK', 'KeyType': 'RANGE'},
                    ],
                }),
            ],
        })

    def test_table_name_outputs(self):
        template = _database_template('staging')
        template.has_output('WorkshopTableName', {
            'Description': 'Workshop Table Name',
            'Export': Match.absent(),
        })
        template.has_output('CarBrandTableName', {
            'Description': 'Car Brand Table Name',
        })

    def test_invariant_violation_stops_synthesis(self, monkeypatch):
        """Test broken specs raise before any table is created."""
        build = database_stack_module.build_table_specs

        def duplicated(context):
            specs = build(context)
            return specs + [specs[0]]

        monkeypatch.setattr(database_stack_module, 'build_table_specs', duplicated)
        context = _context('dev')

        with pytest.raises(ConfigurationInvariantViolation):
            MunhuoltoDatabaseStack(App(), 'MunhuoltoDatabase-dev', context=context)


class TestCognitoStack:
    """Test the synthesized Cognito stack."""

    def test_prod_user_pool(self):
        template = _cognito_template('prod')
        template.resource_count_is('AWS::Cognito::UserPool', 1)
        template.has_resource_properties('AWS::Cognito::UserPool', {
            'UserPoolName': 'munhuolto-user-pool-prod',
            'Policies': Match.object_like({
                'PasswordPolicy': Match.object_like({
                    'MinimumLength': 12,
                    'RequireSymbols': True,
                }),
            }),
            'AdminCreateUserConfig': Match.object_like({
                'AllowAdminCreateUserOnly': True,
            }),
        })
        template.has_resource('AWS::Cognito::UserPool', {
            'DeletionPolicy': 'Retain',
        })

    def test_dev_user_pool(self):
        template = _cognito_template('dev')
        template.has_resource_properties('AWS::Cognito::UserPool', {
            'Policies': Match.object_like({
                'PasswordPolicy': Match.object_like({
                    'MinimumLength': 8,
                    'RequireSymbols': False,
                }),
            }),
            'AdminCreateUserConfig': Match.object_like({
                'AllowAdminCreateUserOnly': False,
            }),
        })
        template.has_resource('AWS::Cognito::UserPool', {
            'DeletionPolicy': 'Delete',
        })

    def test_staging_client_has_no_localhost_urls(self):
        template = _cognito_template('staging', frontend_url='https://staging.example.com')
        template.has_resource_properties('AWS::Cognito::UserPoolClient', {
            'ClientName': 'munhuolto-web-client-staging',
            'CallbackURLs': [
                'https://staging.example.com/callback',
                'https://staging.example.com/auth/callback',
            ],
            'LogoutURLs': [
                'https://staging.example.com/logout',
                'https://staging.example.com/auth/logout',
            ],
        })

    def test_dev_client_has_localhost_urls(self):
        template = _cognito_template('dev', frontend_url='https://dev.example.com')
        template.has_resource_properties('AWS::Cognito::UserPoolClient', {
            'CallbackURLs': [
                'https://dev.example.com/callback',
                'https://dev.example.com/auth/callback',
                'http://localhost:3000/callback',
            ],
        })

    def test_identity_pool(self):
        template = _cognito_template('dev')
        template.has_resource_properties('AWS::Cognito::IdentityPool', {
            'IdentityPoolName': 'munhuolto-identity-pool-dev',
            'AllowUnauthenticatedIdentities': False,
        })
        template.resource_count_is('AWS::Cognito::IdentityPoolRoleAttachment', 1)

    def test_groups(self):
        template = _cognito_template('dev')
        template.resource_count_is('AWS::Cognito::UserPoolGroup', 2)
        template.has_resource_properties('AWS::Cognito::UserPoolGroup', {
            'GroupName': 'admin',
            'Precedence': 1,
        })
        template.has_resource_properties('AWS::Cognito::UserPoolGroup', {
            'GroupName': 'user',
            'Precedence': 2,
        })

    def test_admin_role_managed_policy_only_outside_prod(self):
        _cognito_template('dev').has_resource_properties('AWS::IAM::Role', {
            'RoleName': 'munhuolto-admin-role-dev',
            'ManagedPolicyArns': Match.any_value(),
        })
        _cognito_template('prod').has_resource_properties('AWS::IAM::Role', {
            'RoleName': 'munhuolto-admin-role-prod',
            'ManagedPolicyArns': Match.absent(),
        })

    def test_dev_user_role_wildcard_resource(self):
        template = _cognito_template('dev')
        template.has_resource_properties('AWS::IAM::Role', {
            'RoleName': 'munhuolto-user-role-dev',
            'Policies': Match.array_with([
                Match.object_like({
                    'PolicyName': 'UserPolicy',
                    'PolicyDocument': Match.object_like({
                        'Statement': Match.array_with([
                            Match.object_like({'Effect': 'Allow', 'Resource': '*'}),
                        ]),
                    }),
                }),
            ]),
        })

    def test_outputs(self):
        template = _cognito_template('prod', frontend_url='https://app.example.com')
        template.has_output('Environment', {'Value': 'prod'})
        template.has_output('FrontendUrl', {'Value': 'https://app.example.com'})
        template.has_output('AuthCallbackUrl', {'Value': 'https://app.example.com/callback'})
        template.has_output('UserPoolId', {'Description': 'Cognito User Pool ID'})
