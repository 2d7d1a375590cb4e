#!/usr/bin/env python3
"""
CDK Application Entry Point.

Creates the Munhuolto stacks for one environment.

Usage:
    # Synthesize CloudFormation templates for dev (default)
    cdk synth

    # Deploy to production
    ENVIRONMENT=prod FRONTEND_URL=https://app.munhuolto.fi cdk deploy --all

    # Or via CDK context
    cdk deploy --all -c environment=staging -c frontendUrl=https://staging.munhuolto.fi

Environment Configuration:
    - ENVIRONMENT / context 'environment': dev (default), staging, prod, ...
    - FRONTEND_URL / context 'frontendUrl': frontend base URL
    - ALLOW_SELF_SIGNUP: 'true' enables self sign-up in any environment
    - CDK_DEFAULT_ACCOUNT / CDK_DEFAULT_REGION: target account and region

    Values may also be placed in a .env file next to this script.

Stack naming convention: <Family>-<env> (e.g. MunhuoltoCognito-prod)
"""

import os
import sys

from aws_cdk import App, Environment
from dotenv import load_dotenv

from munhuolto.cognito_stack import COGNITO_FAMILY, MunhuoltoCognitoStack
from munhuolto.database_stack import DATABASE_FAMILY, MunhuoltoDatabaseStack
from munhuolto.environment import resolve_environment
from munhuolto.errors import ConfigurationInvariantViolation
from munhuolto.logger import create_logger


load_dotenv()

app = App()
logger = create_logger()

# Resolved once, then passed explicitly to every stack
context = resolve_environment(context=app.node.try_get_context)
logger.log_environment_resolved(context)

account = os.environ.get('CDK_DEFAULT_ACCOUNT')
region = os.environ.get('CDK_DEFAULT_REGION')

env = None
if account and region:
    env = Environment(account=account, region=region)

try:
    database_stack = MunhuoltoDatabaseStack(
        app,
        context.deployment_id(DATABASE_FAMILY),
        context=context,
        logger=logger,
        env=env,
        description=f'Munhuolto DynamoDB tables - {context.name}',
    )

    cognito_stack = MunhuoltoCognitoStack(
        app,
        context.deployment_id(COGNITO_FAMILY),
        context=context,
        logger=logger,
        env=env,
        description=f'Munhuolto authentication - {context.name}',
    )
except ConfigurationInvariantViolation as error:
    logger.log_invariant_violation(
        error_code=error.code,
        error_message=error.message,
        errors=error.errors,
    )
    sys.exit(1)

app.synth()
