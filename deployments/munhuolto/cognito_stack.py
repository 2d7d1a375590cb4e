"""
Munhuolto Cognito CDK stack.

Stack naming convention: MunhuoltoCognito-<env> (e.g. MunhuoltoCognito-prod)

Architecture:
- Cognito user pool with web client (authorization code grant)
- Identity pool issuing credentials for the admin and user roles
- User pool groups 'admin' and 'user' mapped to those roles
- Outputs consumed by the frontend application
"""

from aws_cdk import (
    Stack,
    CfnOutput,
    Tags,
)
from constructs import Construct

from .environment import EnvironmentContext
from .identity_construct import MunhuoltoIdentityConstruct
from .identity_specs import (
    ADMIN_GROUP,
    IDENTITY_POOL,
    USER_GROUP,
    USER_POOL,
    USER_POOL_CLIENT,
    build_identity_specs,
)
from .logger import SynthLogger, create_logger
from .outputs import IDENTITY_OUTPUT_DESCRIPTIONS, emit, identity_identifiers
from .role_specs import ADMIN_ROLE, USER_ROLE
from .validation import ensure_valid


COGNITO_FAMILY = 'MunhuoltoCognito'


class MunhuoltoCognitoStack(Stack):
    """
    CDK stack holding the Munhuolto authentication resources.

    Attributes:
        env_context: Resolved environment the stack was built for
        identity_specs: Validated identity specs
        identity: Identity construct holding the realized resources
        output_records: Records published as CfnOutputs
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        context: EnvironmentContext,
        logger: SynthLogger = None,
        **kwargs
    ) -> None:
        """
        Initialize Munhuolto Cognito stack.

        Args:
            scope: CDK app scope
            construct_id: Stack identifier (MunhuoltoCognito-<env>)
            context: Resolved environment
            logger: Structured logger for this synthesis run
            **kwargs: Additional stack properties (env, description, etc.)

        Raises:
            ConfigurationInvariantViolation: if the identity specs are inconsistent
        """
        super().__init__(scope, construct_id, **kwargs)

        self.env_context = context
        logger = logger or create_logger()

        for key, value in context.tags.items():
            Tags.of(self).add(key, value)
        Tags.of(self).add('ManagedBy', 'CDK')

        # Region/account may be tokens when the stack is environment-agnostic
        self.identity_specs = build_identity_specs(context, self.region, self.account)
        ensure_valid(self.identity_specs, context)
        logger.log_specs_built(construct_id, self.identity_specs)

        self.identity = MunhuoltoIdentityConstruct(
            self,
            'Identity',
            specs=self.identity_specs,
        )

        self.output_records = emit(
            identity_identifiers(
                context,
                region=self.region,
                user_pool_id=self.user_pool.user_pool_id,
                user_pool_client_id=self.user_pool_client.user_pool_client_id,
                identity_pool_id=self.identity_pool.ref,
            ),
            IDENTITY_OUTPUT_DESCRIPTIONS,
        )
        for record in self.output_records:
            CfnOutput(
                self,
                record.key,
                value=record.value,
                description=record.description,
            )

    @property
    def user_pool(self):
        return self.identity.resources[USER_POOL]

    @property
    def user_pool_client(self):
        return self.identity.resources[USER_POOL_CLIENT]

    @property
    def identity_pool(self):
        return self.identity.resources[IDENTITY_POOL]

    @property
    def admin_role(self):
        return self.identity.resources[ADMIN_ROLE]

    @property
    def user_role(self):
        return self.identity.resources[USER_ROLE]

    @property
    def admin_group(self):
        return self.identity.resources[ADMIN_GROUP]

    @property
    def user_group(self):
        return self.identity.resources[USER_GROUP]
