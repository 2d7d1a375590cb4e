"""
Munhuolto database CDK stack.

Stack naming convention: MunhuoltoDatabase-<env> (e.g. MunhuoltoDatabase-prod)

Creates the five Munhuolto DynamoDB tables and exports their names.

Usage Example:
    from aws_cdk import App
    from munhuolto.environment import resolve_environment
    from munhuolto.database_stack import MunhuoltoDatabaseStack

    app = App()
    context = resolve_environment(context=app.node.try_get_context)
    MunhuoltoDatabaseStack(app, context.deployment_id('MunhuoltoDatabase'), context=context)
    app.synth()
"""

from aws_cdk import (
    Stack,
    CfnOutput,
    Tags,
)
from constructs import Construct

from .environment import EnvironmentContext
from .logger import SynthLogger, create_logger
from .outputs import emit, table_descriptions, table_identifiers
from .table_construct import MunhuoltoTablesConstruct
from .table_specs import build_table_specs
from .validation import ensure_valid


DATABASE_FAMILY = 'MunhuoltoDatabase'


class MunhuoltoDatabaseStack(Stack):
    """
    CDK stack holding the Munhuolto DynamoDB tables.

    Attributes:
        env_context: Resolved environment the stack was built for
        table_specs: Validated table specs
        tables: DynamoDB tables construct
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
        Initialize Munhuolto database stack.

        Args:
            scope: CDK app scope
            construct_id: Stack identifier (MunhuoltoDatabase-<env>)
            context: Resolved environment
            logger: Structured logger for this synthesis run
            **kwargs: Additional stack properties (env, description, etc.)

        Raises:
            ConfigurationInvariantViolation: if the table specs are inconsistent
        """
        super().__init__(scope, construct_id, **kwargs)

        self.env_context = context
        logger = logger or create_logger()

        for key, value in context.tags.items():
            Tags.of(self).add(key, value)
        Tags.of(self).add('ManagedBy', 'CDK')

        # Validate before creating any construct
        self.table_specs = build_table_specs(context)
        ensure_valid(self.table_specs, context)
        logger.log_specs_built(construct_id, self.table_specs)

        self.tables = MunhuoltoTablesConstruct(
            self,
            'Tables',
            specs=self.table_specs,
        )

        self.output_records = emit(
            table_identifiers(self.table_specs, self.tables.table_names),
            table_descriptions(self.table_specs),
        )
        for record in self.output_records:
            CfnOutput(
                self,
                record.key,
                value=record.value,
                description=record.description,
            )
