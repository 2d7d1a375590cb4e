"""
DynamoDB table construct for Munhuolto.

Realizes TableSpec records as DynamoDB tables with global secondary indexes.
All environment decisions (capacity, PITR, removal policy) are already made
in the specs; this construct only maps them onto CDK types.
"""

from typing import Dict, Sequence

from aws_cdk import (
    aws_dynamodb as dynamodb,
    RemovalPolicy,
)
from constructs import Construct

from .specs import BillingMode, Projection, RemovalPolicy as SpecRemovalPolicy, TableSpec


BILLING_MODES = {
    BillingMode.PROVISIONED: dynamodb.BillingMode.PROVISIONED,
    BillingMode.PAY_PER_REQUEST: dynamodb.BillingMode.PAY_PER_REQUEST,
}

PROJECTION_TYPES = {
    Projection.ALL: dynamodb.ProjectionType.ALL,
    Projection.KEYS_ONLY: dynamodb.ProjectionType.KEYS_ONLY,
    Projection.INCLUDE: dynamodb.ProjectionType.INCLUDE,
}

REMOVAL_POLICIES = {
    SpecRemovalPolicy.RETAIN: RemovalPolicy.RETAIN,
    SpecRemovalPolicy.DESTROY: RemovalPolicy.DESTROY,
}


def _string_key(name):
    if name is None:
        return None
    return dynamodb.Attribute(name=name, type=dynamodb.AttributeType.STRING)


class MunhuoltoTablesConstruct(Construct):
    """
    Construct that creates the Munhuolto DynamoDB tables.

    Attributes:
        tables: Logical name -> DynamoDB table, in declaration order
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        specs: Sequence[TableSpec],
        **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.tables: Dict[str, dynamodb.Table] = {}
        for spec in specs:
            self.tables[spec.logical_name] = self._create_table(spec)

    def _create_table(self, spec: TableSpec) -> dynamodb.Table:
        table = dynamodb.Table(
            self,
            spec.logical_name,
            table_name=spec.table_name,
            # Primary key configuration
            partition_key=_string_key(spec.partition_key_attr),
            sort_key=_string_key(spec.sort_key_attr),
            # Billing configuration
            billing_mode=BILLING_MODES[spec.capacity.billing_mode],
            read_capacity=spec.capacity.read_capacity,
            write_capacity=spec.capacity.write_capacity,
            # Data protection
            point_in_time_recovery=spec.point_in_time_recovery,
            removal_policy=REMOVAL_POLICIES[spec.removal_policy],
        )

        for index in spec.secondary_indexes:
            table.add_global_secondary_index(
                index_name=index.index_name,
                partition_key=_string_key(index.partition_key_attr),
                sort_key=_string_key(index.sort_key_attr),
                projection_type=PROJECTION_TYPES[index.projection],
                non_key_attributes=list(index.non_key_attributes) or None,
                read_capacity=index.capacity.read_capacity,
                write_capacity=index.capacity.write_capacity,
            )

        return table

    @property
    def table_names(self) -> Dict[str, str]:
        return {name: table.table_name for name, table in self.tables.items()}
