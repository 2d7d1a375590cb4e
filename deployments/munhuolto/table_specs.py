"""
DynamoDB table specs for Munhuolto.

Tables:
1. Workshop - workshops, looked up by geographic grid cell at 4 distances
2. Reservation flat - reservations in single-table PK/SK layout
3. Service catalog - services, looked up by type and/or category
4. Workshop service flat - workshop<->service relation, inverted index for
   "which workshops offer this service"
5. Car brand - brands, looked up by name

Environment rules:
- Production: provisioned 5/5 capacity (tables and indexes), PITR, retained
- Everything else: on-demand, no PITR, destroyed with the stack

Physical names are <base>-<environment>, e.g. workshop-prod.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .environment import EnvironmentContext
from .specs import (
    BillingMode,
    CapacitySpec,
    Projection,
    RemovalPolicy,
    SecondaryIndexSpec,
    TableSpec,
)


PROVISIONED_READ_CAPACITY = 5
PROVISIONED_WRITE_CAPACITY = 5

GRID_DISTANCES_KM = (5, 10, 20, 50)


@dataclass(frozen=True)
class IndexDefinition:
    index_name: str
    partition_key_attr: str
    sort_key_attr: Optional[str] = None


@dataclass(frozen=True)
class TableDefinition:
    """Environment-independent part of a table."""
    logical_name: str
    base_name: str
    partition_key_attr: str
    description: str
    sort_key_attr: Optional[str] = None
    indexes: Tuple[IndexDefinition, ...] = ()


TABLE_DEFINITIONS: Tuple[TableDefinition, ...] = (
    TableDefinition(
        logical_name='WorkshopTable',
        base_name='workshop',
        partition_key_attr='id',
        description='Workshop Table Name',
        indexes=tuple(
            IndexDefinition(f'gridKey_{km}km-index', f'gridKey_{km}km')
            for km in GRID_DISTANCES_KM
        ),
    ),
    TableDefinition(
        logical_name='ReservationFlatTable',
        base_name='reservation_flat',
        partition_key_attr='PK',
        sort_key_attr='SK',
        description='Reservation Flat Table Name',
    ),
    TableDefinition(
        logical_name='ServiceCatalogTable',
        base_name='serviceCatalog',
        partition_key_attr='id',
        description='Service Catalog Table Name',
        indexes=(
            IndexDefinition('type-index', 'type'),
            IndexDefinition('category-index', 'category'),
            IndexDefinition('type-category-index', 'type', 'category'),
        ),
    ),
    TableDefinition(
        logical_name='WorkshopServiceFlatTable',
        base_name='workshop_service_flat',
        partition_key_attr='PK',
        sort_key_attr='SK',
        description='Workshop Service Flat Table Name',
        indexes=(
            IndexDefinition('service-workshop-index', 'SK', 'PK'),
        ),
    ),
    TableDefinition(
        logical_name='CarBrandTable',
        base_name='carBrand',
        partition_key_attr='id',
        description='Car Brand Table Name',
        indexes=(
            IndexDefinition('name-index', 'name'),
        ),
    ),
)


def capacity_for(context: EnvironmentContext) -> CapacitySpec:
    if context.is_production:
        return CapacitySpec(
            billing_mode=BillingMode.PROVISIONED,
            read_capacity=PROVISIONED_READ_CAPACITY,
            write_capacity=PROVISIONED_WRITE_CAPACITY,
        )
    return CapacitySpec(billing_mode=BillingMode.PAY_PER_REQUEST)


def table_name(definition: TableDefinition, context: EnvironmentContext) -> str:
    return f'{definition.base_name}-{context.name}'


def build_table_spec(definition: TableDefinition, context: EnvironmentContext) -> TableSpec:
    capacity = capacity_for(context)

    if context.is_production:
        removal_policy = RemovalPolicy.RETAIN
    else:
        removal_policy = RemovalPolicy.DESTROY

    # Indexes share the parent table's capacity policy
    indexes = tuple(
        SecondaryIndexSpec(
            index_name=index.index_name,
            partition_key_attr=index.partition_key_attr,
            sort_key_attr=index.sort_key_attr,
            projection=Projection.ALL,
            capacity=capacity,
        )
        for index in definition.indexes
    )

    return TableSpec(
        logical_name=definition.logical_name,
        table_name=table_name(definition, context),
        partition_key_attr=definition.partition_key_attr,
        sort_key_attr=definition.sort_key_attr,
        capacity=capacity,
        point_in_time_recovery=context.is_production,
        removal_policy=removal_policy,
        secondary_indexes=indexes,
        description=definition.description,
    )


def build_table_specs(
    context: EnvironmentContext,
    definitions: Tuple[TableDefinition, ...] = TABLE_DEFINITIONS,
) -> List[TableSpec]:
    """Build one TableSpec per definition, in declaration order."""
    return [build_table_spec(definition, context) for definition in definitions]
