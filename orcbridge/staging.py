"""Staging plan: build and populate a per-run ORC staging table.

Statement order:
    1. SET runtime properties, then tracking properties
    2. CREATE EXTERNAL TABLE for the staging table
    3. ADD PARTITION (partitioned sources only)
    4. INSERT OVERWRITE staging SELECT ... FROM source
"""

from collections.abc import Sequence

import pyarrow as pa

from orcbridge._constants import (
    DATASET_URN_KEY,
    PARTITION_NAME_KEY,
    PATH_SEPARATOR,
    WORKUNIT_CREATE_TIME_KEY,
)
from orcbridge._logging import get_logger
from orcbridge._partitions import partition_dir_name, partition_info
from orcbridge._queries import (
    create_partition_ddl,
    create_table_ddl,
    insert_select_dml,
    quote_identifier,
    set_statement,
    source_expression,
)
from orcbridge._schema import has_source_path, source_path, to_hive_columns
from orcbridge._types import Column, ConversionConfig, ConversionEntity, DestinationMeta, StagingPlan
from orcbridge.evolution import resolve_columns

logger = get_logger(__name__)


def build_staging_plan(
    entity: ConversionEntity,
    target_schema: pa.Schema,
    config: ConversionConfig,
    staging_table: str,
    destination: DestinationMeta,
) -> StagingPlan:
    """Plan the statements that materialize the staging copy.

    Args:
        entity: Source table / partition being converted
        target_schema: ORC schema (already flattened for the flattened format)
        config: Destination settings
        staging_table: Staging table name for this run
        destination: Existing destination metadata

    Returns:
        StagingPlan with statements in execution order

    Raises:
        OrcConfigError: If the partition spec is malformed
    """
    ddl_info, dml_info = partition_info(entity.partition)
    staging_location = config.staging_data_location(staging_table)
    db = config.destination_db

    statements = runtime_statements(entity, config)

    columns = resolve_columns(to_hive_columns(target_schema), destination, config.evolution_enabled)
    create_ddl = create_table_ddl(
        db,
        staging_table,
        columns,
        staging_location,
        partition_columns=ddl_info,
        cluster_by=config.cluster_by,
        num_buckets=config.num_buckets,
        table_properties=config.table_properties,
    )
    statements.append(create_ddl)
    logger.debug(f"Create staging table DDL: {create_ddl}")

    if dml_info:
        dir_name = partition_dir_name(entity.partition, config.source_data_path_identifiers)
        partition_location = f"{staging_location}{PATH_SEPARATOR}{dir_name}"
        partition_ddl = create_partition_ddl(db, staging_table, partition_location, dml_info)
        statements.append(partition_ddl)
        logger.debug(f"Create staging partition DDL: {partition_ddl}")

    insert_dml = insert_select_dml(
        entity.table.db,
        entity.table.name,
        db,
        staging_table,
        mapping_select_list(
            entity.table.record_schema,
            target_schema,
            columns,
            fill_missing=not destination.exists or config.evolution_enabled,
        ),
        partition_values=dml_info,
        row_limit=config.row_limit,
    )
    statements.append(insert_dml)
    logger.debug(f"Conversion staging DML: {insert_dml}")

    return StagingPlan(statements=tuple(statements), columns=columns)


def runtime_statements(entity: ConversionEntity, config: ConversionConfig) -> list[str]:
    """SET statements: configured runtime properties, then tracking properties."""
    statements = [set_statement(k, v) for k, v in config.runtime_properties.items()]
    statements.append(set_statement(DATASET_URN_KEY, entity.table.complete_name))
    if entity.partition is not None:
        statements.append(set_statement(PARTITION_NAME_KEY, entity.complete_name))
    statements.append(set_statement(WORKUNIT_CREATE_TIME_KEY, entity.created_at))
    return statements


def mapping_select_list(
    source_schema: pa.Schema,
    target_schema: pa.Schema,
    columns: Sequence[Column],
    fill_missing: bool = True,
) -> list[str]:
    """SELECT expressions mapping source fields onto staging columns.

    Each column selects its source path (the dotted path of a flattened
    field, or the column name). Columns the source lacks are filled with a
    typed NULL when fill_missing is set. Otherwise they are selected by name,
    so an existing destination the source no longer matches fails in the
    executor instead of silently losing the column.
    """
    target_fields = {field.name.lower(): field for field in target_schema}
    select_list: list[str] = []

    for column in columns:
        field = target_fields.get(column.name.lower())
        path = source_path(field) if field is not None else column.name

        if not has_source_path(source_schema, path):
            if fill_missing:
                select_list.append(f"CAST(NULL AS {column.type}) AS {quote_identifier(column.name)}")
            else:
                select_list.append(quote_identifier(column.name))
        elif path == column.name:
            select_list.append(source_expression(path))
        else:
            select_list.append(f"{source_expression(path)} AS {quote_identifier(column.name)}")

    return select_list
