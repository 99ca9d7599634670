"""Publish plan: promote staging data into the final table.

Publish statements, in order:

    1. CREATE final table            (destination absent only)
    2. evolution DDL                 (destination present, evolution enabled)
    3. Snapshot table:
         move staging dir -> final dir (full replace)
       Partitioned table:
         DROP IF EXISTS PARTITION
         move staging partition dir -> final partition dir
         ADD PARTITION ... LOCATION final partition dir
    4. DROP IF EXISTS PARTITION for each replaced partition

The partition is dropped from the catalog before its directory is replaced,
and re-added only once the new directory is in place. move_after records
where the directory moves fall among the publish statements.

Cleanup: drop the staging table, delete the staging location (which holds
every staging partition of the run).
"""

from collections.abc import Sequence

import pyarrow as pa

from orcbridge._constants import PATH_SEPARATOR
from orcbridge._logging import get_logger
from orcbridge._partitions import partition_dir_name, partition_info, replaced_partitions
from orcbridge._queries import (
    create_partition_ddl,
    create_table_ddl,
    drop_partition_ddl,
    drop_partitions_ddl,
    drop_table_ddl,
)
from orcbridge._schema import to_hive_columns
from orcbridge._types import ConversionConfig, ConversionEntity, DestinationMeta, PublishPlan

logger = get_logger(__name__)


def build_publish_plan(
    entity: ConversionEntity,
    target_schema: pa.Schema,
    config: ConversionConfig,
    staging_table: str,
    destination: DestinationMeta,
    evolution_statements: Sequence[str] = (),
) -> PublishPlan:
    """Plan the publish and cleanup phases.

    Nothing is executed here; the returned plan is run by finalize(),
    now or after being persisted.

    Args:
        entity: Source table / partition being converted
        target_schema: ORC schema used to create a missing final table
        config: Destination settings
        staging_table: Staging table name for this run
        destination: Existing destination metadata
        evolution_statements: Output of plan_evolution()

    Returns:
        PublishPlan

    Raises:
        OrcConfigError: If the partition spec or replaced partitions are malformed
    """
    db = config.destination_db
    table = config.destination_table
    final_location = config.final_data_location
    staging_location = config.staging_data_location(staging_table)
    ddl_info, dml_info = partition_info(entity.partition)

    publish_statements: list[str] = []
    publish_directories: dict[str, str] = {}

    if not destination.exists:
        create_ddl = create_table_ddl(
            db,
            table,
            to_hive_columns(target_schema),
            final_location,
            partition_columns=ddl_info,
            cluster_by=config.cluster_by,
            num_buckets=config.num_buckets,
            table_properties=config.table_properties,
        )
        publish_statements.append(create_ddl)
        logger.debug(f"Create final table DDL: {create_ddl}")

    publish_statements.extend(evolution_statements)

    if not dml_info:
        logger.info(f"Snapshot directory to move: {staging_location} to: {final_location}")
        publish_directories[staging_location] = final_location
        move_after = len(publish_statements)
    else:
        drop_ddl = drop_partition_ddl(db, table, dml_info)
        publish_statements.append(drop_ddl)
        logger.debug(f"Drop partition if exists in final table: {drop_ddl}")
        move_after = len(publish_statements)

        dir_name = partition_dir_name(entity.partition, config.source_data_path_identifiers)
        staging_partition_location = f"{staging_location}{PATH_SEPARATOR}{dir_name}"
        final_partition_location = f"{final_location}{PATH_SEPARATOR}{dir_name}"
        logger.info(f"Partition directory to move: {staging_partition_location} to: {final_partition_location}")
        publish_directories[staging_partition_location] = final_partition_location

        partition_ddl = create_partition_ddl(db, table, final_partition_location, dml_info)
        publish_statements.append(partition_ddl)
        logger.debug(f"Create final partition DDL: {partition_ddl}")

    drop_staging_ddl = drop_table_ddl(db, staging_table)
    logger.debug(f"Drop staging table DDL: {drop_staging_ddl}")
    logger.info(f"Staging table directory to delete: {staging_location}")

    replaced = drop_partitions_ddl(db, table, replaced_partitions(entity.partition))
    if replaced:
        logger.debug(f"Drop replaced partitions: {replaced}")
    publish_statements.extend(replaced)

    return PublishPlan(
        publish_statements=tuple(publish_statements),
        publish_directories=publish_directories,
        cleanup_statements=(drop_staging_ddl,),
        cleanup_directories=(staging_location,),
        move_after=move_after,
    )
