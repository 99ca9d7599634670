"""Planning entry point for orcbridge conversions.

Plans compute what needs to be done without executing any statement.
The caller decides when to run the staging statements (execute()) and
the publish plan (finalize()), in one process or as decoupled phases.
"""

import random
import time
from collections.abc import Mapping

import pyarrow as pa

from orcbridge._constants import STAGING_TABLE_TEMPLATE
from orcbridge._exceptions import OrcPlanError
from orcbridge._logging import get_logger
from orcbridge._partitions import partition_info, replaced_partitions
from orcbridge._schema import flatten_schema, to_hive_columns
from orcbridge._types import ConversionConfig, ConversionEntity, ConversionPlan, OutputFormat
from orcbridge.catalog import Catalog, load_destination_meta
from orcbridge.evolution import plan_evolution
from orcbridge.filesystem import FileSystem, create_destination_dir
from orcbridge.publish import build_publish_plan
from orcbridge.staging import build_staging_plan

logger = get_logger(__name__)


def staging_table_name(prefix: str, now_ms: int | None = None, rng: random.Random | None = None) -> str:
    """Per-run staging table name: <prefix>_<epoch ms><random digit>.

    Unique enough to keep concurrent conversions of the same format apart;
    not guarded against deliberate collisions.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    digit = (rng or random).randrange(10)
    return STAGING_TABLE_TEMPLATE.format(prefix=prefix, qualifier=f"{now_ms}{digit}")


def plan_conversion(
    entity: ConversionEntity,
    target_schema: pa.Schema,
    configs: Mapping[OutputFormat, ConversionConfig],
    output_format: OutputFormat,
    catalog: Catalog,
    filesystem: FileSystem,
    now_ms: int | None = None,
    rng: random.Random | None = None,
) -> ConversionPlan:
    """Plan the conversion of one entity into the given ORC format.

    Args:
        entity: Source table / partition to convert
        target_schema: Output record schema
        configs: Conversion configs keyed by output format
        output_format: Format to plan for
        catalog: Destination metadata source
        filesystem: Used to create the destination data directory
        now_ms: Clock override for the staging table name
        rng: Random source for the staging table name

    Returns:
        ConversionPlan. When output_format has no config the entity is
        returned unchanged and publish is None.

    Raises:
        OrcConfigError: Malformed partition spec or replaced partitions
        OrcCatalogError: Destination lookup failed
        OrcFilesystemError: Destination directory could not be created
    """
    config = configs.get(output_format)
    if config is None:
        logger.debug(f"No {output_format.config_prefix} conversion configured for {entity.complete_name}")
        return ConversionPlan(entity=entity)

    if not isinstance(target_schema, pa.Schema) or len(target_schema) == 0:
        raise OrcPlanError(f"Target schema must be a non-empty pyarrow schema for {entity.complete_name}")

    if output_format is OutputFormat.FLATTENED:
        target_schema = flatten_schema(target_schema)

    # Validate everything parsed from the entity before touching the filesystem
    partition_info(entity.partition)
    replaced_partitions(entity.partition)
    target_columns = to_hive_columns(target_schema)

    staging_table = staging_table_name(config.staging_table_prefix, now_ms, rng)
    destination = load_destination_meta(catalog, config.destination_db, config.destination_table)

    create_destination_dir(filesystem, config.destination_data_path, entity.table.data_location)

    staging = build_staging_plan(entity, target_schema, config, staging_table, destination)

    evolution = plan_evolution(
        target_columns,
        destination,
        config.evolution_enabled,
        config.destination_db,
        config.destination_table,
    )
    logger.debug(f"Evolve final table DDLs: {list(evolution)}")

    publish = build_publish_plan(entity, target_schema, config, staging_table, destination, evolution)
    logger.debug(f"Publish plan: {publish}")

    planned = entity.model_copy(update={"statements": entity.statements + staging.statements})
    logger.info(
        f"Planned {output_format.config_prefix} conversion of {entity.complete_name} "
        f"into {config.destination_db}.{config.destination_table} via {staging_table}"
    )

    return ConversionPlan(
        entity=planned,
        publish=publish,
        staging_table=staging_table,
        evolution_statements=evolution,
    )
