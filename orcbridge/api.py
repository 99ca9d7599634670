"""High-level convenience API for orcbridge.

Two operations:
    convert: plan, stage and publish one entity
    convert_many: the same for many entities (e.g. partitions of one table)

Both run the full two-phase sequence in-process. Use plan_conversion(),
execute() and finalize() directly to run the phases separately.
"""

import random
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed

import pyarrow as pa
from tqdm import tqdm

from orcbridge._logging import get_logger
from orcbridge._types import ConversionConfig, ConversionEntity, ConversionPlan, OutputFormat
from orcbridge.catalog import Catalog
from orcbridge.execute import Executor, execute
from orcbridge.filesystem import FileSystem
from orcbridge.finalize import finalize
from orcbridge.plan import plan_conversion

logger = get_logger(__name__)


def convert(
    entity: ConversionEntity,
    target_schema: pa.Schema,
    configs: Mapping[OutputFormat, ConversionConfig],
    output_format: OutputFormat,
    catalog: Catalog,
    executor: Executor,
    filesystem: FileSystem,
    progress: bool = False,
    rng: random.Random | None = None,
) -> ConversionPlan:
    """Convert one entity into the given ORC format.

    Args:
        entity: Source table / partition
        target_schema: Output record schema
        configs: Conversion configs keyed by output format
        output_format: Format to convert to
        catalog: Destination metadata source
        executor: Statement executor
        filesystem: Filesystem holding the destination data
        progress: Show progress bar over staging statements
        rng: Random source for the staging table name

    Returns:
        The executed ConversionPlan (publish is None if the format is not configured)

    Example:
        >>> configs = load_conversion_configs(job_properties)
        >>> orcbridge.convert(entity, schema, configs, OutputFormat.NESTED, catalog, executor, LocalFileSystem())
    """
    plan = plan_conversion(entity, target_schema, configs, output_format, catalog, filesystem, rng=rng)
    if plan.publish is None:
        return plan

    statements = plan.entity.statements
    execute(
        plan.entity,
        executor,
        statements=tqdm(statements, desc="Staging", unit="stmt") if progress else statements,
    )
    finalize(plan.publish, executor, filesystem)
    return plan


def convert_many(
    entities: Sequence[ConversionEntity],
    target_schema: pa.Schema,
    configs: Mapping[OutputFormat, ConversionConfig],
    output_format: OutputFormat,
    catalog: Catalog,
    executor: Executor,
    filesystem: FileSystem,
    workers: int = 1,
    progress: bool = True,
) -> list[ConversionPlan]:
    """Convert several entities with optional parallelization.

    Entities must target distinct final partitions: concurrent publishes of
    the same partition are not coordinated.

    Args:
        workers: Number of parallel workers (1 = sequential, >1 = threaded)
        progress: Show progress bar over entities

    Returns:
        Plans in the order of entities

    Raises:
        OrcBridgeError: The first failure, once running conversions finish
    """
    if not entities:
        return []

    def run(entity: ConversionEntity) -> ConversionPlan:
        return convert(entity, target_schema, configs, output_format, catalog, executor, filesystem)

    if workers <= 1:
        entity_iter = tqdm(entities, desc="Converting", unit="entity") if progress else entities
        return [run(entity) for entity in entity_iter]

    results: dict[int, ConversionPlan] = {}
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(run, entity): i for i, entity in enumerate(entities)}
        future_iter = (
            tqdm(as_completed(futures), desc="Converting", unit="entity", total=len(futures))
            if progress
            else as_completed(futures)
        )
        for future in future_iter:
            results[futures[future]] = future.result()

    logger.info(f"Converted {len(results)} entities")
    return [results[i] for i in range(len(entities))]
