"""Data types for orcbridge operations.

Three groups of types:

    Inputs:
        - SourceTable / SourcePartition: what is being converted
        - ConversionEntity: one work item, carries the staging statements
        - ConversionConfig: where and how to write the ORC table

    Catalog records:
        - TableMeta / PartitionMeta: destination state read from the catalog
        - DestinationMeta: optional table + partitions (absent on first run)

    Plans:
        - StagingPlan: statements that build and populate the staging table
        - PublishPlan: statements and directory moves that promote staging data
        - ConversionPlan: everything plan_conversion() produced for one entity
"""

import time
from enum import Enum
from typing import Self

import pyarrow as pa
from pydantic import BaseModel, Field, model_validator

from orcbridge._constants import PATH_SEPARATOR, PUBLISHED_TABLE_SUBDIRECTORY
from orcbridge._exceptions import OrcConfigError


def _now_ms() -> int:
    return int(time.time() * 1000)


class OutputFormat(str, Enum):
    """Supported destination ORC formats, keyed by their config prefix."""

    FLATTENED = "flattenedOrc"
    NESTED = "nestedOrc"

    @property
    def config_prefix(self) -> str:
        return self.value


# --- Input Types ---


class Column(BaseModel, frozen=True):
    """Named column with a Hive type string (e.g. "bigint", "array<string>")."""

    name: str
    type: str


class SourceTable(BaseModel, frozen=True, arbitrary_types_allowed=True):
    """Source (row-oriented) table being converted.

    Attributes:
        db: Source database name
        name: Source table name
        data_location: Table data directory
        record_schema: Record schema of the source data
    """

    db: str
    name: str
    data_location: str
    record_schema: pa.Schema

    @property
    def complete_name(self) -> str:
        return f"{self.db}@{self.name}"


class SourcePartition(BaseModel, frozen=True):
    """Source partition being converted.

    Attributes:
        name: Raw partition spec, e.g. "datepartition=2016-01-02" or
            "datepartition=2016-01-02/hour=00"
        values: Partition values in partition key order
        data_location: Partition data directory
        parameters: Catalog partition parameters
        column_types: Comma-separated partition column types, e.g. "string,int"
    """

    name: str
    values: tuple[str, ...]
    data_location: str
    parameters: dict[str, str] = {}
    column_types: str = ""


class ConversionEntity(BaseModel, frozen=True):
    """One conversion work item: a table, optionally narrowed to a partition.

    Planning never mutates an entity; plan_conversion() returns a copy with
    the staging statements appended.

    Attributes:
        table: Source table
        partition: Source partition, None for snapshot (non-partitioned) tables
        statements: Staging statements, in execution order
        created_at: Work item creation time in epoch milliseconds
    """

    table: SourceTable
    partition: SourcePartition | None = None
    statements: tuple[str, ...] = ()
    created_at: int = Field(default_factory=_now_ms)

    @property
    def is_partitioned(self) -> bool:
        return self.partition is not None

    @property
    def complete_name(self) -> str:
        if self.partition is None:
            return self.table.complete_name
        return f"{self.table.complete_name}@{self.partition.name}"


class ConversionConfig(BaseModel, frozen=True):
    """Destination settings for one output format.

    Attributes:
        destination_db: ORC table database
        destination_table: ORC table name
        staging_table_prefix: Prefix for per-run staging table names
        destination_data_path: Root directory of ORC table data
        cluster_by: Columns to cluster (bucket) by
        num_buckets: Bucket count, required when cluster_by is set
        row_limit: Cap on rows copied into staging
        table_properties: TBLPROPERTIES of created tables
        runtime_properties: SET statements issued before staging DDL
        evolution_enabled: Evolve an existing destination table additively
        source_data_path_identifiers: Hints (e.g. "hourly", "daily") used to
            prefix partition directory names
    """

    destination_db: str
    destination_table: str
    staging_table_prefix: str
    destination_data_path: str
    cluster_by: tuple[str, ...] = ()
    num_buckets: int | None = None
    row_limit: int | None = None
    table_properties: dict[str, str] = {}
    runtime_properties: dict[str, str] = {}
    evolution_enabled: bool = False
    source_data_path_identifiers: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_bucketing(self) -> Self:
        if self.cluster_by and self.num_buckets is None:
            raise OrcConfigError("num_buckets is required when cluster_by is set")
        if self.num_buckets is not None and self.num_buckets <= 0:
            raise OrcConfigError(f"num_buckets must be positive, got {self.num_buckets}")
        if self.row_limit is not None and self.row_limit <= 0:
            raise OrcConfigError(f"row_limit must be positive, got {self.row_limit}")
        return self

    @property
    def final_data_location(self) -> str:
        """Published data location: <destination_data_path>/final."""
        return f"{self.destination_data_path}{PATH_SEPARATOR}{PUBLISHED_TABLE_SUBDIRECTORY}"

    def staging_data_location(self, staging_table: str) -> str:
        """Staging data location: <destination_data_path>/<staging_table>."""
        return f"{self.destination_data_path}{PATH_SEPARATOR}{staging_table}"


# --- Catalog Types ---


class TableMeta(BaseModel, frozen=True):
    """Table record as stored in the catalog."""

    db: str
    name: str
    columns: tuple[Column, ...] = ()
    partition_keys: tuple[Column, ...] = ()
    location: str | None = None
    parameters: dict[str, str] = {}

    @property
    def is_partitioned(self) -> bool:
        return bool(self.partition_keys)


class PartitionMeta(BaseModel, frozen=True):
    """Partition record as stored in the catalog."""

    values: tuple[str, ...]
    location: str | None = None
    parameters: dict[str, str] = {}


class DestinationMeta(BaseModel, frozen=True):
    """Existing destination table and its partitions.

    Both fields are None when the destination does not exist yet.
    partitions is None for a non-partitioned destination.
    """

    table: TableMeta | None = None
    partitions: tuple[PartitionMeta, ...] | None = None

    @property
    def exists(self) -> bool:
        return self.table is not None


# --- Plan Types ---


class StagingPlan(BaseModel, frozen=True):
    """Statements that create and populate the staging table.

    Attributes:
        statements: SET, CREATE TABLE, ADD PARTITION and INSERT statements, in order
        columns: Staging table columns, aligned with the destination if it exists
    """

    statements: tuple[str, ...]
    columns: tuple[Column, ...] = ()


class PublishPlan(BaseModel, frozen=True):
    """Statements and directory moves that promote staging data.

    Workflow: publish_statements[:move_after] → publish_directories →
    publish_statements[move_after:] → cleanup_statements → cleanup_directories

    Attributes:
        publish_statements: DDL run against the final table
        publish_directories: Staging → final directory moves, in execution order
        cleanup_statements: Staging teardown DDL
        cleanup_directories: Directories deleted after publishing
        move_after: Number of publish statements executed before directory moves
    """

    publish_statements: tuple[str, ...] = ()
    publish_directories: dict[str, str] = {}
    cleanup_statements: tuple[str, ...] = ()
    cleanup_directories: tuple[str, ...] = ()
    move_after: int = 0

    @model_validator(mode="after")
    def _check_move_after(self) -> Self:
        if not 0 <= self.move_after <= len(self.publish_statements):
            raise OrcConfigError(
                f"move_after must be within 0..{len(self.publish_statements)}, got {self.move_after}"
            )
        return self


class ConversionPlan(BaseModel, frozen=True):
    """Result of plan_conversion().

    Attributes:
        entity: Entity with staging statements appended
        publish: Publish plan, None when the output format is not configured
        staging_table: Staging table name for this run
        evolution_statements: Additive DDL applied to an existing destination
    """

    entity: ConversionEntity
    publish: PublishPlan | None = None
    staging_table: str | None = None
    evolution_statements: tuple[str, ...] = ()
