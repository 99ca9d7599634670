"""Constants for orcbridge operations.

Metastore keys, runtime tracking keys, and location templates shared by the
staging and publish planners.
"""

__all__ = [
    "REPLACED_PARTITIONS_KEY",
    "DATASET_URN_KEY",
    "PARTITION_NAME_KEY",
    "WORKUNIT_CREATE_TIME_KEY",
    "PUBLISHED_TABLE_SUBDIRECTORY",
    "PATH_SEPARATOR",
    "PARTITION_SEPARATOR",
    "PARTITION_VALUE_SEPARATOR",
    "PARTITION_KV_SEPARATOR",
    "FLATTEN_SEPARATOR",
    "FLATTEN_SOURCE_METADATA_KEY",
    "STORAGE_FORMAT",
    "STAGING_TABLE_TEMPLATE",
    "DEFAULT_STAGING_SUFFIX",
    "STATE_PUBLISH_QUERIES",
    "STATE_PUBLISH_DIRECTORIES",
    "STATE_CLEANUP_QUERIES",
    "STATE_CLEANUP_DIRECTORIES",
    "STATE_MOVE_AFTER",
]


REPLACED_PARTITIONS_KEY = "gobblin.replaced.partitions"
"""Partition parameter listing the partitions it supersedes (e.g. hourly partitions of a daily one)."""

DATASET_URN_KEY = "orcbridge.datasetUrn"
PARTITION_NAME_KEY = "orcbridge.partitionName"
WORKUNIT_CREATE_TIME_KEY = "orcbridge.workunitCreateTime"

PUBLISHED_TABLE_SUBDIRECTORY = "final"
"""Subdirectory of the destination data path holding published data."""

PATH_SEPARATOR = "/"

PARTITION_SEPARATOR = "|"
"""Separates partitions in an encoded replaced-partitions string."""

PARTITION_VALUE_SEPARATOR = ","
"""Separates key=value tokens of one partition."""

PARTITION_KV_SEPARATOR = "="

FLATTEN_SEPARATOR = "__"
"""Joins nested field names into a flattened column name."""

FLATTEN_SOURCE_METADATA_KEY = b"orcbridge:source_path"
"""Field metadata key recording the dotted source path of a flattened column."""

STORAGE_FORMAT = "ORC"

STAGING_TABLE_TEMPLATE = "{prefix}_{qualifier}"
"""Template for per-run staging table names."""

DEFAULT_STAGING_SUFFIX = "_staging"

STATE_PUBLISH_QUERIES = "publish.queries"
STATE_PUBLISH_DIRECTORIES = "publish.directories"
STATE_CLEANUP_QUERIES = "cleanup.queries"
STATE_CLEANUP_DIRECTORIES = "cleanup.directories"
STATE_MOVE_AFTER = "publish.moveAfter"
