"""Conversion configs from flat job properties.

Each output format reads keys under its own prefix:

    nestedOrc.destination.dbName=events
    nestedOrc.destination.tableName=pageviews_orc
    nestedOrc.destination.dataPath=/data/events/pageviews_orc
    nestedOrc.destination.stagingTableName=pageviews_orc_stg
    nestedOrc.destination.tableProperties=orc.compress=ZLIB,owner=etl
    nestedOrc.hiveRuntime=hive.exec.dynamic.partition=true
    nestedOrc.clusterByList=id
    nestedOrc.numBuckets=8
    nestedOrc.rowLimit=1000
    nestedOrc.evolution.enabled=true
    nestedOrc.source.dataPathIdentifier=daily,hourly

A format is configured when its destination.tableName is set.
"""

from collections.abc import Mapping

from orcbridge._constants import DEFAULT_STAGING_SUFFIX
from orcbridge._exceptions import OrcConfigError
from orcbridge._types import ConversionConfig, OutputFormat

DESTINATION_DB_KEY = "destination.dbName"
DESTINATION_TABLE_KEY = "destination.tableName"
DESTINATION_DATA_PATH_KEY = "destination.dataPath"
DESTINATION_STAGING_TABLE_KEY = "destination.stagingTableName"
DESTINATION_TABLE_PROPERTIES_KEY = "destination.tableProperties"
RUNTIME_PROPERTIES_KEY = "hiveRuntime"
CLUSTER_BY_KEY = "clusterByList"
NUM_BUCKETS_KEY = "numBuckets"
ROW_LIMIT_KEY = "rowLimit"
EVOLUTION_ENABLED_KEY = "evolution.enabled"
SOURCE_DATA_PATH_IDENTIFIER_KEY = "source.dataPathIdentifier"

DEFAULT_DB = "default"

_TRUE = {"true", "yes", "1"}
_FALSE = {"false", "no", "0", ""}


def _split_list(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _split_properties(value: str | None, key: str) -> dict[str, str]:
    properties: dict[str, str] = {}
    for item in _split_list(value):
        name, sep, prop_value = item.partition("=")
        if not sep or not name.strip():
            raise OrcConfigError(f"{key} entries should be of the format key=value. Received: {item}")
        properties[name.strip()] = prop_value.strip()
    return properties


def _parse_int(value: str | None, key: str) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError as e:
        raise OrcConfigError(f"{key} must be an integer, got {value!r}") from e


def _parse_bool(value: str | None, key: str) -> bool:
    normalized = (value or "").strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise OrcConfigError(f"{key} must be a boolean, got {value!r}")


def load_conversion_config(properties: Mapping[str, str], output_format: OutputFormat) -> ConversionConfig | None:
    """Read the config of one output format, None if it is not configured.

    Raises:
        OrcConfigError: If a value is malformed or the data path is missing
    """
    prefix = output_format.config_prefix + "."

    def get(key: str) -> str | None:
        return properties.get(prefix + key)

    table = get(DESTINATION_TABLE_KEY)
    if not table:
        return None

    data_path = get(DESTINATION_DATA_PATH_KEY)
    if not data_path:
        raise OrcConfigError(f"{prefix}{DESTINATION_DATA_PATH_KEY} is required when {prefix}{DESTINATION_TABLE_KEY} is set")

    return ConversionConfig(
        destination_db=get(DESTINATION_DB_KEY) or DEFAULT_DB,
        destination_table=table,
        staging_table_prefix=get(DESTINATION_STAGING_TABLE_KEY) or f"{table}{DEFAULT_STAGING_SUFFIX}",
        destination_data_path=data_path.rstrip("/"),
        cluster_by=_split_list(get(CLUSTER_BY_KEY)),
        num_buckets=_parse_int(get(NUM_BUCKETS_KEY), prefix + NUM_BUCKETS_KEY),
        row_limit=_parse_int(get(ROW_LIMIT_KEY), prefix + ROW_LIMIT_KEY),
        table_properties=_split_properties(get(DESTINATION_TABLE_PROPERTIES_KEY), prefix + DESTINATION_TABLE_PROPERTIES_KEY),
        runtime_properties=_split_properties(get(RUNTIME_PROPERTIES_KEY), prefix + RUNTIME_PROPERTIES_KEY),
        evolution_enabled=_parse_bool(get(EVOLUTION_ENABLED_KEY), prefix + EVOLUTION_ENABLED_KEY),
        source_data_path_identifiers=_split_list(get(SOURCE_DATA_PATH_IDENTIFIER_KEY)),
    )


def load_conversion_configs(properties: Mapping[str, str]) -> dict[OutputFormat, ConversionConfig]:
    """Read the configs of every configured output format."""
    configs: dict[OutputFormat, ConversionConfig] = {}
    for output_format in OutputFormat:
        config = load_conversion_config(properties, output_format)
        if config is not None:
            configs[output_format] = config
    return configs
