"""HiveQL statement generation.

Pure string builders - nothing here talks to a catalog or an executor.
Identifiers are backtick-quoted, literals single-quoted.
"""

from collections.abc import Mapping, Sequence

from orcbridge._constants import STORAGE_FORMAT
from orcbridge._types import Column

INDENT = "  "


def quote_identifier(name: str) -> str:
    """Backtick-quote an identifier, doubling embedded backticks."""
    return "`" + name.replace("`", "``") + "`"


def quote_literal(value: str) -> str:
    """Single-quote a string literal."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def qualified_name(db: str, table: str) -> str:
    return f"{quote_identifier(db)}.{quote_identifier(table)}"


def set_statement(key: str, value: object) -> str:
    return f"SET {key}={value}"


def _column_list(columns: Sequence[Column]) -> str:
    return ",\n".join(f"{INDENT}{quote_identifier(c.name)} {c.type}" for c in columns)


def _partition_spec(partition_values: Mapping[str, str]) -> str:
    return ", ".join(f"{quote_identifier(k)}={quote_literal(v)}" for k, v in partition_values.items())


def create_table_ddl(
    db: str,
    table: str,
    columns: Sequence[Column],
    location: str,
    partition_columns: Mapping[str, str] | None = None,
    cluster_by: Sequence[str] = (),
    num_buckets: int | None = None,
    table_properties: Mapping[str, str] | None = None,
) -> str:
    """Build a CREATE EXTERNAL TABLE statement for an ORC table.

    Args:
        db: Database name
        table: Table name
        columns: Data columns, in table order
        location: Table data location
        partition_columns: Partition column name -> Hive type
        cluster_by: Bucketing columns
        num_buckets: Bucket count, used together with cluster_by
        table_properties: TBLPROPERTIES

    Returns:
        DDL statement
    """
    lines = [
        f"CREATE EXTERNAL TABLE IF NOT EXISTS {qualified_name(db, table)} (",
        _column_list(columns) + ")",
    ]

    if partition_columns:
        partitions = ", ".join(f"{quote_identifier(k)} {v}" for k, v in partition_columns.items())
        lines.append(f"PARTITIONED BY ({partitions})")

    if cluster_by and num_buckets is not None:
        clustered = ", ".join(quote_identifier(c) for c in cluster_by)
        lines.append(f"CLUSTERED BY ({clustered}) INTO {num_buckets} BUCKETS")

    lines.append(f"STORED AS {STORAGE_FORMAT}")
    lines.append(f"LOCATION {quote_literal(location)}")

    if table_properties:
        props = ", ".join(f"{quote_literal(k)}={quote_literal(v)}" for k, v in table_properties.items())
        lines.append(f"TBLPROPERTIES ({props})")

    return "\n".join(lines)


def create_partition_ddl(db: str, table: str, location: str, partition_values: Mapping[str, str]) -> str:
    return (
        f"ALTER TABLE {qualified_name(db, table)} ADD IF NOT EXISTS "
        f"PARTITION ({_partition_spec(partition_values)}) LOCATION {quote_literal(location)}"
    )


def drop_partition_ddl(db: str, table: str, partition_values: Mapping[str, str]) -> str:
    return f"ALTER TABLE {qualified_name(db, table)} DROP IF EXISTS PARTITION ({_partition_spec(partition_values)})"


def drop_partitions_ddl(db: str, table: str, partitions: Sequence[Mapping[str, str]]) -> list[str]:
    """One DROP IF EXISTS PARTITION statement per partition, empty partitions skipped."""
    return [drop_partition_ddl(db, table, p) for p in partitions if p]


def drop_table_ddl(db: str, table: str) -> str:
    return f"DROP TABLE IF EXISTS {qualified_name(db, table)}"


def add_columns_ddl(db: str, table: str, columns: Sequence[Column]) -> str:
    return f"ALTER TABLE {qualified_name(db, table)} ADD COLUMNS (\n{_column_list(columns)})"


def source_expression(path: str) -> str:
    """Quote a dotted source path: a.b -> `a`.`b`."""
    return ".".join(quote_identifier(part) for part in path.split("."))


def insert_select_dml(
    source_db: str,
    source_table: str,
    target_db: str,
    target_table: str,
    select_list: Sequence[str],
    partition_values: Mapping[str, str] | None = None,
    row_limit: int | None = None,
) -> str:
    """Build INSERT OVERWRITE ... SELECT ... FROM source.

    The source is filtered to the partition being converted when
    partition_values is given.
    """
    lines = [f"INSERT OVERWRITE TABLE {qualified_name(target_db, target_table)}"]
    if partition_values:
        lines.append(f"PARTITION ({_partition_spec(partition_values)})")

    lines.append("SELECT")
    lines.append(",\n".join(f"{INDENT}{expr}" for expr in select_list))
    lines.append(f"FROM {qualified_name(source_db, source_table)}")

    if partition_values:
        predicate = " AND ".join(f"{quote_identifier(k)}={quote_literal(v)}" for k, v in partition_values.items())
        lines.append(f"WHERE {predicate}")

    if row_limit is not None:
        lines.append(f"LIMIT {row_limit}")

    return "\n".join(lines)
