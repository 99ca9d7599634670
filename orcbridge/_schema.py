"""Schema handling for Avro to ORC conversion.

Target schemas are pyarrow schemas. This module maps them to Hive column
definitions and, for the flattened ORC format, rewrites nested struct
fields into top-level columns.

Type mapping:

    int8 -> tinyint        float32 -> float        string -> string
    int16 -> smallint      float64 -> double       binary -> binary
    int32 -> int           bool -> boolean         date32 -> date
    int64 -> bigint        decimal128(p, s) -> decimal(p,s)
    timestamp -> timestamp
    list<T> -> array<T>    map<K, V> -> map<K,V>   struct<...> -> struct<name:T,...>
"""

from collections.abc import Callable

import pyarrow as pa
import pyarrow.types as pat

from orcbridge._constants import FLATTEN_SEPARATOR, FLATTEN_SOURCE_METADATA_KEY
from orcbridge._exceptions import OrcConfigError
from orcbridge._types import Column

_SIMPLE_TYPES: tuple[tuple[Callable[[pa.DataType], bool], str], ...] = (
    (pat.is_boolean, "boolean"),
    (pat.is_int8, "tinyint"),
    (pat.is_int16, "smallint"),
    (pat.is_int32, "int"),
    (pat.is_int64, "bigint"),
    (pat.is_uint8, "smallint"),
    (pat.is_uint16, "int"),
    (pat.is_uint32, "bigint"),
    (pat.is_uint64, "bigint"),
    (pat.is_float16, "float"),
    (pat.is_float32, "float"),
    (pat.is_float64, "double"),
    (pat.is_string, "string"),
    (pat.is_large_string, "string"),
    (pat.is_binary, "binary"),
    (pat.is_large_binary, "binary"),
    (pat.is_fixed_size_binary, "binary"),
    (pat.is_date, "date"),
    (pat.is_timestamp, "timestamp"),
    (pat.is_null, "void"),
)


def to_hive_type(data_type: pa.DataType) -> str:
    """Map a pyarrow type to a Hive type string.

    Raises:
        OrcConfigError: If the type has no Hive counterpart
    """
    for predicate, hive_type in _SIMPLE_TYPES:
        if predicate(data_type):
            return hive_type

    if pat.is_decimal(data_type):
        return f"decimal({data_type.precision},{data_type.scale})"

    if pat.is_dictionary(data_type):
        return to_hive_type(data_type.value_type)

    if pat.is_list(data_type) or pat.is_large_list(data_type) or pat.is_fixed_size_list(data_type):
        return f"array<{to_hive_type(data_type.value_type)}>"

    if pat.is_map(data_type):
        return f"map<{to_hive_type(data_type.key_type)},{to_hive_type(data_type.item_type)}>"

    if pat.is_struct(data_type):
        fields = ",".join(
            f"{data_type.field(i).name}:{to_hive_type(data_type.field(i).type)}" for i in range(data_type.num_fields)
        )
        return f"struct<{fields}>"

    raise OrcConfigError(f"Unsupported type for ORC conversion: {data_type}")


def to_hive_columns(schema: pa.Schema) -> tuple[Column, ...]:
    """Build Hive column definitions from a pyarrow schema, in schema order."""
    return tuple(Column(name=field.name, type=to_hive_type(field.type)) for field in schema)


def source_path(field: pa.Field) -> str:
    """Dotted source path of a (possibly flattened) target field."""
    metadata = field.metadata or {}
    path = metadata.get(FLATTEN_SOURCE_METADATA_KEY)
    if path is None:
        return field.name
    return path.decode("utf-8")


def flatten_schema(schema: pa.Schema) -> pa.Schema:
    """Flatten nested struct fields into top-level columns.

    A field ``address: struct<city: string>`` becomes ``address__city: string``.
    Each flattened field records its dotted source path (``address.city``)
    in field metadata so the mapping DML can select it from the source.
    A flattened column is nullable if it or any enclosing struct is.
    Lists and maps are kept as-is.
    """
    fields: list[pa.Field] = []
    for field in schema:
        fields.extend(_flatten_field(field, prefix=(), nullable=False))
    return pa.schema(fields)


def _flatten_field(field: pa.Field, prefix: tuple[str, ...], nullable: bool) -> list[pa.Field]:
    path = prefix + (field.name,)
    nullable = nullable or field.nullable

    if pat.is_struct(field.type):
        children: list[pa.Field] = []
        for i in range(field.type.num_fields):
            children.extend(_flatten_field(field.type.field(i), path, nullable))
        return children

    if not prefix:
        return [field]

    name = FLATTEN_SEPARATOR.join(path)
    metadata = {FLATTEN_SOURCE_METADATA_KEY: ".".join(path).encode("utf-8")}
    return [pa.field(name, field.type, nullable=nullable, metadata=metadata)]


def has_source_path(schema: pa.Schema, path: str) -> bool:
    """Check whether a dotted path resolves to a field of the source schema."""
    parts = path.split(".")
    current: pa.DataType | pa.Schema = schema

    for part in parts:
        if not (isinstance(current, pa.Schema) or pat.is_struct(current)):
            return False
        index = current.get_field_index(part)
        if index == -1:
            return False
        current = current.field(index).type

    return True
