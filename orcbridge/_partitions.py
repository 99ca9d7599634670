"""Partition helpers: spec parsing, directory naming, replaced-partition codec.

Replaced partitions are stored on a partition under REPLACED_PARTITIONS_KEY
so that a coarser partition (daily) can retire the finer ones (hourly) it
supersedes when it is published:

    "datepartition=2016-01-02-00|datepartition=2016-01-02-01"

Partitions are separated by "|", key=value tokens of one partition by ",".
"""

import re
from collections.abc import Mapping, Sequence

from orcbridge._constants import (
    PARTITION_KV_SEPARATOR,
    PARTITION_SEPARATOR,
    PARTITION_VALUE_SEPARATOR,
    REPLACED_PARTITIONS_KEY,
)
from orcbridge._exceptions import OrcConfigError
from orcbridge._types import SourcePartition

_SPEC_SPLIT = re.compile(r"[/,]")


def _split(value: str, pattern: str | re.Pattern[str]) -> list[str]:
    """Split, trim and drop empty parts."""
    parts = pattern.split(value) if isinstance(pattern, re.Pattern) else value.split(pattern)
    return [p.strip() for p in parts if p.strip()]


def _parse_token(token: str) -> tuple[str, str]:
    parts = _split(token, PARTITION_KV_SEPARATOR)
    if len(parts) != 2:
        raise OrcConfigError(f"Partition details should be of the format partitionName=partitionValue. Received: {token}")
    return parts[0], parts[1]


def encode_partitions(partitions: Sequence[Mapping[str, str]]) -> str:
    """Encode partitions as "k=v,k2=v2|k=v,k2=v2"."""
    return PARTITION_SEPARATOR.join(
        PARTITION_VALUE_SEPARATOR.join(f"{k}{PARTITION_KV_SEPARATOR}{v}" for k, v in partition.items())
        for partition in partitions
    )


def decode_partitions(
    encoded: str | None,
    partition_keys: Sequence[str],
    current_values: Sequence[str],
) -> list[dict[str, str]]:
    """Decode a replaced-partitions string into key -> value mappings.

    Tokens are bound to partition_keys by position, one group of
    len(partition_keys) tokens per partition. A group whose values equal
    current_values is skipped: a partition never drops itself.

    Args:
        encoded: Encoded string, None or blank means no partitions
        partition_keys: Declared partition keys, in order
        current_values: Values of the partition being converted

    Returns:
        One mapping per replaced partition, in encoded order

    Raises:
        OrcConfigError: If a token is not key=value or a group is incomplete
    """
    if not encoded or not encoded.strip():
        return []

    if not partition_keys:
        raise OrcConfigError(f"Cannot decode replaced partitions without partition keys: {encoded}")

    width = len(partition_keys)
    current = tuple(current_values)
    decoded: list[dict[str, str]] = []

    for segment in _split(encoded, PARTITION_SEPARATOR):
        values = [_parse_token(token)[1] for token in _split(segment, PARTITION_VALUE_SEPARATOR)]

        if len(values) % width != 0:
            raise OrcConfigError(
                f"Replaced partition {segment!r} does not match partition keys {list(partition_keys)}"
            )

        for start in range(0, len(values), width):
            group = tuple(values[start : start + width])
            if group == current:
                continue
            decoded.append(dict(zip(partition_keys, group)))

    return decoded


def partition_info(partition: SourcePartition | None) -> tuple[dict[str, str], dict[str, str]]:
    """Parse a partition spec and its column types.

    Returns:
        (ddl_info, dml_info): partition key -> Hive type, partition key -> value.
        Both empty for snapshot tables.

    Raises:
        OrcConfigError: If only one of spec / types is present, their sizes
            differ, or a token is not key=value
    """
    ddl_info: dict[str, str] = {}
    dml_info: dict[str, str] = {}

    if partition is None:
        return ddl_info, dml_info

    info = partition.name.strip()
    types = partition.column_types.strip()

    if not info and not types:
        return ddl_info, dml_info

    if not info or not types:
        raise OrcConfigError("Both partitions info and partitions types must be present, if one is specified")

    tokens = _split(info, _SPEC_SPLIT)
    type_list = _split(types, PARTITION_VALUE_SEPARATOR)

    if len(tokens) != len(type_list):
        raise OrcConfigError(
            f"Partitions info and partitions types lists should be of the same size: {info!r} vs {types!r}"
        )

    for token, partition_type in zip(tokens, type_list):
        key, value = _parse_token(token)
        ddl_info[key] = partition_type
        dml_info[key] = value

    return ddl_info, dml_info


def replaced_partitions(partition: SourcePartition | None) -> list[dict[str, str]]:
    """Partitions superseded by this partition, excluding itself."""
    if partition is None:
        return []

    encoded = partition.parameters.get(REPLACED_PARTITIONS_KEY)
    if not encoded or not encoded.strip():
        return []

    keys = [_parse_token(token)[0] for token in _split(partition.name, _SPEC_SPLIT)]
    return decode_partitions(encoded, keys, partition.values)


def partition_dir_name(partition: SourcePartition | None, hints: Sequence[str] | None) -> str:
    """Directory name for a partition: [hint_]...<partition spec>.

    Every hint found (case-insensitively) in the partition's data location
    contributes "<hint>_" in hint order, so hourly and daily partitions with
    the same timestamp land in different directories:
    "hourly_datepartition=2016-01-01-00" vs "daily_datepartition=2016-01-01-00".

    Returns "" for snapshot tables.
    """
    if partition is None:
        return ""

    location = partition.data_location.lower()
    prefix = "".join(f"{hint.lower()}_" for hint in hints or () if hint.lower() in location)
    return prefix + partition.name
