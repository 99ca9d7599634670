"""Additive schema evolution of an existing destination table.

    destination absent              -> no-op, publish creates the table
    destination present, disabled   -> no-op, staging follows the destination
                                       schema and incompatible data fails in
                                       the mapping DML at execution time
    destination present, enabled    -> ALTER TABLE ... ADD COLUMNS for target
                                       columns missing from the destination

Columns are never dropped or retyped. Names compare case-insensitively, as
Hive does.
"""

from collections.abc import Sequence

from orcbridge._logging import get_logger
from orcbridge._queries import add_columns_ddl
from orcbridge._types import Column, DestinationMeta

logger = get_logger(__name__)


def missing_columns(target_columns: Sequence[Column], existing_columns: Sequence[Column]) -> list[Column]:
    """Target columns absent (by name) from existing_columns, in target order."""
    existing = {c.name.lower() for c in existing_columns}
    return [c for c in target_columns if c.name.lower() not in existing]


def resolve_columns(
    target_columns: Sequence[Column],
    destination: DestinationMeta,
    evolution_enabled: bool,
) -> tuple[Column, ...]:
    """Columns of a table that must line up with the destination.

    Existing destination columns keep their order and type; with evolution
    enabled the new target columns follow them.
    """
    if destination.table is None:
        return tuple(target_columns)

    existing = tuple(destination.table.columns)
    if not evolution_enabled:
        return existing

    return existing + tuple(missing_columns(target_columns, existing))


def plan_evolution(
    target_columns: Sequence[Column],
    destination: DestinationMeta,
    evolution_enabled: bool,
    db: str,
    table: str,
) -> tuple[str, ...]:
    """Evolution DDL for the destination table.

    Returns:
        () or a single ADD COLUMNS statement
    """
    if destination.table is None or not evolution_enabled:
        return ()

    new_columns = missing_columns(target_columns, destination.table.columns)
    if not new_columns:
        return ()

    logger.info(f"Evolving {db}.{table}: adding {[c.name for c in new_columns]}")
    return (add_columns_ddl(db, table, new_columns),)
