"""Catalog access for destination table metadata.

The catalog (a Hive metastore or similar) is an external service. This
module defines the interface the planner consumes, an explicit connect()
factory, and an in-memory implementation backed by a JSON document.

JSON document layout:

    {
        "tables": [
            {
                "db": "events",
                "name": "pageviews_orc",
                "columns": [{"name": "id", "type": "bigint"}],
                "partition_keys": [{"name": "datepartition", "type": "string"}],
                "location": "/data/pageviews_orc/final",
                "partitions": [{"values": ["2016-01-01"], "location": "..."}]
            }
        ]
    }
"""

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from orcbridge._exceptions import CatalogNotFoundError, OrcCatalogError
from orcbridge._logging import get_logger
from orcbridge._types import DestinationMeta, PartitionMeta, TableMeta

logger = get_logger(__name__)

CATALOG_PATH_KEY = "catalog.path"


@runtime_checkable
class Catalog(Protocol):
    """Read-only view of table and partition metadata."""

    def get_table(self, db: str, table: str) -> TableMeta:
        """Return table metadata.

        Raises:
            CatalogNotFoundError: If the table does not exist
        """
        ...

    def get_partitions(self, table: TableMeta) -> list[PartitionMeta]:
        """Return all partitions of a partitioned table."""
        ...


class InMemoryCatalog:
    """Catalog held in process memory."""

    def __init__(
        self,
        tables: Iterable[TableMeta] = (),
        partitions: Mapping[tuple[str, str], Iterable[PartitionMeta]] | None = None,
    ) -> None:
        self._tables: dict[tuple[str, str], TableMeta] = {(t.db, t.name): t for t in tables}
        self._partitions: dict[tuple[str, str], list[PartitionMeta]] = {
            key: list(parts) for key, parts in (partitions or {}).items()
        }

    def add_table(self, table: TableMeta, partitions: Iterable[PartitionMeta] = ()) -> None:
        self._tables[(table.db, table.name)] = table
        self._partitions[(table.db, table.name)] = list(partitions)

    def get_table(self, db: str, table: str) -> TableMeta:
        try:
            return self._tables[(db, table)]
        except KeyError:
            raise CatalogNotFoundError(f"Table not found: {db}.{table}") from None

    def get_partitions(self, table: TableMeta) -> list[PartitionMeta]:
        return list(self._partitions.get((table.db, table.name), []))


def connect(settings: Mapping[str, Any]) -> Catalog:
    """Build a catalog from settings.

    Called once per orchestrator lifetime. With no "catalog.path" an empty
    in-memory catalog is returned; otherwise the JSON document at that path
    is loaded.

    Raises:
        OrcCatalogError: If the document is missing or malformed
    """
    path = settings.get(CATALOG_PATH_KEY)
    if not path:
        return InMemoryCatalog()

    path = Path(path)
    try:
        document: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise OrcCatalogError(f"Failed to load catalog: {path}: {e}") from e

    catalog = InMemoryCatalog()
    try:
        for entry in document.get("tables", []):
            entry = dict(entry)
            partitions = [PartitionMeta.model_validate(p) for p in entry.pop("partitions", [])]
            catalog.add_table(TableMeta.model_validate(entry), partitions)
    except (ValidationError, TypeError, AttributeError) as e:
        raise OrcCatalogError(f"Invalid catalog document: {path}: {e}") from e

    logger.debug(f"Loaded catalog from {path}")
    return catalog


def load_destination_meta(catalog: Catalog, db: str, table: str) -> DestinationMeta:
    """Look up the destination table and, if partitioned, its partitions.

    A missing table is the expected first-run state and yields an empty
    DestinationMeta. Any other failure aborts planning.

    Raises:
        OrcCatalogError: If the lookup fails for any reason other than not-found
    """
    try:
        table_meta = catalog.get_table(db, table)
        partitions = None
        if table_meta.is_partitioned:
            partitions = tuple(catalog.get_partitions(table_meta))
    except CatalogNotFoundError:
        logger.debug(f"Destination table {db}.{table} does not exist")
        return DestinationMeta()
    except OrcCatalogError:
        raise
    except Exception as e:
        raise OrcCatalogError(f"Could not fetch destination table metadata: {db}.{table}: {e}") from e

    return DestinationMeta(table=table_meta, partitions=partitions)
