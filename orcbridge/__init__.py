"""Avro to ORC conversion planning for catalog-registered tables.

orcbridge plans the statements that build an ORC staging copy of a table or
partition, evolve the destination table, and swap staged data into the live
table with a staged publish.
"""

from orcbridge._config import load_conversion_configs
from orcbridge._exceptions import (
    CatalogNotFoundError,
    OrcBridgeError,
    OrcCatalogError,
    OrcConfigError,
    OrcExecuteError,
    OrcFilesystemError,
    OrcPlanError,
    OrcPublishError,
)
from orcbridge._state import deserialize_publish_plan, serialize_publish_plan
from orcbridge._types import (
    ConversionConfig,
    ConversionEntity,
    ConversionPlan,
    OutputFormat,
    PublishPlan,
    SourcePartition,
    SourceTable,
)
from orcbridge.api import convert, convert_many
from orcbridge.catalog import Catalog, InMemoryCatalog, connect
from orcbridge.execute import CursorExecutor, Executor, execute
from orcbridge.filesystem import FileSystem, LocalFileSystem
from orcbridge.finalize import finalize
from orcbridge.plan import plan_conversion


def _get_version() -> str:
    """Get package version."""
    try:
        from importlib import metadata

        return metadata.version("orcbridge")
    except (ImportError, ModuleNotFoundError):
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    # High-level API
    "convert",
    "convert_many",
    # Low-level API (plan/execute/finalize)
    "plan_conversion",
    "execute",
    "finalize",
    "serialize_publish_plan",
    "deserialize_publish_plan",
    "load_conversion_configs",
    # Collaborators
    "Catalog",
    "InMemoryCatalog",
    "connect",
    "Executor",
    "CursorExecutor",
    "FileSystem",
    "LocalFileSystem",
    # Types
    "ConversionConfig",
    "ConversionEntity",
    "ConversionPlan",
    "OutputFormat",
    "PublishPlan",
    "SourcePartition",
    "SourceTable",
    # Errors
    "OrcBridgeError",
    "OrcPlanError",
    "OrcConfigError",
    "OrcCatalogError",
    "OrcFilesystemError",
    "CatalogNotFoundError",
    "OrcExecuteError",
    "OrcPublishError",
]
