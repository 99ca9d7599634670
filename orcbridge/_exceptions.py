"""Exception classes for orcbridge operations."""


class OrcBridgeError(Exception):
    """Base exception for all orcbridge errors."""

    pass


class OrcPlanError(OrcBridgeError):
    """Planning failed before any statement was queued.

    No cleanup needed - the planner has no side effects beyond creating
    the destination data directory.
    """

    pass


class OrcConfigError(OrcPlanError):
    """Configuration is malformed.

    Raised when:
    - Partition info and partition types lists differ in size
    - Only one of partition info / partition types is present
    - A partition token is not of the form key=value
    - A conversion config property has an invalid value
    """

    pass


class OrcCatalogError(OrcPlanError):
    """Catalog lookup failed for a reason other than a missing table.

    Raised when:
    - The catalog cannot be reached or returns a transport error
    - connect() cannot build a catalog from the given settings
    """

    pass


class OrcFilesystemError(OrcPlanError):
    """Destination data directory could not be created or its permission set."""

    pass


class CatalogNotFoundError(OrcBridgeError):
    """Requested table does not exist in the catalog.

    Expected during first-time conversions. The orchestrator treats it as
    "destination absent", never as a failure.
    """

    pass


class OrcExecuteError(OrcBridgeError):
    """A staging statement failed during execution.

    Raised when:
    - The executor rejects a DDL/DML statement
    - The mapping DML hits an incompatible destination schema

    Staging artifacts already created are left in place.
    """

    def __init__(self, message: str, statement: str | None = None) -> None:
        super().__init__(message)
        self.statement = statement


class OrcPublishError(OrcBridgeError):
    """Publish or cleanup failed after staging completed.

    Raised when:
    - A publish or cleanup statement fails
    - A directory move or delete fails

    There is no rollback: moved directories stay where they are and
    staging artifacts remain for operator inspection.
    """

    pass
