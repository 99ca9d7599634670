"""Execute staging statements. The statement engine itself is external.

Statements run sequentially and execution stops at the first failure.
Artifacts created by earlier statements are left in place.
"""

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from orcbridge._exceptions import OrcExecuteError
from orcbridge._logging import get_logger, summarize
from orcbridge._types import ConversionEntity

logger = get_logger(__name__)


@runtime_checkable
class Executor(Protocol):
    """Runs one HiveQL statement, raising on failure."""

    def execute(self, statement: str) -> None: ...


class CursorExecutor:
    """Executor over a PEP 249 connection (e.g. a PyHive or JDBC bridge connection)."""

    def __init__(self, connection: Any) -> None:
        self._connection = connection

    def execute(self, statement: str) -> None:
        cursor = self._connection.cursor()
        try:
            cursor.execute(statement)
        finally:
            cursor.close()


def execute_statement(executor: Executor, statement: str) -> None:
    """Execute one statement.

    Raises:
        OrcExecuteError: If the executor fails
    """
    try:
        executor.execute(statement)
    except OrcExecuteError:
        raise
    except Exception as e:
        raise OrcExecuteError(f"Failed: {summarize(statement)}: {e}", statement=statement) from e


def execute(entity: ConversionEntity, executor: Executor, statements: Iterable[str] | None = None) -> None:
    """Execute an entity's staging statements in order.

    Args:
        entity: Planned entity (see plan_conversion())
        executor: Statement executor
        statements: Override of entity.statements, e.g. wrapped in a progress bar

    Raises:
        OrcExecuteError: On the first failing statement

    Example:
        >>> result = plan_conversion(entity, schema, configs, OutputFormat.NESTED, catalog, fs)
        >>> execute(result.entity, executor)
    """
    for statement in entity.statements if statements is None else statements:
        logger.debug(f"Executing: {statement}")
        execute_statement(executor, statement)

    logger.info(f"Executed staging statements for {entity.complete_name}")
