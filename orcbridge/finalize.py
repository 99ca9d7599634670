"""Finalize a conversion by running its publish plan.

Two phases:

    publish:
        - publish_statements[:move_after]   (create table, evolve, drop partition)
        - publish_directories               (replace final dirs with staging dirs)
        - publish_statements[move_after:]   (add partition, drop replaced partitions)

    cleanup (only after a successful publish):
        - cleanup_statements                (drop staging table)
        - cleanup_directories               (delete staging location)

There is no rollback. A failure leaves moved directories and staging
artifacts as they are.
"""

from orcbridge._exceptions import OrcPublishError
from orcbridge._logging import get_logger, summarize
from orcbridge._types import PublishPlan
from orcbridge.execute import Executor
from orcbridge.filesystem import FileSystem

logger = get_logger(__name__)


def finalize(plan: PublishPlan, executor: Executor, filesystem: FileSystem) -> None:
    """Publish staging data, then clean up staging artifacts.

    Args:
        plan: Publish plan from plan_conversion() or deserialize_publish_plan()
        executor: Statement executor
        filesystem: Filesystem holding staging and final data

    Raises:
        OrcPublishError: If any statement, move or delete fails
    """
    publish(plan, executor, filesystem)
    cleanup(plan, executor, filesystem)


def publish(plan: PublishPlan, executor: Executor, filesystem: FileSystem) -> None:
    """Run publish statements and directory moves in plan order."""
    before = plan.publish_statements[: plan.move_after]
    after = plan.publish_statements[plan.move_after :]

    _run_statements(before, executor)

    for src, dest in plan.publish_directories.items():
        _replace_directory(src, dest, filesystem)

    _run_statements(after, executor)
    logger.info(f"Published {len(plan.publish_directories)} directories")


def cleanup(plan: PublishPlan, executor: Executor, filesystem: FileSystem) -> None:
    """Drop staging tables and delete staging directories."""
    _run_statements(plan.cleanup_statements, executor)

    for path in plan.cleanup_directories:
        try:
            filesystem.delete(path)
        except Exception as e:
            raise OrcPublishError(f"Failed to delete {path}: {e}") from e
        logger.info(f"Deleted {path}")


def _run_statements(statements: tuple[str, ...], executor: Executor) -> None:
    for statement in statements:
        logger.debug(f"Executing: {statement}")
        try:
            executor.execute(statement)
        except Exception as e:
            raise OrcPublishError(f"Failed: {summarize(statement)}: {e}") from e


def _replace_directory(src: str, dest: str, filesystem: FileSystem) -> None:
    """Replace dest with src. Existing dest contents are deleted first."""
    try:
        if filesystem.exists(dest):
            filesystem.delete(dest)
            logger.debug(f"Deleted existing {dest}")
        filesystem.move(src, dest)
    except Exception as e:
        raise OrcPublishError(f"Failed to move {src} -> {dest}: {e}") from e
    logger.info(f"Moved {src} -> {dest}")
