"""Filesystem access for directory creation and publish moves.

The planner only creates the destination data directory. Moves and deletes
are executed later by finalize() from the PublishPlan.
"""

import shutil
from pathlib import Path
from typing import Protocol, runtime_checkable

from orcbridge._exceptions import OrcFilesystemError
from orcbridge._logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class FileSystem(Protocol):
    """Directory operations used by planning and publishing."""

    def stat_permission(self, path: str) -> int:
        """Permission bits of path (e.g. 0o755)."""
        ...

    def mkdir(self, path: str, permission: int) -> bool:
        """Create path and missing parents. True if path exists afterwards."""
        ...

    def set_permission(self, path: str, permission: int) -> None: ...

    def exists(self, path: str) -> bool: ...

    def move(self, src: str, dest: str) -> None:
        """Move src to dest, creating dest's parent."""
        ...

    def delete(self, path: str) -> None:
        """Recursively delete path. Missing paths are ignored."""
        ...


class LocalFileSystem:
    """FileSystem on the local disk."""

    def stat_permission(self, path: str) -> int:
        return Path(path).stat().st_mode & 0o7777

    def mkdir(self, path: str, permission: int) -> bool:
        target = Path(path)
        target.mkdir(mode=permission, parents=True, exist_ok=True)
        return target.is_dir()

    def set_permission(self, path: str, permission: int) -> None:
        Path(path).chmod(permission)

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def move(self, src: str, dest: str) -> None:
        dest_path = Path(dest)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(src, dest_path)

    def delete(self, path: str) -> None:
        target = Path(path)
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        elif target.exists() or target.is_symlink():
            target.unlink()


def create_destination_dir(filesystem: FileSystem, path: str, source_path: str) -> int:
    """Create path with the permission bits of source_path.

    The permission is applied again after mkdir since the process umask may
    have masked bits at creation time.

    Returns:
        Applied permission bits

    Raises:
        OrcFilesystemError: If stat, mkdir or chmod fails
    """
    try:
        permission = filesystem.stat_permission(source_path)
        if not filesystem.mkdir(path, permission):
            raise OrcFilesystemError(f"Failed to create path {path} with permissions {oct(permission)}")
        filesystem.set_permission(path, permission)
    except OrcFilesystemError:
        raise
    except Exception as e:
        raise OrcFilesystemError(f"Failed to create destination directory {path}: {e}") from e

    logger.info(f"Created {path} with permissions {oct(permission)}")
    return permission
