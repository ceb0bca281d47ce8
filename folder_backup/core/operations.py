"""Filesystem mutations used by the backup pipeline.

Every change the pipeline makes to disk goes through one of these classes:

- FileOperations: performs the change
- DryRunOperations: logs what would be done and touches nothing

Both record each action in ``actions`` as an ``(action, target)`` tuple.
"""

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional, Tuple

from .compression import create_zip_archive
from .exceptions import DestinationCreateError, MoveError, RetentionDeleteError


class FileOperations:
    """Performs filesystem changes."""

    dry_run = False

    def __init__(self):
        self.actions: List[Tuple[str, str]] = []
        self.logger = logging.getLogger(__name__)

    def make_dirs(self, path: str):
        """Create a directory and any missing parents.

        Raises:
            DestinationCreateError: If the directory cannot be created.
        """
        self.actions.append(('make_dirs', path))
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            raise DestinationCreateError(f"Permission denied creating directory {path}: {e}", path) from e
        except OSError as e:
            raise DestinationCreateError(f"Failed to create directory {path}: {e}", path) from e
        self.logger.info(f"Created directory: {path}")

    def write_archive(self, source_dir: str, archive_path: str) -> Optional[str]:
        """Zip source_dir into archive_path.

        Returns:
            Path of the written archive.

        Raises:
            CompressionError: If the archive cannot be written.
        """
        self.actions.append(('write_archive', archive_path))
        self.logger.info(f"Compressing {source_dir} to {archive_path}")
        return create_zip_archive(source_dir, archive_path)

    def move(self, source_path: str, dest_path: str):
        """Move a file, replacing any file already at dest_path.

        Across filesystems the file is copied to a hidden partial file next
        to dest_path and renamed into place, so dest_path never holds a
        partially written archive.

        Raises:
            MoveError: If the move fails.
        """
        self.actions.append(('move', dest_path))
        try:
            os.replace(source_path, dest_path)
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise MoveError(f"Failed to move {source_path} to {dest_path}: {e}", dest_path) from e
            self.logger.debug(f"{source_path} and {dest_path} are on different devices, copying")
            self._copy_across_devices(source_path, dest_path)
        self.logger.info(f"Moved archive to {dest_path}")

    def _copy_across_devices(self, source_path: str, dest_path: str):
        dest = Path(dest_path)
        partial = dest.with_name(f".{dest.name}.part")
        try:
            shutil.copy2(source_path, partial)
            os.replace(partial, dest)
            os.remove(source_path)
        except OSError as e:
            if partial.exists():
                partial.unlink()
            raise MoveError(f"Failed to copy {source_path} to {dest_path}: {e}", dest_path) from e

    def remove(self, path: str):
        """Delete an archive.

        Raises:
            RetentionDeleteError: If the file cannot be deleted.
        """
        self.actions.append(('remove', path))
        try:
            os.remove(path)
        except PermissionError as e:
            raise RetentionDeleteError(f"Permission denied deleting {path}: {e}", path) from e
        except OSError as e:
            raise RetentionDeleteError(f"Failed to delete {path}: {e}", path) from e


class DryRunOperations(FileOperations):
    """Logs intended filesystem changes without making them."""

    dry_run = True

    def make_dirs(self, path: str):
        self.actions.append(('make_dirs', path))
        self.logger.info(f"[DRY RUN] Would create directory: {path}")

    def write_archive(self, source_dir: str, archive_path: str) -> Optional[str]:
        self.actions.append(('write_archive', archive_path))
        self.logger.info(f"[DRY RUN] Would archive {source_dir} to {archive_path}")
        return None

    def move(self, source_path: str, dest_path: str):
        self.actions.append(('move', dest_path))
        self.logger.info(f"[DRY RUN] Would move {source_path} to {dest_path}")

    def remove(self, path: str):
        self.actions.append(('remove', path))
        self.logger.info(f"[DRY RUN] Would delete old archive: {path}")


def create_operations(dry_run: bool) -> FileOperations:
    """Return the operations object for the requested mode."""
    return DryRunOperations() if dry_run else FileOperations()
