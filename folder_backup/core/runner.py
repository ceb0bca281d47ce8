"""Backup runner - orchestrates a complete backup run.

Workflow:
1. Validate the source directory
2. Ensure the destination directory exists
3. Compress the source into an archive in the temporary directory
4. Move the archive into the destination
5. Prune archives beyond the retention count

Steps 1-4 are fatal on failure. Pruning is best effort.
"""

import logging
import os
from datetime import datetime
from typing import Optional

from .compression import generate_archive_name
from .exceptions import (
    BackupError,
    DestinationCreateError,
    MoveError,
    SourceNotFound,
)
from .models import ArchiveFile, BackupRequest, RunContext, RunResult
from .operations import FileOperations, create_operations
from .retention import prune_archives
from ..utils.formatters import format_file_size


class BackupRunner:
    """Runs the backup pipeline for a request."""

    def __init__(self, context: RunContext, operations: Optional[FileOperations] = None):
        """Initialize backup runner.

        Args:
            context: Project name, scratch directory and clock for the run.
            operations: Filesystem operations to use. Defaults to live or
                dry-run operations depending on the request.
        """
        self.context = context
        self.operations = operations
        self.logger = logging.getLogger(__name__)

    def run(self, request: BackupRequest) -> RunResult:
        """Execute a backup run.

        Args:
            request: What to back up, where, and how many archives to keep.

        Returns:
            RunResult describing the outcome. Fatal errors are reported in
            the result rather than raised.

        Raises:
            ValueError: If the runner's operations do not match the
                request's dry-run mode.
        """
        if self.operations is not None and self.operations.dry_run != request.dry_run:
            mode = "dry-run" if request.dry_run else "live"
            raise ValueError(
                f"Request is {mode} but {type(self.operations).__name__} has dry_run={self.operations.dry_run}"
            )
        operations = self.operations or create_operations(request.dry_run)
        started = self.context.clock()
        prefix = "[DRY RUN] " if operations.dry_run else ""
        self.logger.info(f"{prefix}Starting backup of {request.source_path} to {request.destination_path}")

        try:
            archive_path, archive_name = self._backup(request, operations, started)
        except BackupError as e:
            self.logger.error(f"Backup failed: {e}")
            return RunResult(
                success=False,
                error_message=str(e),
                error_kind=type(e).__name__,
                dry_run=operations.dry_run
            )

        pending = None
        if operations.dry_run:
            pending = ArchiveFile(
                path=os.path.join(request.destination_path, archive_name),
                name=archive_name,
                modified_time=started
            )

        removed, failed = [], []
        if request.retention_count > 0:
            self.logger.info(f"Applying retention: keeping {request.retention_count} newest archives")
            removed, failed = prune_archives(
                request.destination_path,
                self.context.project_name,
                request.retention_count,
                operations,
                pending=pending
            )
        else:
            self.logger.info("Retention count is 0, pruning disabled")

        if failed:
            self.logger.warning(f"{len(failed)} old archives could not be deleted")

        if operations.dry_run:
            self.logger.info("[DRY RUN] Completed, no changes were made")
        else:
            self.logger.info(f"Backup completed successfully: {archive_path}")

        return RunResult(
            success=True,
            archive_path=archive_path,
            removed_archives=removed,
            failed_removals=failed,
            dry_run=operations.dry_run
        )

    def _backup(self, request: BackupRequest, operations: FileOperations, started: datetime):
        """Run the fatal steps. Returns (final archive path or None, archive name)."""
        # Step 1: Validate source
        self._validate_source(request.source_path)

        if os.path.realpath(self.context.temp_dir) == os.path.realpath(request.destination_path):
            raise MoveError(
                f"Temporary directory must differ from the destination: {self.context.temp_dir}",
                self.context.temp_dir
            )

        # Step 2: Ensure destination
        self._ensure_destination(request.destination_path, operations)

        if _is_within(request.destination_path, request.source_path):
            self.logger.warning(
                f"Destination {request.destination_path} is inside the source directory, "
                f"existing archives will be included in the new one"
            )

        # Step 3: Compress
        archive_name = generate_archive_name(self.context.project_name, started)
        temp_archive = os.path.join(self.context.temp_dir, archive_name)
        written = operations.write_archive(request.source_path, temp_archive)
        if written is not None and os.path.isfile(written):
            self.logger.info(f"Archive created: {archive_name} ({format_file_size(os.path.getsize(written))})")

        # Step 4: Move to destination
        final_path = os.path.join(request.destination_path, archive_name)
        if operations.dry_run:
            operations.move(temp_archive, final_path)
            return None, archive_name

        self._move_archive(written, final_path, operations)
        return final_path, archive_name

    def _validate_source(self, source_path: str):
        if not os.path.exists(source_path):
            raise SourceNotFound(f"Source directory does not exist: {source_path}", source_path)
        if not os.path.isdir(source_path):
            raise SourceNotFound(f"Source path is not a directory: {source_path}", source_path)
        self.logger.info(f"Source directory found: {source_path}")

    def _ensure_destination(self, destination_path: str, operations: FileOperations):
        if os.path.isdir(destination_path):
            self.logger.info(f"Destination directory exists: {destination_path}")
        elif os.path.exists(destination_path):
            raise DestinationCreateError(
                f"Destination exists but is not a directory: {destination_path}", destination_path
            )
        else:
            self.logger.info(f"Destination directory missing: {destination_path}")
            operations.make_dirs(destination_path)

    def _move_archive(self, temp_archive: Optional[str], final_path: str, operations: FileOperations):
        if not temp_archive or not os.path.isfile(temp_archive):
            raise MoveError(f"Temporary archive not found: {temp_archive}", temp_archive)

        try:
            operations.move(temp_archive, final_path)
        except MoveError:
            self._discard_temp_archive(temp_archive)
            raise
        except OSError as e:
            self._discard_temp_archive(temp_archive)
            raise MoveError(f"Failed to move {temp_archive} to {final_path}: {e}", final_path) from e

        # Nothing may remain in the temp location
        if os.path.realpath(temp_archive) != os.path.realpath(final_path):
            self._discard_temp_archive(temp_archive)

    def _discard_temp_archive(self, temp_archive: str):
        if not os.path.exists(temp_archive):
            return
        try:
            os.remove(temp_archive)
            self.logger.info(f"Removed temporary archive: {temp_archive}")
        except OSError as e:
            self.logger.error(f"Could not remove temporary archive {temp_archive}: {e}")


def _is_within(path: str, directory: str) -> bool:
    path = os.path.realpath(path)
    directory = os.path.realpath(directory)
    return os.path.commonpath([path, directory]) == directory
