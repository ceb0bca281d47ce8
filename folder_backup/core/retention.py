"""Retention pruning of old archives in the destination directory."""

import fnmatch
import logging
import os
from datetime import datetime
from typing import List, Optional, Tuple

from .compression import archive_pattern
from .exceptions import RetentionDeleteError
from .models import ArchiveFile
from .operations import FileOperations
from ..utils.formatters import format_date

logger = logging.getLogger(__name__)


def list_archives(destination: str, project_name: str) -> List[ArchiveFile]:
    """List the project's archives in a directory.

    Only regular files directly inside destination whose names match the
    archive pattern are returned.

    Args:
        destination: Directory holding the archives.
        project_name: Project whose archives to list.

    Returns:
        Archives in directory listing order. Empty if the directory is missing.
    """
    if not os.path.isdir(destination):
        return []

    pattern = archive_pattern(project_name)
    archives = []

    with os.scandir(destination) as entries:
        for entry in entries:
            if not fnmatch.fnmatchcase(entry.name, pattern):
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            archives.append(ArchiveFile(
                path=entry.path,
                name=entry.name,
                modified_time=datetime.fromtimestamp(entry.stat(follow_symlinks=False).st_mtime)
            ))

    return archives


def sort_newest_first(archives: List[ArchiveFile]) -> List[ArchiveFile]:
    """Order archives newest first.

    Archives with the same modification time are ordered by name, descending.
    """
    return sorted(archives, key=lambda a: (a.modified_time, a.name), reverse=True)


def select_expired(archives: List[ArchiveFile], keep: int) -> List[ArchiveFile]:
    """Return the archives beyond the newest ``keep``, newest first."""
    if keep <= 0:
        return []
    return sort_newest_first(archives)[keep:]


def prune_archives(destination: str, project_name: str, keep: int,
                   operations: FileOperations,
                   pending: Optional[ArchiveFile] = None) -> Tuple[List[str], List[str]]:
    """Delete archives beyond the retention count.

    A failed deletion is logged and the remaining candidates are still
    processed.

    Args:
        destination: Directory holding the archives.
        project_name: Project whose archives are pruned.
        keep: Number of archives to keep. 0 disables pruning.
        operations: Performs (or, in dry-run, logs) each deletion.
        pending: Archive that is not on disk yet but counts as present.

    Returns:
        Tuple of (removed paths, paths that could not be removed).
    """
    if keep <= 0:
        logger.info("Retention disabled, skipping pruning")
        return [], []

    archives = list_archives(destination, project_name)
    if pending is not None and all(a.name != pending.name for a in archives):
        archives.append(pending)

    # The pending archive is never a deletion candidate
    expired = [
        archive for archive in select_expired(archives, keep)
        if pending is None or archive.name != pending.name
    ]
    logger.info(f"Found {len(archives)} archives, keeping {len(archives) - len(expired)}, "
                f"{len(expired)} to remove")

    removed = []
    failed = []
    for archive in expired:
        try:
            operations.remove(archive.path)
        except RetentionDeleteError as e:
            logger.error(f"Could not delete old archive {archive.path}: {e}")
            failed.append(archive.path)
            continue

        removed.append(archive.path)
        if not operations.dry_run:
            logger.info(f"Deleted old archive: {archive.name} (modified {format_date(archive.modified_time)})")

    return removed, failed
