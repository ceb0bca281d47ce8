"""Zip archive creation and archive naming."""

import glob
import logging
import os
import zipfile
from datetime import datetime

from .exceptions import CompressionError

TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'
ARCHIVE_EXTENSION = '.zip'

logger = logging.getLogger(__name__)


def sanitize_project_name(project_name: str) -> str:
    """Replace characters that are unsafe in file names with underscores.

    Args:
        project_name: Raw project name.

    Returns:
        Name containing only alphanumerics, '-' and '_'.

    Raises:
        ValueError: If the name is empty.
    """
    if not project_name or not project_name.strip():
        raise ValueError("Project name cannot be empty")

    return "".join(
        c if c.isalnum() or c in ('-', '_') else '_'
        for c in project_name.strip()
    )


def generate_archive_name(project_name: str, timestamp: datetime) -> str:
    """Build the archive file name.

    Format: {project_name}_{YYYYMMDD_HHMMSS}.zip

    Args:
        project_name: Name of the project being backed up.
        timestamp: Time of the run.

    Returns:
        File name (without directory).
    """
    safe_name = sanitize_project_name(project_name)
    return f"{safe_name}_{timestamp.strftime(TIMESTAMP_FORMAT)}{ARCHIVE_EXTENSION}"


def archive_pattern(project_name: str) -> str:
    """Glob pattern matching every archive written for a project."""
    safe_name = sanitize_project_name(project_name)
    return f"{glob.escape(safe_name)}_*{ARCHIVE_EXTENSION}"


def create_zip_archive(source_dir: str, archive_path: str) -> str:
    """Zip the contents of a directory.

    Paths inside the archive are relative to source_dir. An existing file at
    archive_path is overwritten. A partially written archive is removed
    before the error is raised.

    Args:
        source_dir: Directory whose contents are archived.
        archive_path: Where to write the archive.

    Returns:
        archive_path

    Raises:
        CompressionError: If the archive cannot be written.
    """
    try:
        file_count = _write_zip(source_dir, archive_path)
    except Exception as e:
        if os.path.exists(archive_path):
            try:
                os.remove(archive_path)
                logger.debug(f"Removed partial archive: {archive_path}")
            except OSError as cleanup_error:
                logger.error(f"Could not remove partial archive {archive_path}: {cleanup_error}")
        raise CompressionError(f"Failed to create archive {archive_path}: {e}", archive_path) from e

    logger.debug(f"Wrote {file_count} files to {archive_path}")
    return archive_path


def _write_zip(source_dir: str, archive_path: str) -> int:
    """Write the archive and return the number of files stored.

    Symlinked directories are followed. A directory link that resolves to
    one of its own ancestors is skipped with a warning.
    """
    archive_abs = os.path.abspath(archive_path)
    file_count = 0
    # Resolved paths of each walked directory and its ancestors
    chains = {source_dir: (os.path.realpath(source_dir),)}

    with zipfile.ZipFile(archive_path, 'w', zipfile.ZIP_DEFLATED, strict_timestamps=False) as zipf:
        for root, dirs, files in os.walk(source_dir, followlinks=True):
            chain = chains.pop(root)
            kept = []
            for name in sorted(dirs):
                dir_path = os.path.join(root, name)
                real_path = os.path.realpath(dir_path)
                if real_path in chain:
                    logger.warning(f"Skipping symlinked directory {dir_path}: it loops back to {real_path}")
                    continue
                chains[dir_path] = chain + (real_path,)
                kept.append(name)
            dirs[:] = kept

            rel_root = os.path.relpath(root, source_dir)

            # Keep empty directories in the archive
            if rel_root != '.' and not dirs and not files:
                zipf.write(root, rel_root)
                continue

            for name in sorted(files):
                file_path = os.path.join(root, name)
                if os.path.abspath(file_path) == archive_abs:
                    continue
                zipf.write(file_path, os.path.relpath(file_path, source_dir))
                file_count += 1

    return file_count
