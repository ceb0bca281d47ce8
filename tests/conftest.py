"""
Shared pytest fixtures for folder backup tests.

This module provides fixtures for:
- A small source tree and an empty destination under tmp_path
- A scratch directory used as the temporary archive location
- Fixed clocks and run contexts
- Pre-existing archives with controlled modification times
"""

import logging
import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from folder_backup.core.compression import generate_archive_name
from folder_backup.core.models import RunContext

PROJECT = "MyProject"


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler changes made by the CLI's logging setup."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level

    yield

    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def source_tree(tmp_path):
    """
    Create a source directory:

        source/
            a.txt       "A"
            sub/b.txt   "B"
    """
    source = tmp_path / "source"
    (source / "sub").mkdir(parents=True)
    (source / "a.txt").write_text("A")
    (source / "sub" / "b.txt").write_text("B")
    return source


@pytest.fixture
def destination(tmp_path):
    """Destination path that does not exist yet."""
    return tmp_path / "destination"


@pytest.fixture
def scratch_dir(tmp_path):
    """Temporary archive location."""
    scratch = tmp_path / "scratch"
    scratch.mkdir()
    return scratch


@pytest.fixture
def make_clock():
    """
    Build a clock returning the given datetimes in order.

    The last value is repeated once the list is exhausted.
    """
    def _make_clock(*times):
        remaining = list(times)

        def clock():
            if len(remaining) > 1:
                return remaining.pop(0)
            return remaining[0]

        return clock

    return _make_clock


@pytest.fixture
def context(scratch_dir, make_clock):
    """Run context with a fixed clock at 2024-01-15 10:30:00."""
    return RunContext(
        project_name=PROJECT,
        temp_dir=str(scratch_dir),
        clock=make_clock(datetime(2024, 1, 15, 10, 30, 0))
    )


@pytest.fixture
def make_archive():
    """
    Create a fake archive in a directory with a given modification time.

    Returns the path of the created file.
    """
    def _make_archive(directory: Path, when: datetime, project: str = PROJECT) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / generate_archive_name(project, when)
        path.write_bytes(b"old archive")
        timestamp = when.timestamp()
        os.utime(path, (timestamp, timestamp))
        return path

    return _make_archive


@pytest.fixture
def existing_archives(destination, make_archive):
    """Five archives in the destination, one day apart, oldest first."""
    start = datetime(2024, 1, 1, 8, 0, 0)
    return [make_archive(destination, start + timedelta(days=i)) for i in range(5)]


def snapshot_tree(root: Path) -> dict:
    """Map every path under root to its bytes (None for directories)."""
    if not root.exists():
        return {}
    snapshot = {}
    for path in sorted(root.rglob('*')):
        relative = path.relative_to(root).as_posix()
        snapshot[relative] = None if path.is_dir() else path.read_bytes()
    return snapshot
