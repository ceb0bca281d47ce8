"""Data models for backup runs."""

import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional


def local_now() -> datetime:
    """Current local time."""
    return datetime.now()


@dataclass(frozen=True)
class BackupRequest:
    """Parameters of a single backup run."""
    source_path: str
    destination_path: str
    retention_count: int = 30
    dry_run: bool = False

    def __post_init__(self):
        if isinstance(self.retention_count, bool) or not isinstance(self.retention_count, int):
            raise ValueError(f"Retention count must be an integer: {self.retention_count!r}")
        if self.retention_count < 0:
            raise ValueError(f"Retention count cannot be negative: {self.retention_count}")


@dataclass
class ArchiveFile:
    """An archive found in the destination directory."""
    path: str
    name: str
    modified_time: datetime


@dataclass
class RunContext:
    """Environment a run executes in.

    Holds the values that would otherwise be read from the process
    environment, so a run can be replayed with a fixed clock and scratch
    directory.
    """
    project_name: str
    temp_dir: str = field(default_factory=tempfile.gettempdir)
    clock: Callable[[], datetime] = local_now


@dataclass
class RunResult:
    """Outcome of a backup run."""
    success: bool
    archive_path: Optional[str] = None
    removed_archives: List[str] = field(default_factory=list)
    error_message: Optional[str] = None
    error_kind: Optional[str] = None
    failed_removals: List[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1
