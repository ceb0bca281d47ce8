"""Core backup functionality."""

from .runner import BackupRunner
from .models import BackupRequest, ArchiveFile, RunContext, RunResult
from .operations import FileOperations, DryRunOperations, create_operations
from .exceptions import (
    BackupError,
    SourceNotFound,
    DestinationCreateError,
    CompressionError,
    MoveError,
    RetentionDeleteError,
)

__all__ = [
    "BackupRunner",
    "BackupRequest",
    "ArchiveFile",
    "RunContext",
    "RunResult",
    "FileOperations",
    "DryRunOperations",
    "create_operations",
    "BackupError",
    "SourceNotFound",
    "DestinationCreateError",
    "CompressionError",
    "MoveError",
    "RetentionDeleteError",
]
