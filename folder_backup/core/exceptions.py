"""Errors raised while running a backup."""

from typing import Optional


class BackupError(Exception):
    """Base class for backup pipeline failures."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class SourceNotFound(BackupError):
    """Raised when the source is missing or is not a directory."""
    pass


class DestinationCreateError(BackupError):
    """Raised when the destination directory cannot be created."""
    pass


class CompressionError(BackupError):
    """Raised when archive creation fails."""
    pass


class MoveError(BackupError):
    """Raised when the archive cannot be moved into the destination."""
    pass


class RetentionDeleteError(BackupError):
    """Raised when an old archive cannot be deleted. Never fatal."""
    pass
