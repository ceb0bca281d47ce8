"""
Folder Backup - timestamped zip backups of a directory with retention pruning.

This package archives a source directory into a destination directory and
removes the oldest archives beyond a configured retention count.
"""

__version__ = "1.0.0"

from .core.runner import BackupRunner
from .core.models import BackupRequest, RunContext, RunResult
from .config.config_manager import ConfigManager

__all__ = ["BackupRunner", "BackupRequest", "RunContext", "RunResult", "ConfigManager"]
