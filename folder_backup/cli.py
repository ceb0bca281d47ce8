"""Command-line interface for folder backup."""

import logging
import sys
import click
from typing import Optional

from .core.models import BackupRequest, RunContext
from .core.runner import BackupRunner
from .config.config_manager import ConfigManager


class _BelowErrorFilter(logging.Filter):
    """Pass only records below ERROR, which go to stderr instead."""

    def filter(self, record):
        return record.levelno < logging.ERROR


def setup_logging(level: str, log_file: Optional[str] = None):
    """Set up logging configuration.

    Records below ERROR are written to stdout, ERROR and above to stderr.
    """
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Set up root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Console handlers
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(_BelowErrorFilter())
    root_logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.ERROR)
    root_logger.addHandler(stderr_handler)

    # Add file handler if specified
    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)


@click.command()
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--source', '-s',
              help='Directory to back up')
@click.option('--destination', '-d',
              help='Directory that receives the archives')
@click.option('--keep', '-k', type=click.IntRange(min=0),
              help='Number of archives to keep (0 disables pruning)  [default: 30]')
@click.option('--project-name',
              help='Archive name prefix  [default: source folder name]')
@click.option('--temp-dir',
              help='Scratch directory for building the archive')
@click.option('--dry-run', is_flag=True, default=False,
              help='Log intended actions without changing any files')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level')
@click.option('--log-file',
              help='Log file path')
def cli(config_path: Optional[str], source: Optional[str], destination: Optional[str],
        keep: Optional[int], project_name: Optional[str], temp_dir: Optional[str],
        dry_run: bool, log_level: Optional[str], log_file: Optional[str]):
    """Folder Backup - archive a directory and prune old archives."""
    try:
        config_manager = ConfigManager(config_path)
        config_manager.load_config()
        config_manager.apply_overrides('logging', level=log_level, file=log_file)
        config_manager.apply_overrides(
            'backup',
            source=source,
            destination=destination,
            keep=keep,
            project_name=project_name,
            temp_dir=temp_dir
        )
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)

    logging_config = config_manager.get_logging_config()
    setup_logging(logging_config['level'], logging_config.get('file'))

    try:
        backup_config = config_manager.get_backup_config()
        context = RunContext(
            project_name=backup_config['project_name'],
            temp_dir=backup_config['temp_dir']
        )
        request = BackupRequest(
            source_path=backup_config['source'],
            destination_path=backup_config['destination'],
            retention_count=backup_config['keep'],
            dry_run=dry_run
        )

        result = BackupRunner(context).run(request)
    except Exception as e:
        click.echo(f"Error running backup: {e}", err=True)
        sys.exit(1)

    if not result.success:
        click.echo(f"Backup failed: {result.error_message}", err=True)
        sys.exit(result.exit_code)

    if result.dry_run:
        click.echo(f"Dry run complete: {len(result.removed_archives)} archives would be removed")
    else:
        click.echo(f"Backup created: {result.archive_path}")
        if result.removed_archives:
            click.echo(f"Removed {len(result.removed_archives)} old archives")
        if result.failed_removals:
            click.echo(f"Could not remove {len(result.failed_removals)} old archives", err=True)

    sys.exit(result.exit_code)


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
