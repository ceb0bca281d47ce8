"""
Unit tests for configuration loading (folder_backup/config).

Tests file discovery, defaults, validation and command-line overrides.
"""

import os
import tempfile

import pytest
import yaml

from folder_backup.config.config_manager import ConfigManager
from folder_backup.config.config_validator import ConfigValidator


@pytest.fixture
def no_default_config(monkeypatch):
    """Make sure no config file on the test machine is picked up."""
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_LOCATIONS", [])


@pytest.fixture
def write_config(tmp_path):
    """Write a YAML config file and return its path."""
    def _write_config(data, name="folder-backup.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data) if not isinstance(data, str) else data)
        return str(path)

    return _write_config


class TestConfigManager:
    """Test ConfigManager."""

    def test_defaults_without_config_file(self, no_default_config):
        manager = ConfigManager()
        config = manager.load_config()

        assert manager.config_file is None
        assert config['backup']['keep'] == 30
        assert config['logging']['level'] == 'INFO'

        backup = manager.get_backup_config()
        assert backup['source'] == os.path.abspath('.')
        assert backup['destination'] == os.path.expanduser('~/Backups')
        assert backup['temp_dir'] == tempfile.gettempdir()
        assert backup['project_name'] == os.path.basename(os.path.abspath('.'))

    def test_explicit_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager(str(tmp_path / "missing.yaml")).load_config()

    def test_loads_values(self, write_config, tmp_path):
        path = write_config({
            'backup': {
                'project_name': 'Thesis',
                'source': str(tmp_path / 'thesis'),
                'destination': str(tmp_path / 'backups'),
                'keep': 7,
            },
            'logging': {'level': 'DEBUG'},
        })

        manager = ConfigManager(path)
        manager.load_config()
        backup = manager.get_backup_config()

        assert backup['project_name'] == 'Thesis'
        assert backup['source'] == str(tmp_path / 'thesis')
        assert backup['destination'] == str(tmp_path / 'backups')
        assert backup['keep'] == 7
        assert manager.get_logging_config()['level'] == 'DEBUG'
        assert manager.get_logging_config()['file'] is None

    def test_search_default_locations(self, write_config, monkeypatch):
        path = write_config({'backup': {'keep': 3}})
        monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_LOCATIONS", ["/nonexistent/config.yaml", path])

        manager = ConfigManager()
        config = manager.load_config()

        assert manager.config_file == path
        assert config['backup']['keep'] == 3

    def test_empty_file_uses_defaults(self, write_config):
        manager = ConfigManager(write_config(""))

        config = manager.load_config()

        assert config['backup']['keep'] == 30

    def test_invalid_yaml(self, write_config):
        with pytest.raises(ValueError, match="Invalid YAML"):
            ConfigManager(write_config("backup: [unclosed")).load_config()

    def test_project_name_defaults_to_source_folder(self, write_config, tmp_path):
        manager = ConfigManager(write_config({'backup': {'source': str(tmp_path / 'photos')}}))
        manager.load_config()

        assert manager.get_backup_config()['project_name'] == 'photos'

    def test_home_directory_is_expanded(self, write_config):
        manager = ConfigManager(write_config({'backup': {'destination': '~/Dropbox/Backups'}}))
        manager.load_config()

        assert manager.get_backup_config()['destination'] == os.path.expanduser('~/Dropbox/Backups')

    def test_overrides_take_precedence(self, write_config, tmp_path):
        manager = ConfigManager(write_config({'backup': {'keep': 7, 'project_name': 'Thesis'}}))
        manager.load_config()

        manager.apply_overrides('backup', keep=0, project_name=None, source=str(tmp_path))

        backup = manager.get_backup_config()
        assert backup['keep'] == 0
        assert backup['project_name'] == 'Thesis'
        assert backup['source'] == str(tmp_path)

    def test_invalid_override_rejected(self, no_default_config):
        manager = ConfigManager()
        manager.load_config()

        with pytest.raises(ValueError):
            manager.apply_overrides('logging', level='VERBOSE')


class TestConfigValidator:
    """Test ConfigValidator."""

    def test_accepts_empty_config(self):
        ConfigValidator().validate({})

    @pytest.mark.parametrize("config", [
        {'backup': {'keep': -1}},
        {'backup': {'keep': 'thirty'}},
        {'backup': {'keep': True}},
        {'backup': {'source': ''}},
        {'backup': {'destination': 42}},
        {'backup': {'project_name': '  '}},
        {'backup': ['not', 'a', 'mapping']},
        {'logging': {'level': 'LOUD'}},
        {'email': {}},
        ['not', 'a', 'mapping'],
    ])
    def test_rejects_invalid_config(self, config):
        with pytest.raises(ValueError):
            ConfigValidator().validate(config)

    def test_accepts_zero_keep(self):
        ConfigValidator().validate({'backup': {'keep': 0}})
