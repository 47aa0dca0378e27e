"""
Tests for environment-driven configuration.
"""

import pytest

from label_unsubscriber.config import Config, load_config_from_env_file
from label_unsubscriber.email_processor.messages import GMAIL_PERMALINK_TEMPLATE
from label_unsubscriber.email_processor.unsubscribe.types import LabelConfig


@pytest.fixture(autouse=True)
def restore_config():
    yield
    Config.reload()


class TestConfig:

    def test_defaults(self, monkeypatch):
        for name in ('UNSUBSCRIBE_LABEL', 'SUCCESS_LABEL', 'FAIL_LABEL', 'IMAP_PORT', 'PERMALINK_TEMPLATE'):
            monkeypatch.delenv(name, raising=False)

        Config.reload()

        assert Config.labels() == LabelConfig("Unsubscribe", "Unsubscribe Success", "Unsubscribe Failed")
        assert Config.IMAP_PORT == 993
        assert Config.PERMALINK_TEMPLATE == GMAIL_PERMALINK_TEMPLATE

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv('UNSUBSCRIBE_LABEL', 'Leave')
        monkeypatch.setenv('SUCCESS_LABEL', 'Left')
        monkeypatch.setenv('FAIL_LABEL', 'Stuck')
        monkeypatch.setenv('REQUEST_TIMEOUT', '25')
        monkeypatch.setenv('REQUIRE_2XX', 'yes')
        monkeypatch.setenv('IMAP_USE_SSL', 'false')

        Config.reload()

        assert Config.labels() == LabelConfig("Leave", "Left", "Stuck")
        assert Config.REQUEST_TIMEOUT == 25
        assert Config.REQUIRE_2XX is True
        assert Config.IMAP_USE_SSL is False

    def test_in_memory_database_is_left_alone(self, monkeypatch):
        monkeypatch.setenv('DATABASE_URL', 'sqlite:///:memory:')
        Config.reload()

        assert Config.get_database_path() == 'sqlite:///:memory:'

    def test_relative_sqlite_goes_to_data_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv('DATABASE_URL', 'sqlite:///audit.db')
        monkeypatch.setenv('DATA_DIR', str(tmp_path))
        Config.reload()

        assert Config.get_database_path() == f"sqlite:///{tmp_path / 'audit.db'}"

    def test_other_databases_unchanged(self, monkeypatch):
        monkeypatch.setenv('DATABASE_URL', 'postgresql://localhost/unsub')
        Config.reload()

        assert Config.get_database_path() == 'postgresql://localhost/unsub'

    def test_credential_store_path_expands_data_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv('DATA_DIR', str(tmp_path))
        monkeypatch.setenv('EMAIL_PSWD_STORE_PATH', '{$DATA_DIR}/secrets/pw.json')

        assert Config.get_credential_store_path() == tmp_path / 'secrets' / 'pw.json'

    def test_load_from_env_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv('UNSUBSCRIBE_LABEL', 'placeholder')
        monkeypatch.delenv('UNSUBSCRIBE_LABEL')
        env_file = tmp_path / '.env'
        env_file.write_text('UNSUBSCRIBE_LABEL=From File\n')

        load_config_from_env_file(str(env_file))

        assert Config.UNSUBSCRIBE_LABEL == 'From File'

    def test_missing_env_file_is_ignored(self, tmp_path):
        load_config_from_env_file(str(tmp_path / 'missing.env'))
