"""
Configuration settings for the label unsubscriber.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

from label_unsubscriber.email_processor.messages import GMAIL_PERMALINK_TEMPLATE
from label_unsubscriber.email_processor.unsubscribe.types import LabelConfig


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('1', 'true', 'yes')


class Config:
    """Configuration settings, read from the environment."""

    @classmethod
    def reload(cls):
        """Re-read every setting from the environment."""
        # Database settings
        cls.DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///unsubscribe_log.db')

        # Labels (IMAP folders) driving the pipeline
        cls.UNSUBSCRIBE_LABEL = os.getenv('UNSUBSCRIBE_LABEL', 'Unsubscribe')
        cls.SUCCESS_LABEL = os.getenv('SUCCESS_LABEL', 'Unsubscribe Success')
        cls.FAIL_LABEL = os.getenv('FAIL_LABEL', 'Unsubscribe Failed')

        # Mailbox settings
        cls.EMAIL_ADDRESS = os.getenv('EMAIL_ADDRESS', '')
        cls.IMAP_SERVER = os.getenv('IMAP_SERVER', 'imap.gmail.com')
        cls.IMAP_PORT = int(os.getenv('IMAP_PORT', '993'))
        cls.IMAP_USE_SSL = _env_bool('IMAP_USE_SSL', 'true')
        cls.SMTP_SERVER = os.getenv('SMTP_SERVER', 'smtp.gmail.com')
        cls.SMTP_PORT = int(os.getenv('SMTP_PORT', '587'))
        cls.SMTP_TIMEOUT = int(os.getenv('SMTP_TIMEOUT', '30'))
        cls.PERMALINK_TEMPLATE = os.getenv('PERMALINK_TEMPLATE', GMAIL_PERMALINK_TEMPLATE)

        # Unsubscribe request settings
        cls.REQUEST_TIMEOUT = int(os.getenv('REQUEST_TIMEOUT', '10'))
        cls.USER_AGENT = os.getenv('USER_AGENT', 'LabelUnsubscriber/1.0')
        cls.REQUIRE_2XX = _env_bool('REQUIRE_2XX', 'false')

        # Logging
        cls.LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
        cls.LOG_FORMAT = os.getenv('LOG_FORMAT', 'json')

    @classmethod
    def labels(cls) -> LabelConfig:
        return LabelConfig(
            pending=cls.UNSUBSCRIBE_LABEL,
            success=cls.SUCCESS_LABEL,
            failure=cls.FAIL_LABEL
        )

    @classmethod
    def get_data_dir(cls) -> Path:
        """Get the data directory for storing the audit log and credentials."""
        data_dir = Path(os.getenv('DATA_DIR', Path.cwd() / 'data'))
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    @classmethod
    def get_database_path(cls) -> str:
        """Get the database URL, placing relative SQLite files in the data directory."""
        if cls.DATABASE_URL.startswith('sqlite:///') and cls.DATABASE_URL != 'sqlite:///:memory:':
            db_file = cls.DATABASE_URL[len('sqlite:///'):]
            if not os.path.isabs(db_file):
                return f"sqlite:///{cls.get_data_dir() / db_file}"
        return cls.DATABASE_URL

    @classmethod
    def get_credential_store_path(cls) -> Path:
        """Get the path to the credential store file."""
        store_path = os.getenv('EMAIL_PSWD_STORE_PATH', 'email_passwords.json')

        if '{$DATA_DIR}' in store_path:
            store_path = store_path.replace('{$DATA_DIR}', str(cls.get_data_dir()))

        path = Path(store_path)
        if not path.is_absolute():
            path = cls.get_data_dir() / path

        return path


Config.reload()


def load_config_from_env_file(env_file: str = '.env'):
    """Load settings from an environment file and refresh Config."""
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)
        Config.reload()
