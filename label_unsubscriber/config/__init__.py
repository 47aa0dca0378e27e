"""
Configuration module.
"""

from .settings import Config, load_config_from_env_file
from .credentials import CredentialStore, get_credential_store

__all__ = ['Config', 'load_config_from_env_file', 'CredentialStore', 'get_credential_store']
