"""Configuration management for hydractl.

Loads and validates YAML-based configuration with Pydantic models,
and reads the known-users token file.
"""

from hydractl.config.known_users import KnownUsersError, load_known_users
from hydractl.config.settings import Settings, load_settings

__all__ = ["KnownUsersError", "Settings", "load_known_users", "load_settings"]
