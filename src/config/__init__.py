"""Stageside configuration: env-driven Settings, the YAML loader and tuning constants.

Settings are built where they are needed (``create_app``, the CLI) rather
than at import time, so tests can pass ``Settings(_env_file=None, ...)``.
"""

from src.config import tuning
from src.config.loader import load_config
from src.config.settings import Settings

__all__ = ["Settings", "load_config", "tuning"]
