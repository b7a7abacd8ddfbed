"""Common utilities for launcher plugins."""
from .config import (
    ConfigError,
    configure_logger,
    get_config,
    get_plugin_config,
    load_config,
)

__all__ = ['ConfigError', 'get_config', 'get_plugin_config', 'load_config', 'configure_logger']
