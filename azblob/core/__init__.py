"""
azblob core: configuration and logging.
"""

from .config_manager import AzBlobConfig, ConfigManager, LoggingConfig
from .logging_config import (
    clear_client_request_id,
    get_client_request_id,
    set_client_request_id,
    setup_logging,
)

__all__ = [
    "AzBlobConfig",
    "ConfigManager",
    "LoggingConfig",
    "setup_logging",
    "set_client_request_id",
    "get_client_request_id",
    "clear_client_request_id",
]
