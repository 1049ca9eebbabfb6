"""Utils module -- config and logging."""

from truthseek.utils.config import Settings, settings
from truthseek.utils.logger import get_logger, log_search

__all__ = ["Settings", "settings", "get_logger", "log_search"]
