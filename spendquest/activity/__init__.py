"""Activity logging package."""

from spendquest.activity.logger import ActivityLogger, configure_log_level

__all__ = ["ActivityLogger", "configure_log_level"]
