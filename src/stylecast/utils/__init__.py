"""Utils package initialization."""

from .config import get_settings, reload_settings, validate_config, AppSettings
from .monitoring import (
    init_monitoring,
    setup_logging,
    setup_metrics,
    setup_sentry
)

__all__ = [
    "get_settings",
    "reload_settings",
    "validate_config",
    "AppSettings",
    "init_monitoring",
    "setup_logging",
    "setup_metrics",
    "setup_sentry"
]
