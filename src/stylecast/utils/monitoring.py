"""
Monitoring and Observability

Structured logging, Prometheus metrics and Sentry error tracking
for the style transfer client.
"""

import logging
import sys
from typing import Optional

import sentry_sdk
import structlog
from prometheus_client import Counter, Histogram, start_http_server
from sentry_sdk.integrations.logging import LoggingIntegration

from .config import AppSettings, get_settings


# Prometheus Metrics
PREDICTION_COUNT = Counter(
    'stylecast_predictions_total',
    'Total number of remote predictions by outcome',
    ['outcome']
)

FALLBACK_COUNT = Counter(
    'stylecast_fallbacks_total',
    'Number of requests served by the simulated fallback',
    ['reason']
)

POLL_ATTEMPTS = Histogram(
    'stylecast_poll_attempts',
    'Status polls issued per prediction',
    buckets=(1, 5, 10, 20, 30, 45, 60, 90, 120)
)

PIPELINE_DURATION = Histogram(
    'stylecast_pipeline_duration_seconds',
    'End-to-end duration of a style transfer request',
    ['mode']
)


def setup_logging(settings: Optional[AppSettings] = None):
    """Configure structured logging with JSON or console output."""

    settings = settings or get_settings()
    level = getattr(logging, settings.monitoring.log_level)

    if settings.monitoring.log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level
    )
    logging.getLogger().setLevel(level)

    logger = structlog.get_logger()
    logger.info("Logging configured", level=settings.monitoring.log_level)

    return logger


def setup_sentry(settings: Optional[AppSettings] = None) -> bool:
    """Configure Sentry error tracking. Returns True when enabled."""

    settings = settings or get_settings()

    if not settings.monitoring.sentry_dsn:
        return False

    sentry_logging = LoggingIntegration(
        level=logging.INFO,
        event_level=logging.ERROR
    )

    sentry_sdk.init(
        dsn=settings.monitoring.sentry_dsn,
        integrations=[sentry_logging],
        release=settings.app_version
    )

    structlog.get_logger().info("Sentry configured")
    return True


def setup_metrics(settings: Optional[AppSettings] = None) -> bool:
    """Start the Prometheus exporter if metrics are enabled."""

    settings = settings or get_settings()

    if not settings.monitoring.enable_metrics:
        return False

    logger = structlog.get_logger()
    try:
        start_http_server(settings.monitoring.prometheus_port)
    except OSError as e:
        logger.error("Failed to start metrics server", error=str(e))
        return False

    logger.info("Metrics server started", port=settings.monitoring.prometheus_port)
    return True


def init_monitoring(settings: Optional[AppSettings] = None):
    """Initialize logging, error tracking and metrics in one call."""
    settings = settings or get_settings()
    logger = setup_logging(settings)
    setup_sentry(settings)
    setup_metrics(settings)
    return logger
