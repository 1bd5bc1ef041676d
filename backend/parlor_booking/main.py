import logging
import os
import sys
from typing import Any, Dict, Optional

from dotenv import load_dotenv

# Only load from .env when DATABASE_URL is not already defined by the environment
if not os.getenv("DATABASE_URL"):
    load_dotenv()

from flask import Flask  # noqa: E402

from parlor_booking import __version__  # noqa: E402

logger = logging.getLogger(__name__)


def _is_test_mode(app: Flask) -> bool:
    """Check if we're running in test mode (pytest/CI)."""
    testing_val = os.getenv("TESTING", "").lower().strip()
    if testing_val in ("true", "1", "yes"):
        return True
    if "pytest" in sys.modules:
        return True
    if os.getenv("PYTEST_CURRENT_TEST"):
        return True
    return bool(app.config.get("TESTING"))


def _init_sentry(env: str) -> None:
    sentry_dsn = os.getenv("SENTRY_DSN")
    if not sentry_dsn:
        logger.info(
            "Sentry not initialized (SENTRY_DSN not set)",
            extra={"context": {"environment": env}},
        )
        return

    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=sentry_dsn,
        environment=env,
        release=os.getenv("GIT_SHA", __version__),
        integrations=[FlaskIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=0.1,
        send_default_pii=False,  # Customer contact data stays out of Sentry
    )
    logger.info(
        "Sentry initialized",
        extra={"context": {"environment": env, "traces_sample_rate": 0.1}},
    )


def _init_metrics(app: Flask, env: str) -> None:
    """Expose /metrics for Prometheus. Must run before the limiter is bound."""
    from prometheus_flask_exporter import PrometheusMetrics

    metrics = PrometheusMetrics(app)
    try:
        metrics.info(
            "app_info",
            "Application information",
            version=os.getenv("GIT_SHA", __version__),
            environment=env,
        )
    except ValueError as e:
        # Metric already registered (create_app called more than once)
        logger.debug(
            "app_info metric already registered",
            extra={"context": {"error": str(e)}},
        )
    logger.info(
        "Prometheus metrics initialized",
        extra={"context": {"metrics_endpoint": "/metrics"}},
    )


def create_app(config_overrides: Optional[Dict[str, Any]] = None) -> Flask:
    env = os.getenv("FLASK_ENV", "development")
    is_production = env == "production"

    app = Flask(__name__)

    testing_env = os.getenv("TESTING", "").lower().strip()
    if testing_env in ("true", "1", "yes"):
        app.config["TESTING"] = True
    app.config["JSON_SORT_KEYS"] = False
    if config_overrides:
        app.config.update(config_overrides)

    from parlor_booking.core.logging_config import setup_logging

    setup_logging(
        app=app,
        log_level=logging.INFO if is_production else logging.DEBUG,
        enable_sql_echo=os.getenv("SQL_ECHO", "0") == "1",
        log_to_file=os.getenv("LOG_TO_FILE", "0") == "1",
        use_json_format=is_production,
    )

    from parlor_booking.core.config import (
        get_rate_limit_enabled,
        log_booking_config,
        log_calendar_config,
        log_timezone_config,
    )

    log_timezone_config()
    log_booking_config()
    log_calendar_config()

    _init_sentry(env)
    _init_metrics(app, env)

    from parlor_booking.core.limiter_config import limiter

    app.config["RATELIMIT_STORAGE_URI"] = os.getenv("LIMITER_STORAGE_URI", "memory://")
    rate_limit_enabled = get_rate_limit_enabled()
    if _is_test_mode(app) and not rate_limit_enabled:
        app.config["RATELIMIT_ENABLED"] = False
    limiter.init_app(app)
    if not app.config.get("RATELIMIT_ENABLED", True):
        limiter.enabled = False
        logger.info(
            "Rate limiting disabled for testing", extra={"context": {"test_mode": True}}
        )

    from parlor_booking.core.api_utils import register_error_handlers

    register_error_handlers(app)

    from parlor_booking.db.session import create_tables, get_engine

    try:
        create_tables()
        eng = get_engine()
        logger.info(
            "Database ready",
            extra={
                "context": {
                    "url": eng.url.render_as_string(hide_password=True),
                    "driver": eng.dialect.name,
                }
            },
        )
    except Exception as e:
        logger.warning(
            "Failed to auto-create tables",
            extra={"context": {"error": str(e)}},
            exc_info=True,
        )

    from parlor_booking.controllers.appointment_controller import appointment_bp
    from parlor_booking.controllers.customer_controller import customer_bp
    from parlor_booking.controllers.health_controller import health_bp
    from parlor_booking.controllers.service_controller import service_bp

    app.register_blueprint(appointment_bp)
    app.register_blueprint(service_bp)
    app.register_blueprint(customer_bp)
    app.register_blueprint(health_bp)
    limiter.exempt(health_bp)

    logger.info(
        "Application created",
        extra={"context": {"environment": env, "version": __version__}},
    )
    return app
