"""
Sentry integration for error tracking and performance monitoring.

Provides:
- Automatic error capture
- User context (user, role, tenant)
- Performance transaction tracking
"""

import logging
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from teacha import __version__
from teacha.utils.exceptions import TeachaError

logger = logging.getLogger(__name__)


def setup_sentry(
    dsn: Optional[str] = None,
    environment: Optional[str] = None,
    release: Optional[str] = None,
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize Sentry SDK for error tracking and performance monitoring.

    Args:
        dsn: Sentry DSN (Data Source Name)
        environment: Deployment environment (production, staging, development)
        release: Release version (defaults to "teacha@<version>")
        traces_sample_rate: Percentage of transactions to trace (0.0-1.0)

    Returns:
        True when Sentry was initialized
    """
    if not dsn:
        logger.warning("Sentry DSN not configured, skipping Sentry initialization")
        return False

    environment = environment or "development"
    release = release or f"teacha@{__version__}"

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,

        # Integrations
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(
                level=logging.INFO,  # Capture info and above as breadcrumbs
                event_level=logging.ERROR,  # Create events for errors
            ),
        ],

        traces_sample_rate=traces_sample_rate,
        before_send=before_send_filter,

        attach_stacktrace=True,
        send_default_pii=False,
        max_breadcrumbs=50,
    )

    logger.info(
        f"Sentry initialized: environment={environment}, "
        f"release={release}, traces_sample_rate={traces_sample_rate}"
    )
    return True


def before_send_filter(event, hint):
    """
    Filter events before sending to Sentry.

    Application errors with a 4xx status are client mistakes, not incidents.
    """
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]
        if isinstance(exc_value, TeachaError) and exc_value.status_code < 500:
            return None

    return event


def set_user_context(
    user_id: Optional[str] = None,
    role: Optional[str] = None,
    tenant_id: Optional[str] = None,
):
    """
    Set user context for Sentry events.

    Email is left out because PII is not sent.
    """
    context = {}

    if user_id:
        context["id"] = user_id
    if role:
        context["role"] = role
    if tenant_id:
        context["tenant_id"] = tenant_id

    if context:
        sentry_sdk.set_user(context)
