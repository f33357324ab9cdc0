"""
Rate limiting configuration.

Applies per-blueprint limits using Flask-Limiter.  The Limiter instance is
created in app/__init__.py with no default limits; this module attaches the
limits once the blueprints are registered.

Usage:
    from app.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

# Autosave sends at most one write per quiet period per open dashboard;
# these limits leave plenty of headroom for a handful of editors.
SHEETS_LIMIT = "120/minute"
REPORT_LIMIT = "300/minute"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to the API blueprints.

    Limits (per remote IP):
        - Sheet gateway:   120/minute
        - Report API:      300/minute
        - Health checks:   exempt

    Rate limiting is disabled in testing mode.
    """
    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    bp = app.blueprints.get("sheets")
    if bp:
        limiter.limit(SHEETS_LIMIT)(bp)

    bp = app.blueprints.get("report")
    if bp:
        limiter.limit(REPORT_LIMIT)(bp)

    bp = app.blueprints.get("health_bp")
    if bp:
        limiter.exempt(bp)

    logger.info("Rate limits applied: sheets=%s report=%s", SHEETS_LIMIT, REPORT_LIMIT)
