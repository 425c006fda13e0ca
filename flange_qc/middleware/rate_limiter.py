"""
Rate limiting configuration.

The Limiter instance is created in flange_qc/__init__.py with no default
limits; this module applies limits per blueprint.

Usage:
    from flange_qc.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)

WRITE_LIMIT = "60/minute"
UPLOAD_LIMIT = "10/minute"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Hierarchy / flange endpoints: 60/minute
        - Tool-cert upload:             10/minute
        - Health check:                 exempt

    Rate limiting is disabled in testing mode.
    """
    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    for bp_name in ("hierarchy", "flange"):
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT)(bp)

    bp = app.blueprints.get("upload")
    if bp:
        limiter.limit(UPLOAD_LIMIT)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured: write=%s upload=%s", WRITE_LIMIT, UPLOAD_LIMIT)
