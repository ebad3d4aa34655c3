#!/usr/bin/env python3
"""
Order Forms — Application Entry Point
Creates the Flask app and registers the orders Blueprint.
"""

import os
import logging
from flask import Flask


def create_app(profile=None, template_resolver=None, setup_logs=True):
    """Application factory.

    Args:
        profile: Submitter Profile (default: load_config())
        template_resolver: Callable returning purchase-form bytes
            (default: read the profile's purchase_form_path)
        setup_logs: Configure root logging (tests pass False)
    """
    from orderforms.core.config import load_config
    from orderforms.core.logging_config import setup_logging
    from orderforms.core.paths import validate_paths

    if setup_logs:
        setup_logging()
    log = logging.getLogger("orderforms")

    app = Flask(__name__)
    app.config["ORDERFORMS_PROFILE"] = profile or load_config()
    app.config["ORDERFORMS_TEMPLATE_RESOLVER"] = template_resolver

    missing = app.config["ORDERFORMS_PROFILE"].missing_contact_fields()
    if missing:
        log.warning("Profile incomplete, /api/orders/generate will refuse: %s", ", ".join(missing))

    # ── Path self-check at boot ───────────────────────────────────────────────
    if template_resolver is None:
        checks = validate_paths()
        if not checks["ok"]:
            log.error("STARTUP: %d path check(s) FAILED: review logs", len(checks["errors"]))

    from orderforms.api.routes import bp
    app.register_blueprint(bp)
    return app


# For gunicorn: gunicorn "app:create_app()"
if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    create_app().run(host="0.0.0.0", port=port, debug=False)
