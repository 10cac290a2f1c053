import logging

logger = logging.getLogger(__name__)


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    from .blueprints.auth import auth_bp
    from .blueprints.issues import issues_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(issues_bp)
    logger.debug("Registered blueprints: %s", ", ".join(sorted(app.blueprints)))
