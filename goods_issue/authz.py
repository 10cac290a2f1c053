from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from .extensions import db, login_manager
from .utils.api_responses import APIResponse
from .utils.error_messages import ErrorMessages as EM

logger = logging.getLogger(__name__)


def configure_login_manager(app):
    """Attach Flask-Login handlers; unauthenticated API calls get a JSON 401."""
    login_manager.init_app(app)
    login_manager.login_message = EM.AUTH_REQUIRED
    login_manager.login_message_category = "info"

    @login_manager.unauthorized_handler
    def _unauthorized():
        return APIResponse.error(EM.AUTH_REQUIRED, status_code=401)

    @login_manager.user_loader
    def load_user(user_id: str):
        from .models import User

        try:
            user = db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            return None
        except SQLAlchemyError as exc:
            logger.warning("User lookup failed during session load: %s", exc)
            db.session.rollback()
            return None

        if not user or not user.is_active:
            return None
        return user
