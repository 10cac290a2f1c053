from __future__ import annotations

from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager, current_user
from flask_migrate import Migrate
from flask_session import Session
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect

__all__ = [
    "db",
    "migrate",
    "csrf",
    "cache",
    "limiter",
    "server_session",
    "login_manager",
]

db = SQLAlchemy()
migrate = Migrate(compare_type=True, render_as_batch=True)
csrf = CSRFProtect()
cache = Cache()


def _limiter_key_func():
    """Use per-user keys for authenticated traffic; fall back to IP address."""
    if current_user and current_user.is_authenticated:
        user_id = current_user.get_id()
        if user_id:
            return f"user:{user_id}"
    return get_remote_address()


# Default limits come from RATELIMIT_DEFAULT in config.
limiter = Limiter(key_func=_limiter_key_func)
server_session = Session()

login_manager = LoginManager()
login_manager.login_message = "Please log in to access this page."
login_manager.login_message_category = "info"
