"""JSON login/logout for the issue API."""
from __future__ import annotations

import logging

from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy import func

from ...extensions import limiter
from ...models import User
from ...services.collaborator_directory import CollaboratorDirectory
from ...utils.api_responses import APIResponse
from ...utils.error_messages import ErrorMessages as EM
from . import auth_bp

logger = logging.getLogger(__name__)


def _user_payload(user: User) -> dict:
    approver = CollaboratorDirectory.match_by_email(user.email)
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'approver_id': approver.identification if approver else None,
    }


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("60/minute")
def login():
    data = APIResponse.handle_request_content()
    identifier = (data.get('email') or data.get('username') or '').strip()
    password = data.get('password') or ''
    if not identifier or not password:
        return APIResponse.error(EM.AUTH_INVALID_CREDENTIALS, status_code=400)

    user = User.query.filter(
        (func.lower(User.email) == identifier.lower()) | (User.username == identifier)
    ).first()
    if user is None or not user.is_active or not user.check_password(password):
        logger.info("Failed login attempt for %s", identifier)
        return APIResponse.error(EM.AUTH_INVALID_CREDENTIALS, status_code=401)

    login_user(user, remember=bool(data.get('remember')))
    logger.info("User %s logged in", user.id)
    return APIResponse.success(_user_payload(user), message="Logged in")


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logger.info("User %s logged out", current_user.get_id())
    logout_user()
    return APIResponse.success(message="Logged out")


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    return APIResponse.success(_user_payload(current_user))
