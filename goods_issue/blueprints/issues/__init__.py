from flask import Blueprint

issues_bp = Blueprint('issues', __name__, url_prefix='/api/issues')

from . import routes  # noqa: E402,F401
