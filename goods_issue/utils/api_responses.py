from flask import jsonify, request, Response
from typing import Any, Dict, Optional, Tuple

from ..services.feedback import Feedback


class APIResponse:
    """Standardized JSON envelopes for the issue API"""

    @staticmethod
    def success(data: Any = None, message: str = "Success", status_code: int = 200,
                feedback: Optional[Feedback] = None) -> Tuple[Response, int]:
        response_data = {
            'success': True,
            'message': message,
            'data': data,
            'feedback': feedback.to_dict() if feedback else None,
        }
        return jsonify(response_data), status_code

    @staticmethod
    def error(message: str, errors: Optional[Dict] = None, status_code: int = 400,
              feedback: Optional[Feedback] = None, data: Any = None) -> Tuple[Response, int]:
        response_data = {
            'success': False,
            'message': message,
            'errors': errors or {},
            'feedback': (feedback or Feedback.error(message)).to_dict(),
        }
        if data is not None:
            response_data['data'] = data
        return jsonify(response_data), status_code

    @staticmethod
    def validation_error(message: str, feedback: Optional[Feedback] = None, data: Any = None):
        """422 with the domain message surfaced as feedback"""
        return APIResponse.error(message=message, status_code=422, feedback=feedback, data=data)

    @staticmethod
    def not_found(resource: str = "Resource") -> Tuple[Response, int]:
        return APIResponse.error(message=f"{resource} not found", status_code=404)

    @staticmethod
    def conflict(message: str, feedback: Optional[Feedback] = None) -> Tuple[Response, int]:
        return APIResponse.error(message=message, status_code=409, feedback=feedback)

    @staticmethod
    def handle_request_content() -> Dict:
        """Smart request content handling"""
        if request.is_json:
            return request.get_json(silent=True) or {}
        elif request.form:
            return request.form.to_dict()
        else:
            return {}


__all__ = ['APIResponse']
