from .error_messages import ErrorMessages, SuccessMessages, WarningMessages
from .timezone_utils import TimezoneUtils

__all__ = [
    "ErrorMessages",
    "SuccessMessages",
    "WarningMessages",
    "TimezoneUtils",
]
