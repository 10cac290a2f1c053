"""
Centralized user-facing messages for goods issue forms.

Usage:
    from goods_issue.utils.error_messages import ErrorMessages as EM

    EM.STOCK_EXCEEDED.format(item='Paper A4', available=10)
"""


class ErrorMessages:
    """User-facing error messages - never contain HTML or special characters"""

    # ==================== AUTHENTICATION ====================
    AUTH_REQUIRED = "Please log in to access this page."
    AUTH_INVALID_CREDENTIALS = "Invalid e-mail or password."

    # ==================== FORM VALIDATION ====================
    MISSING_RESPONSIBLE = "Select the approver and the person receiving the items."
    MISSING_REQUEST_NUMBER = "A request number is required."
    MISSING_ASSET = "Please select an asset."
    NO_VALID_ITEMS = "Add at least one item with a quantity greater than 0."
    STOCK_EXCEEDED = "Item {item} only has {available} available. Please adjust the quantity."
    ROW_NOT_FOUND = "Row {index} does not exist."
    FIELD_NOT_EDITABLE = "Field '{field}' cannot be edited directly."

    # ==================== SUBMISSION ====================
    SUBMISSION_FAILED = "Error processing the request."
    SUBMISSION_IN_PROGRESS = "A submission for this form is already in progress."
    FINALIZE_FAILED = "Error finalizing the issue."
    ISSUE_NOT_FOUND = "Issue {issue_id} not found."

    # ==================== LOOKUPS ====================
    UNKNOWN_FORM = "Unknown issue form: {slug}"
    CATALOG_UNAVAILABLE = "Error loading inventory."
    DIRECTORY_UNAVAILABLE = "Error loading collaborators."


class SuccessMessages:
    ISSUE_RECORDED = "Issue recorded ({receipt})."
    ISSUE_FINALIZED = "Issue finalized successfully."


class WarningMessages:
    DUPLICATE_ITEM = "This item has already been added to the list."
    NO_STOCK = "There is no stock available for this item."
    INSUFFICIENT_STOCK = "Insufficient stock: only {available} available."
