"""
Centralized Error Code Definitions
Provides consistent error bodies for the invoice consolidation API
"""

from enum import Enum
from typing import Dict, Optional, Tuple


class ErrorCode(str, Enum):
    """Standardized error codes for API responses"""

    # Request Errors (1000-1099)
    MISSING_FIELDS = "REQUEST_1000"
    INVALID_YEAR_OR_MONTH = "REQUEST_1001"
    METHOD_NOT_ALLOWED = "REQUEST_1002"

    # Internal Errors (5000-5099)
    INTERNAL_SERVER_ERROR = "INTERNAL_5000"


class ErrorMessage:
    """User-friendly error messages and suggested actions"""

    MESSAGES: Dict[ErrorCode, Dict[str, str]] = {
        ErrorCode.MISSING_FIELDS: {
            "message": "Year, month, and email are required.",
            "suggestion": "Send a JSON body with year, month and email",
            "status_code": 400
        },
        ErrorCode.INVALID_YEAR_OR_MONTH: {
            "message": "Invalid year or month.",
            "suggestion": "Year and month must be numbers (month 1-12)",
            "status_code": 400
        },
        ErrorCode.METHOD_NOT_ALLOWED: {
            "message": "Method not allowed",
            "suggestion": "Use POST",
            "status_code": 405
        },
        ErrorCode.INTERNAL_SERVER_ERROR: {
            "message": "Internal Server Error.",
            "suggestion": "Please try again. Contact support if issue persists",
            "status_code": 500
        },
    }

    @classmethod
    def get_error_response(cls, error_code: ErrorCode, details: Optional[str] = None) -> Tuple[Dict, int]:
        """
        Get standardized error response

        Args:
            error_code: Error code from ErrorCode enum
            details: Optional additional details

        Returns:
            (response body, HTTP status code)
        """
        error_info = cls.MESSAGES.get(error_code, {
            "message": "An error occurred",
            "suggestion": "Please try again",
            "status_code": 500
        })

        response = {
            "success": False,
            "message": error_info["message"],
            "error": {
                "code": error_code.value,
                "message": error_info["message"],
                "suggestion": error_info["suggestion"]
            }
        }

        if details:
            response["error"]["details"] = details

        return response, error_info["status_code"]

    @classmethod
    def get_status_code(cls, error_code: ErrorCode) -> int:
        """Get HTTP status code for error"""
        return cls.MESSAGES.get(error_code, {}).get("status_code", 500)
