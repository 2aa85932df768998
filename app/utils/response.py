"""
Standard API response format and utility functions.
"""

from typing import Any, Optional


def success_response(data: Any = None, message: str = "Success") -> dict:
    return {"success": True, "data": data, "message": message}


def error_response(error: str = "Error", details: Optional[str] = None) -> dict:
    body = {"error": error}
    if details:
        body["details"] = details
    return body
