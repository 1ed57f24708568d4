"""
Standardized response helpers shared by routers and exception handlers
"""
from typing import Any, Dict, Optional
from datetime import datetime


def error_response(
    message: str,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create an error response"""
    return {
        "success": False,
        "message": message,
        "error_code": error_code,
        "details": details,
        "timestamp": datetime.utcnow().isoformat()
    }


def page_count(total_items: int, per_page: int) -> int:
    """Number of pages needed to show total_items, per_page at a time"""
    return (total_items + per_page - 1) // per_page
