"""
Custom Exceptions for AppCraft
==============================

Use these instead of generic Exception to:
1. Make errors more specific and debuggable
2. Enable proper error handling at API layer
3. Provide meaningful error messages to users

Usage:
    from appcraft.core.exceptions import InvalidUrlError

    if not parsed.host:
        raise InvalidUrlError(target_url, "URL has no host")
"""

from typing import Optional, Any, Dict, List


class AppCraftError(Exception):
    """Base exception for all AppCraft errors"""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Proxy Request Validation Errors (fail fast, never retried)
# ============================================

class ProxyValidationError(AppCraftError):
    """Proxy request descriptor failed validation"""

    kind = "InvalidRequestError"

    def __init__(self, message: str, code: str = "VALIDATION_ERROR",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class InvalidRequestError(ProxyValidationError):
    """Descriptor fields have the wrong type or range"""

    kind = "InvalidRequestError"

    def __init__(self, errors: list):
        super().__init__(
            "Invalid proxy request",
            code="INVALID_REQUEST",
            details={"errors": errors}
        )


class MissingUrlError(ProxyValidationError):
    """No URL supplied"""

    kind = "MissingUrlError"

    def __init__(self):
        super().__init__("URL parameter is required", code="MISSING_URL")


class InvalidUrlError(ProxyValidationError):
    """URL does not resolve to a well-formed absolute address"""

    kind = "InvalidUrlError"

    def __init__(self, url: str, reason: str = ""):
        super().__init__(
            "Invalid URL format",
            code="INVALID_URL",
            details={"url": url, "reason": reason} if reason else {"url": url}
        )


class InvalidMethodError(ProxyValidationError):
    """HTTP method outside the supported set"""

    kind = "InvalidMethodError"

    def __init__(self, method: str, allowed_methods: List[str]):
        super().__init__(
            "Invalid HTTP method",
            code="INVALID_METHOD",
            details={"method": method, "allowed_methods": list(allowed_methods)}
        )
        self.allowed_methods = list(allowed_methods)


class InvalidBodyError(ProxyValidationError):
    """Request body could not be serialized"""

    kind = "InvalidBodyError"

    def __init__(self, reason: str):
        super().__init__(
            "Invalid request body format",
            code="INVALID_BODY",
            details={"reason": reason}
        )


# ============================================
# Code Generation Errors
# ============================================

class CodeGenerationError(AppCraftError):
    """Code generator API did not produce files"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message, code="CODE_GENERATION_FAILED")
        if status is not None:
            self.details["status"] = status


class InvalidPromptError(AppCraftError):
    """Prompt is empty or blank"""

    def __init__(self):
        super().__init__("Prompt is required", code="INVALID_PROMPT")


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: AppCraftError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "error": error.to_dict()
    }
