"""
Unit Tests for the exception hierarchy
"""
import pytest

from appcraft.core.exceptions import (
    AppCraftError,
    CodeGenerationError,
    InvalidBodyError,
    InvalidMethodError,
    InvalidPromptError,
    InvalidRequestError,
    InvalidUrlError,
    MissingUrlError,
    ProxyValidationError,
    error_response,
)
from appcraft.schemas.proxy import ErrorKind


class TestAppCraftError:
    """Base exception"""

    def test_defaults(self):
        error = AppCraftError("Something broke")
        assert error.code == "INTERNAL_ERROR"
        assert error.details == {}
        assert str(error) == "Something broke"

    def test_to_dict(self):
        error = AppCraftError("msg", code="X", details={"a": 1})
        assert error.to_dict() == {"code": "X", "message": "msg", "details": {"a": 1}}

    def test_error_response(self):
        assert error_response(InvalidPromptError()) == {
            "success": False,
            "error": {"code": "INVALID_PROMPT", "message": "Prompt is required", "details": {}},
        }


class TestValidationErrors:
    """Each validation error maps onto an ErrorKind"""

    @pytest.mark.parametrize("error,kind", [
        (MissingUrlError(), ErrorKind.MISSING_URL),
        (InvalidUrlError("x"), ErrorKind.INVALID_URL),
        (InvalidMethodError("TRACE", ["GET"]), ErrorKind.INVALID_METHOD),
        (InvalidBodyError("bad"), ErrorKind.INVALID_BODY),
        (InvalidRequestError([]), ErrorKind.INVALID_REQUEST),
    ])
    def test_kind(self, error, kind):
        assert isinstance(error, ProxyValidationError)
        assert ErrorKind(error.kind) is kind

    def test_invalid_url_reason_optional(self):
        assert InvalidUrlError("x").details == {"url": "x"}
        assert InvalidUrlError("x", "no host").details == {"url": "x", "reason": "no host"}

    def test_invalid_method_details(self):
        error = InvalidMethodError("TRACE", ["GET", "POST"])
        assert error.details == {"method": "TRACE", "allowed_methods": ["GET", "POST"]}


class TestCodeGenerationError:
    """Chat path failures"""

    def test_status_in_details(self):
        error = CodeGenerationError("API responded with status 500", status=500)
        assert error.code == "CODE_GENERATION_FAILED"
        assert error.details == {"status": 500}

    def test_without_status(self):
        assert CodeGenerationError("boom").details == {}
