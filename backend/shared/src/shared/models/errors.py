"""Standard error codes for the Layback Garments API.

All routes raise ApiError with one of these codes; the API layer turns it
into a ToolError JSON body with a matching HTTP status.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standard error codes."""

    # Request validation (ERR_001-ERR_004)
    MISSING_REQUIRED_FIELDS = "ERR_001"
    INVALID_FILE_TYPE = "ERR_002"
    FILE_TOO_LARGE = "ERR_003"
    USER_ALREADY_EXISTS = "ERR_004"

    # Webhook error codes (ERR_WEBHOOK_001-ERR_WEBHOOK_003)
    INVALID_WEBHOOK_SIGNATURE = "ERR_WEBHOOK_001"
    MALFORMED_WEBHOOK_PAYLOAD = "ERR_WEBHOOK_002"
    WEBHOOK_PROCESSING_FAILED = "ERR_WEBHOOK_003"

    # Storage error codes (ERR_DB_001-ERR_DB_002)
    STORE_UNAVAILABLE = "ERR_DB_001"
    STORE_WRITE_FAILED = "ERR_DB_002"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.MISSING_REQUIRED_FIELDS: "Missing required fields",
    ErrorCode.INVALID_FILE_TYPE: "Only PDF, DOC, DOCX files allowed",
    ErrorCode.FILE_TOO_LARGE: "Uploaded file exceeds the maximum allowed size",
    ErrorCode.USER_ALREADY_EXISTS: "Username or email already exists",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Invalid webhook signature",
    ErrorCode.MALFORMED_WEBHOOK_PAYLOAD: "Webhook payload is not valid JSON",
    ErrorCode.WEBHOOK_PROCESSING_FAILED: "Webhook could not be processed",
    ErrorCode.STORE_UNAVAILABLE: "Database is temporarily unavailable",
    ErrorCode.STORE_WRITE_FAILED: "Failed to save data",
}

# Recovery suggestions for API clients
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.MISSING_REQUIRED_FIELDS: "Fill in every required field and resubmit",
    ErrorCode.INVALID_FILE_TYPE: "Upload the resume as a PDF, DOC or DOCX file",
    ErrorCode.FILE_TOO_LARGE: "Upload a file no larger than 5 MB",
    ErrorCode.USER_ALREADY_EXISTS: "Choose a different username or log in",
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: "Verify webhook secret configuration",
    ErrorCode.MALFORMED_WEBHOOK_PAYLOAD: "Send a JSON request body",
    ErrorCode.WEBHOOK_PROCESSING_FAILED: "The provider will redeliver the event",
    ErrorCode.STORE_UNAVAILABLE: "Try again later",
    ErrorCode.STORE_WRITE_FAILED: "Try again later or contact support",
}


class ToolError(BaseModel):
    """Standard error response body."""

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ) -> "ToolError":
        """Create a ToolError from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            A ToolError with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class ApiError(Exception):
    """Exception raised by request handlers.

    Converted to a ToolError response by the API exception handler.
    """

    def __init__(
        self,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ):
        self.code = code
        self.message = ERROR_MESSAGES[code]
        self.recovery = ERROR_RECOVERY[code]
        self.details = details
        super().__init__(self.message)

    def to_tool_error(self) -> ToolError:
        """Convert this exception to a ToolError response body."""
        return ToolError.from_code(self.code, self.details)
