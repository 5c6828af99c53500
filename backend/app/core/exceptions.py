"""
Records Exception Classes
Typed errors shared by services and the HTTP layer

- Error Category / Error Code taxonomy
- HTTP status mapping for the API exception handler
- Storage errors are never retried
"""

from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """Error category for taxonomy"""
    AUTHENTICATION = "authentication"  # Missing or bad credentials
    VALIDATION = "validation"          # Malformed or empty input
    LOOKUP = "lookup"                  # Missing / foreign resources
    STORAGE = "storage"                # Transaction failures


class ErrorCode(str, Enum):
    """Standardized error codes"""
    # Authentication errors (1xxx)
    UNAUTHENTICATED = "REC1001"
    INVALID_TOKEN = "REC1002"

    # Validation errors (2xxx)
    INVALID_INPUT = "REC2001"
    ACCOUNT_EXISTS = "REC2002"

    # Lookup errors (3xxx)
    NOT_FOUND = "REC3001"

    # Storage errors (4xxx)
    STORAGE_FAILURE = "REC4001"


class RecordsError(Exception):
    """Base exception for records service errors"""

    category: ErrorCategory = ErrorCategory.STORAGE
    code: ErrorCode = ErrorCode.STORAGE_FAILURE
    http_status: int = 500

    def __init__(self, message: str, operation: Optional[str] = None):
        self.message = message
        self.operation = operation
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/API response"""
        return {
            "error": self.message,
            "code": self.code.value,
            "category": self.category.value,
        }


class Unauthenticated(RecordsError):
    """No credential supplied, or credentials did not match an account"""

    category = ErrorCategory.AUTHENTICATION
    code = ErrorCode.UNAUTHENTICATED
    http_status = 401

    def __init__(self, message: str = "Unauthorized", operation: Optional[str] = None):
        super().__init__(message, operation)


class InvalidToken(RecordsError):
    """Token present but unverifiable (bad signature, expired, bad claims)"""

    category = ErrorCategory.AUTHENTICATION
    code = ErrorCode.INVALID_TOKEN
    http_status = 403

    def __init__(self, message: str = "Invalid token", operation: Optional[str] = None):
        super().__init__(message, operation)


class InvalidInput(RecordsError):
    """Empty or malformed row data"""

    category = ErrorCategory.VALIDATION
    code = ErrorCode.INVALID_INPUT
    http_status = 400


class AccountExists(RecordsError):
    """Registration for a brand/role pair that is already taken"""

    category = ErrorCategory.VALIDATION
    code = ErrorCode.ACCOUNT_EXISTS
    http_status = 400

    def __init__(self, message: str = "User already exists", operation: Optional[str] = None):
        super().__init__(message, operation)


class NotFound(RecordsError):
    """
    No draft, no snapshots for a year, or a snapshot the caller does not own.

    Foreign snapshots are reported as missing so their existence is not
    revealed.
    """

    category = ErrorCategory.LOOKUP
    code = ErrorCode.NOT_FOUND
    http_status = 404


class StorageFailure(RecordsError):
    """
    Underlying transaction failed and was rolled back.
    This error should NOT be retried: writes are user initiated.
    """

    category = ErrorCategory.STORAGE
    code = ErrorCode.STORAGE_FAILURE
    http_status = 500
