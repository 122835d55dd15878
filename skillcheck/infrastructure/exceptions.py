"""
Custom exception classes for the skill-check reporting service.

Only the I/O collaborators (database, CSV ingestion, exports, document
rendering) raise these. Scoring and rank classification degrade to zero
or the "-" sentinel instead of raising.
"""

from __future__ import annotations

from typing import Any


class SkillCheckError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.user_message = user_message or self._get_default_user_message()

    def _get_default_user_message(self) -> str:
        """Provide a user-friendly version of the error message."""
        return "An unexpected error occurred. Please try again."

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


class ValidationError(SkillCheckError):
    """Raised when input validation fails."""

    def __init__(
        self, field: str, message: str, value: Any = None, details: dict[str, Any] | None = None
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=f"Validation failed for field '{field}': {message}",
            details=details or {"field": field, "value": value},
            user_message=f"Invalid {field.replace('_', ' ')}: {message}",
        )


class MultipleValidationError(SkillCheckError):
    """Raised when several fields of one input fail validation."""

    def __init__(self, errors: list[ValidationError]):
        self.validation_errors = errors
        messages = [f"{e.field}: {e.message}" for e in errors]
        super().__init__(
            message=f"Multiple validation errors: {'; '.join(messages)}",
            details={
                "errors": [
                    {"field": e.field, "message": e.message, "value": e.value} for e in errors
                ]
            },
            user_message="Please correct the following errors and try again.",
        )


class DatabaseError(SkillCheckError):
    """Raised when database operations fail."""

    def __init__(self, message: str, operation: str, details: dict[str, Any] | None = None):
        self.operation = operation
        super().__init__(
            message=f"Database error during {operation}: {message}",
            details=details or {"operation": operation},
            user_message="A database error occurred. Please try again in a moment.",
        )


class ConnectionError(DatabaseError):
    """Raised when the database cannot be reached."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message=message, operation="connection", details=details)
        self.user_message = (
            "Unable to connect to the database. Please check your connection and try again."
        )


class IntegrityError(DatabaseError):
    """Raised when database integrity constraints are violated."""

    def __init__(
        self,
        message: str,
        constraint: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.constraint = constraint
        super().__init__(
            message=message,
            operation="integrity_check",
            details=details or {"constraint": constraint},
        )
        if constraint and "unique" in constraint.lower():
            self.user_message = "This customer number already exists."
        elif constraint and "foreign" in constraint.lower():
            self.user_message = "Referenced customer no longer exists. Please refresh and try again."


class CustomerNotFoundError(SkillCheckError):
    """Raised when a customer id or number does not resolve."""

    def __init__(self, customer_ref: int | str):
        self.customer_ref = customer_ref
        super().__init__(
            message=f"Customer {customer_ref!r} not found",
            details={"customer": customer_ref},
            user_message="The selected customer could not be found.",
        )


class SkillCheckNotFoundError(SkillCheckError):
    """Raised when a customer has no skill-check records to report on."""

    def __init__(self, customer_id: int):
        self.customer_id = customer_id
        super().__init__(
            message=f"No skill checks recorded for customer {customer_id}",
            details={"customer_id": customer_id},
            user_message="No skill-check results have been imported for this customer yet.",
        )


class ConfigurationError(SkillCheckError):
    """Raised when configuration or the static item tables are invalid."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            details=details or {"config_key": config_key},
            user_message="Configuration error. Please check your settings.",
        )


class ImportError(SkillCheckError):
    """Raised when a CSV file cannot be read at all."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.file_path = file_path
        super().__init__(
            message=message,
            details=details or {"file_path": file_path},
            user_message="Import failed. Please check your CSV file and try again.",
        )


class ExportError(SkillCheckError):
    """Raised when data export fails."""

    def __init__(
        self,
        message: str,
        export_format: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.export_format = export_format
        super().__init__(
            message=message,
            details=details or {"export_format": export_format},
            user_message="Export failed. Please try again or choose a different format.",
        )


class RenderError(SkillCheckError):
    """Raised when the printable report cannot be produced."""

    def __init__(
        self,
        message: str,
        document: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.document = document
        super().__init__(
            message=message,
            details=details or {"document": document},
            user_message="The report could not be generated. Please try again.",
        )


def handle_database_error(e: Exception, operation: str = "database operation") -> DatabaseError:
    """
    Convert generic database exceptions to appropriate custom exceptions.

    Example:
        >>> try:
        ...     session.commit()
        >>> except Exception as e:
        ...     raise handle_database_error(e, "commit transaction")
    """
    error_msg = str(e).lower()

    if "connection" in error_msg or "timeout" in error_msg:
        return ConnectionError(str(e))
    elif "unique constraint" in error_msg or "duplicate" in error_msg:
        return IntegrityError(str(e), constraint="unique")
    elif "foreign key" in error_msg or "foreign_key" in error_msg:
        return IntegrityError(str(e), constraint="foreign_key")
    else:
        return DatabaseError(str(e), operation)


def create_user_friendly_error_message(error: Exception) -> str:
    """
    Create a user-friendly error message from any exception.

    Example:
        >>> error = ValidationError("customer_number", "cannot be empty")
        >>> create_user_friendly_error_message(error)
        'Invalid customer number: cannot be empty'
    """
    if isinstance(error, SkillCheckError):
        return error.user_message

    error_type = type(error).__name__
    messages = {
        "ValueError": "Invalid input provided. Please check your data and try again.",
        "KeyError": "Required information is missing. Please check your input.",
        "TypeError": "Incorrect data type provided. Please check your input format.",
    }
    return messages.get(
        error_type, "An unexpected error occurred. Please try again or contact support."
    )


def log_error_details(error: Exception, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create structured error details for logging.

    Example:
        >>> error = DatabaseError("Connection failed", "connect")
        >>> details = log_error_details(error, {"customer_id": 123})
        >>> details["error_type"]
        'DatabaseError'
    """
    details = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context or {},
    }

    if isinstance(error, SkillCheckError):
        details.update({"user_message": error.user_message, "error_details": error.details})

    return details
