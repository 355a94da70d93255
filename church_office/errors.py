"""
Application Errors

Every exception the package raises, and the mapping from any of them
to the text an operator sees. The storage errors are re-exported by
`church_office.services.storage`, next to the gateway that raises them.

DESIGN DECISION: Messages shown to operators are Spanish; log lines
and exception internals stay English. Every storage failure is shown
with the same generic message and logged with its details.
"""

from typing import Optional

from church_office.models.records import ValidationResult


MISSING_FIELDS_MESSAGE = "Por favor complete todos los campos obligatorios"
NOT_POSITIVE_MESSAGE = "El valor debe ser mayor a 0"
NO_ACTIVE_PERIOD_MESSAGE = "No hay un mes activo seleccionado"
MISSING_CREDENTIALS_MESSAGE = "Por favor complete todos los campos"
INVALID_CREDENTIALS_MESSAGE = "Cédula o contraseña incorrecta"
STORAGE_FAILURE_MESSAGE = "No se pudo completar la operación. Intente nuevamente."


# =============================================================================
# STORAGE ERRORS - raised by the persistence gateway
# =============================================================================

class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


# =============================================================================
# SERVICE ERRORS - raised before the gateway is reached
# =============================================================================

class ChurchOfficeError(Exception):
    """Base exception for errors raised by the services."""

    user_message: str = STORAGE_FAILURE_MESSAGE


class ValidationError(ChurchOfficeError):
    """
    A form failed validation.

    Raised before any gateway call; carries the full ValidationResult.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        errors = [issue for issue in result.issues if issue.severity == "error"]
        self.user_message = errors[0].message if errors else MISSING_FIELDS_MESSAGE
        super().__init__(
            f"{result.record_type} failed validation: "
            + ", ".join(f"{issue.field} ({issue.issue_type})" for issue in errors)
        )


class NoActivePeriodError(ChurchOfficeError):
    """A period-scoped write was attempted with no period to write into."""

    user_message = NO_ACTIVE_PERIOD_MESSAGE


class InvalidCredentialsError(ChurchOfficeError):
    """The session gate rejected a login."""

    def __init__(self, message: str = INVALID_CREDENTIALS_MESSAGE):
        self.user_message = message
        super().__init__(message)


def user_message(exc: Exception, default: Optional[str] = None) -> str:
    """
    Text to show an operator for an exception caught at a screen.

    Validation and login errors show their own message; storage
    failures (and anything unexpected) show one generic message.
    """
    if isinstance(exc, ChurchOfficeError):
        return exc.user_message
    if isinstance(exc, StorageError):
        return STORAGE_FAILURE_MESSAGE
    return default or STORAGE_FAILURE_MESSAGE
