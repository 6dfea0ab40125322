# registre_backend/app/core/__init__.py

from .exceptions import (
    AppError,
    ExportConfigurationError,
    RegistreExportError,
    MissingFieldError,
    MalformedFieldError,
    PeriodTooLargeError,
    DuplicateRequestError,
    ExportTooLargeError,
    InvalidScopeError,
)


__all__ = [
    "AppError",
    "ExportConfigurationError",
    "RegistreExportError",
    "MissingFieldError",
    "MalformedFieldError",
    "PeriodTooLargeError",
    "DuplicateRequestError",
    "ExportTooLargeError",
    "InvalidScopeError",
]
