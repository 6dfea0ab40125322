# registre_backend/__init__.py

"""
Backend package of the register export service.
Exposes the core modules and components.
"""

from .app import (
    AppError,
    RegistreExportError,
    MissingFieldError,
    MalformedFieldError,
    PeriodTooLargeError,
    DuplicateRequestError,
    ExportTooLargeError,
    InvalidScopeError,
    data_retrieval,
    export,
)

from .app.config import Settings, get_settings, validate_settings, setup_logging

__all__ = [
    "AppError",
    "RegistreExportError",
    "MissingFieldError",
    "MalformedFieldError",
    "PeriodTooLargeError",
    "DuplicateRequestError",
    "ExportTooLargeError",
    "InvalidScopeError",
    "data_retrieval",
    "export",
    "Settings",
    "get_settings",
    "validate_settings",
    "setup_logging",
]
