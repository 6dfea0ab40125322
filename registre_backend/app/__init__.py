# registre_backend/app/__init__.py

"""Main application package of the register export service."""

from .core import (
    AppError,
    RegistreExportError,
    MissingFieldError,
    MalformedFieldError,
    PeriodTooLargeError,
    DuplicateRequestError,
    ExportTooLargeError,
    InvalidScopeError,
)

from .services import data_retrieval, export

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
]
