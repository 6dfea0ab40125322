# registre_backend/app/services/__init__.py
"""
Services package for the application.

``data_retrieval`` holds the database-backed stores; ``export`` holds the
register export logic that runs on top of them.
"""

from . import data_retrieval, export
from .export import RegistreExportService

__all__ = [
    "data_retrieval",
    "export",
    "RegistreExportService",
]
