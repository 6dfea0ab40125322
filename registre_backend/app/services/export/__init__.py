# registre_backend/app/services/export/__init__.py
"""Register export package public API.

Example
-------
from registre_backend.app.services.export import RegistreExportService
"""

from .admission_guard import ExportAdmissionGuard, parse_plage_horaire
from .tree_flattener import flatten_service_tree, project_service
from .record_aggregator import RecordAggregator
from .report_assembler import ReportAssembler, pdf_name_generator
from .registre_content import RegisterContentGenerator
from .pdf_generator import RegisterPdfEngine
from .registre_export_service import RegistreExportService

__all__ = [
    "ExportAdmissionGuard",
    "parse_plage_horaire",
    "flatten_service_tree",
    "project_service",
    "RecordAggregator",
    "ReportAssembler",
    "pdf_name_generator",
    "RegisterContentGenerator",
    "RegisterPdfEngine",
    "RegistreExportService",
]
