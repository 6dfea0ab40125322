# registre_backend/app/schemas/__init__.py
from .registre import (
    Period,
    ExportConfig,
    DemandToken,
    ServiceNode,
    FlattenedServiceView,
    EvenementRecord,
    MentionRecord,
    PriseDeServiceRecord,
    RecordPage,
    AggregatedExportData,
    ExportQueryOptions,
    DocumentTemplate,
    ReportDocument,
    RequestUser,
)

__all__ = [
    "Period",
    "ExportConfig",
    "DemandToken",
    "ServiceNode",
    "FlattenedServiceView",
    "EvenementRecord",
    "MentionRecord",
    "PriseDeServiceRecord",
    "RecordPage",
    "AggregatedExportData",
    "ExportQueryOptions",
    "DocumentTemplate",
    "ReportDocument",
    "RequestUser",
]
