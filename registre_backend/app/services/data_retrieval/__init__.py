# registre_backend/app/services/data_retrieval/__init__.py

"""
Data retrieval services package.

SQLAlchemy implementations of the stores the register export reads from and
writes its throttling lease to.
"""

from .export_data import ExportConfigData, ExportDemandData
from .service_tree_data import ServiceTreeData
from .record_data import (
    ActiviteData,
    EvenementData,
    MentionDeServiceData,
    PriseDeServiceData,
)

__all__ = [
    "ExportConfigData",
    "ExportDemandData",
    "ServiceTreeData",
    "EvenementData",
    "MentionDeServiceData",
    "PriseDeServiceData",
    "ActiviteData",
]
