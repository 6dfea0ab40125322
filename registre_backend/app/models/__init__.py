# app/models/__init__.py

from .base import Base, SCHEMA_NAME
from .services import Service
from .registre import Activite, Evenement, MentionDeService, PriseDeService
from .exports import ExportConfiguration, ExportDemand

__all__ = [
    "Base",
    "SCHEMA_NAME",
    "Service",
    "Activite",
    "Evenement",
    "MentionDeService",
    "PriseDeService",
    "ExportConfiguration",
    "ExportDemand",
]
