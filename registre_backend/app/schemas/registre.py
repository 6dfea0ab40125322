# registre_backend/app/schemas/registre.py
from __future__ import annotations

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class Period(BaseModel):
    """Time window of an export. Bounds are kept in request order."""

    date_debut: datetime
    date_fin: datetime

    @property
    def duration_seconds(self) -> float:
        return abs((self.date_fin - self.date_debut).total_seconds())

    @property
    def lower(self) -> datetime:
        return min(self.date_debut, self.date_fin)

    @property
    def upper(self) -> datetime:
        return max(self.date_debut, self.date_fin)


class ExportConfig(BaseModel):
    """Limits for one export kind, as stored in ``export_configurations``."""

    model_config = ConfigDict(from_attributes=True)

    limite_fiches: int = Field(ge=0)
    delai_retry: int = Field(ge=0)
    limite_plage_horaire: int = Field(ge=0)


class DemandToken(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    sub: str
    delai_retry: int
    created_at: datetime


class ServiceNode(BaseModel):
    id: int
    service_rpsi_id: Optional[str] = None
    libelle: str
    abreviation: Optional[str] = None
    service_hierarchie: Optional[str] = None
    sub_services: List[ServiceNode] = Field(default_factory=list)


class FlattenedServiceView(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    service_rpsi_id: Optional[str] = None
    libelle: str
    abreviation: Optional[str] = None
    service_hierarchie: Optional[str] = None


class EvenementRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    numero: Optional[str] = None
    unite_rpsi_id: str
    date_connaissance_faits: datetime
    libelle: str
    description: Optional[str] = None
    activite_id: Optional[int] = None


class MentionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_id: int
    date_creation: datetime
    auteur: Optional[str] = None
    contenu: str


class PriseDeServiceRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_id: int
    agent: str
    date_debut: datetime
    date_fin: Optional[datetime] = None
    commentaire: Optional[str] = None


RecordT = TypeVar("RecordT")


class RecordPage(BaseModel, Generic[RecordT]):
    """Envelope returned by every record source."""

    data: List[RecordT] = Field(default_factory=list)


class AggregatedExportData(BaseModel):
    evenements: List[EvenementRecord] = Field(default_factory=list)
    mentions: List[MentionRecord] = Field(default_factory=list)
    prises_de_service: List[PriseDeServiceRecord] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.evenements) + len(self.mentions) + len(self.prises_de_service)


class ExportQueryOptions(BaseModel):
    """Request options passed through to the record sources."""

    fuseau_horaire: str
    activite_ids: Optional[List[int]] = None


class DocumentTemplate(BaseModel):
    """Default page definition: header and footer data of the register."""

    fuseau_horaire: str
    numero: str = ""
    service_path: str = ""
    title: str = "Registre"


class ReportDocument(BaseModel):
    content: bytes
    file_name: str


class RequestUser(BaseModel):
    """Requester identity read from the bearer token claims."""

    sub: str
    premier_noeud_tague: Optional[int] = None
