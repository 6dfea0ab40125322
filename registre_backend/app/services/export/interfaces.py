"""Collaborator contracts of the register export.

Each data store, renderer and content generator the export needs is reached
through one of these Protocols, so the core can be exercised with in-memory
fakes and the SQLAlchemy/WeasyPrint implementations stay at the edge.

Invariants:
    - ``DemandStore.insert_new_demand`` is one atomic conditional insert;
      ``None`` means an unexpired demand already exists for the requester.
    - Record sources are read-only and safe to call concurrently.
"""

from typing import Any, Dict, Iterable, Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ...schemas.registre import (
    AggregatedExportData,
    DemandToken,
    DocumentTemplate,
    ExportConfig,
    ExportQueryOptions,
    FlattenedServiceView,
    Period,
    RecordPage,
    ServiceNode,
)


class ConfigSource(Protocol):
    async def get_export_config(self, kind: str) -> ExportConfig: ...


class DemandStore(Protocol):
    async def insert_new_demand(
        self, sub: str, delai_retry: int, session: AsyncSession
    ) -> Optional[DemandToken]: ...


class ServiceRegistry(Protocol):
    async def load_service_sub_tree(
        self, root_id: int, session: AsyncSession
    ) -> Optional[ServiceNode]: ...


class RecordSource(Protocol):
    async def get_all_for_export(
        self,
        unite_ids: Sequence[Any],
        periode: Period,
        options: ExportQueryOptions,
    ) -> RecordPage: ...


class ActiviteSource(Protocol):
    async def get_libelles(self, ids: Iterable[int]) -> Dict[int, str]: ...


class DocumentBuilder(Protocol):
    template: DocumentTemplate
    content: list


class DocumentEngine(Protocol):
    def new_document(self, template: DocumentTemplate) -> DocumentBuilder: ...

    def render(self, builder: DocumentBuilder) -> bytes: ...


class ContentGenerator(Protocol):
    async def build_register_content(
        self,
        aggregated: AggregatedExportData,
        services: Sequence[FlattenedServiceView],
        activite_source: ActiviteSource,
        fuseau_horaire: str,
        periode: Optional[Period] = None,
    ) -> Dict[str, Any]: ...
