# registre_backend/app/services/export/registre_export_service.py
"""
Service running one register export request end to end.
"""
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.constants import REGISTRE_EXPORT_TYPE
from ...core.exceptions import InvalidScopeError
from ...schemas.registre import ExportQueryOptions, ReportDocument, RequestUser
from .admission_guard import ExportAdmissionGuard
from .interfaces import ConfigSource, ServiceRegistry
from .record_aggregator import RecordAggregator
from .report_assembler import ReportAssembler
from .tree_flattener import flatten_service_tree

logger = logging.getLogger(__name__)


class RegistreExportService:
    """
    Admission, scope resolution, aggregation and assembly of a register.

    The session passed to ``export`` carries the request transaction: the
    export demand is written through it and the caller commits or rolls back.
    """

    def __init__(
        self,
        config_source: ConfigSource,
        admission_guard: ExportAdmissionGuard,
        service_registry: ServiceRegistry,
        aggregator: RecordAggregator,
        assembler: ReportAssembler,
        page_factory,
        export_type: str = REGISTRE_EXPORT_TYPE,
    ):
        self.config_source = config_source
        self.admission_guard = admission_guard
        self.service_registry = service_registry
        self.aggregator = aggregator
        self.assembler = assembler
        self.page_factory = page_factory
        self.export_type = export_type

    async def export(
        self,
        user: RequestUser,
        plage_horaire: Optional[str],
        fuseau_horaire: Optional[str],
        session: AsyncSession,
        activite_ids: Optional[List[int]] = None,
    ) -> ReportDocument:
        """
        Produce the register PDF for the requester's service scope.

        Raises:
            RegistreExportError subclasses on rejection; collaborator failures
            propagate unchanged.
        """
        config = await self.config_source.get_export_config(self.export_type)

        _, periode = await self.admission_guard.admit(
            user.sub, plage_horaire, fuseau_horaire, config, session
        )
        fuseau_horaire = fuseau_horaire.strip()

        if user.premier_noeud_tague is None:
            raise InvalidScopeError()
        root = await self.service_registry.load_service_sub_tree(
            user.premier_noeud_tague, session
        )
        if root is None:
            raise InvalidScopeError(user.premier_noeud_tague)
        services = flatten_service_tree(root)

        options = ExportQueryOptions(
            fuseau_horaire=fuseau_horaire, activite_ids=activite_ids
        )
        aggregated = await self.aggregator.aggregate(
            services, periode, options, config.limite_fiches
        )

        page = self.page_factory(
            fuseau_horaire=fuseau_horaire,
            service_path=root.service_hierarchie or root.libelle,
        )
        return await self.assembler.assemble(
            aggregated, services, page, user.sub, periode=periode
        )
