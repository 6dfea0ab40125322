"""Content block of the register: one section per record type."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ...schemas.registre import AggregatedExportData, FlattenedServiceView, Period
from .interfaces import ActiviteSource
from .pdf_generator import format_local

logger = logging.getLogger(__name__)

EMPTY_SECTION_LABEL = "Aucune fiche"


class RegisterContentGenerator:
    """Builds the register content block consumed by the PDF template."""

    async def build_register_content(
        self,
        aggregated: AggregatedExportData,
        services: Sequence[FlattenedServiceView],
        activite_source: ActiviteSource,
        fuseau_horaire: str,
        periode: Optional[Period] = None,
    ) -> Dict[str, Any]:
        activite_ids = {
            e.activite_id for e in aggregated.evenements if e.activite_id is not None
        }
        libelles = await activite_source.get_libelles(activite_ids) if activite_ids else {}

        service_labels = {s.id: s.abreviation or s.libelle for s in services}
        unite_labels = {
            s.service_rpsi_id: s.abreviation or s.libelle
            for s in services
            if s.service_rpsi_id is not None
        }

        def local(value):
            return format_local(value, fuseau_horaire)

        sections: List[Dict[str, Any]] = [
            {
                "title": "Événements",
                "columns": ["Date de connaissance", "N°", "Service", "Activité", "Libellé", "Description"],
                "rows": [
                    [
                        local(e.date_connaissance_faits),
                        e.numero or "",
                        unite_labels.get(e.unite_rpsi_id, e.unite_rpsi_id),
                        (
                            libelles.get(e.activite_id, "")
                            if e.activite_id is not None
                            else ""
                        ),
                        e.libelle,
                        e.description or "",
                    ]
                    for e in aggregated.evenements
                ],
                "empty_label": EMPTY_SECTION_LABEL,
            },
            {
                "title": "Mentions de service",
                "columns": ["Date", "Service", "Auteur", "Mention"],
                "rows": [
                    [
                        local(m.date_creation),
                        service_labels.get(m.service_id, str(m.service_id)),
                        m.auteur or "",
                        m.contenu,
                    ]
                    for m in aggregated.mentions
                ],
                "empty_label": EMPTY_SECTION_LABEL,
            },
            {
                "title": "Prises de service",
                "columns": ["Début", "Fin", "Service", "Agent", "Commentaire"],
                "rows": [
                    [
                        local(p.date_debut),
                        local(p.date_fin) if p.date_fin else "En cours",
                        service_labels.get(p.service_id, str(p.service_id)),
                        p.agent,
                        p.commentaire or "",
                    ]
                    for p in aggregated.prises_de_service
                ],
                "empty_label": EMPTY_SECTION_LABEL,
            },
        ]

        logger.debug(
            f"Register content built with {aggregated.total} records and "
            f"{len(libelles)} activity labels"
        )
        return {
            "periode": (
                f"Du {local(periode.date_debut)} au {local(periode.date_fin)}"
                if periode
                else ""
            ),
            "services": [s.model_dump() for s in services],
            "sections": sections,
            "total": aggregated.total,
        }
