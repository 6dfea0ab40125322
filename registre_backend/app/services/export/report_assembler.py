"""Packaging of the aggregated register into a named PDF document."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from ...schemas.registre import (
    AggregatedExportData,
    DocumentTemplate,
    FlattenedServiceView,
    Period,
    ReportDocument,
)
from .interfaces import ActiviteSource, ContentGenerator, DocumentEngine

logger = logging.getLogger(__name__)

PdfNameGenerator = Callable[[datetime, str, str], str]


def pdf_name_generator(date: datetime, fuseau_horaire: str, sub: str) -> str:
    """``YYYYMMDDHHmmss`` in the requester's zone, then the requester id."""
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    local = date.astimezone(ZoneInfo(fuseau_horaire))
    return f"{local.strftime('%Y%m%d%H%M%S')}_registre_pour_{sub}.pdf"


class ReportAssembler:
    def __init__(
        self,
        document_engine: DocumentEngine,
        content_generator: ContentGenerator,
        activite_source: ActiviteSource,
        name_generator: PdfNameGenerator = pdf_name_generator,
    ):
        self.document_engine = document_engine
        self.content_generator = content_generator
        self.activite_source = activite_source
        self.name_generator = name_generator

    async def assemble(
        self,
        aggregated: AggregatedExportData,
        services: Sequence[FlattenedServiceView],
        template: DocumentTemplate,
        requester_id: str,
        periode: Optional[Period] = None,
        generated_at: Optional[datetime] = None,
    ) -> ReportDocument:
        """Render the register; failures of the collaborators propagate."""
        builder = self.document_engine.new_document(template)
        builder.content = [
            await self.content_generator.build_register_content(
                aggregated,
                services,
                self.activite_source,
                template.fuseau_horaire,
                periode,
            )
        ]
        # WeasyPrint rendering is CPU-bound; keep it off the event loop
        loop = asyncio.get_running_loop()
        content = await loop.run_in_executor(None, self.document_engine.render, builder)

        file_name = self.name_generator(
            generated_at or datetime.now(timezone.utc),
            template.fuseau_horaire,
            requester_id,
        )
        logger.info(f"Register {file_name} assembled ({aggregated.total} records)")
        return ReportDocument(content=content, file_name=file_name)
