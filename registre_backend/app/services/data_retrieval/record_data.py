# registre_backend/app/services/data_retrieval/record_data.py
"""
Record sources of the register: events, service mentions and shift check-ins.

Each source opens its own session from the factory so the three of them can
be awaited concurrently; they only read.
"""
import logging
from typing import Dict, Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...models.registre import Activite, Evenement, MentionDeService, PriseDeService
from ...schemas.registre import (
    EvenementRecord,
    ExportQueryOptions,
    MentionRecord,
    Period,
    PriseDeServiceRecord,
    RecordPage,
)
from .helpers import in_batches, overlaps_period, within_period

logger = logging.getLogger(__name__)


class EvenementData:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def get_all_for_export(
        self,
        unite_ids: Sequence[str],
        periode: Period,
        options: ExportQueryOptions,
    ) -> RecordPage[EvenementRecord]:
        if not unite_ids:
            return RecordPage[EvenementRecord](data=[])

        stmt = select(Evenement).where(
            in_batches(Evenement.unite_rpsi_id, unite_ids),
            within_period(Evenement.date_connaissance_faits, periode),
        )
        if options.activite_ids:
            stmt = stmt.where(Evenement.activite_id.in_(options.activite_ids))

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            data = [EvenementRecord.model_validate(r) for r in result.scalars().all()]

        logger.debug(f"Fetched {len(data)} events for {len(unite_ids)} units")
        return RecordPage[EvenementRecord](data=data)


class MentionDeServiceData:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def get_all_for_export(
        self,
        unite_ids: Sequence[int],
        periode: Period,
        options: ExportQueryOptions,
    ) -> RecordPage[MentionRecord]:
        if not unite_ids:
            return RecordPage[MentionRecord](data=[])

        stmt = select(MentionDeService).where(
            in_batches(MentionDeService.service_id, unite_ids),
            within_period(MentionDeService.date_creation, periode),
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            data = [MentionRecord.model_validate(r) for r in result.scalars().all()]

        logger.debug(f"Fetched {len(data)} mentions for {len(unite_ids)} services")
        return RecordPage[MentionRecord](data=data)


class PriseDeServiceData:
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def get_all_for_export(
        self,
        unite_ids: Sequence[int],
        periode: Period,
        options: ExportQueryOptions,
    ) -> RecordPage[PriseDeServiceRecord]:
        if not unite_ids:
            return RecordPage[PriseDeServiceRecord](data=[])

        stmt = select(PriseDeService).where(
            in_batches(PriseDeService.service_id, unite_ids),
            overlaps_period(PriseDeService.date_debut, PriseDeService.date_fin, periode),
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            data = [
                PriseDeServiceRecord.model_validate(r) for r in result.scalars().all()
            ]

        logger.debug(f"Fetched {len(data)} shifts for {len(unite_ids)} services")
        return RecordPage[PriseDeServiceRecord](data=data)


class ActiviteData:
    """Activity labels, looked up through the request session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_libelles(self, ids: Iterable[int]) -> Dict[int, str]:
        wanted = sorted(set(ids))
        if not wanted:
            return {}
        result = await self.session.execute(
            select(Activite.id, Activite.libelle).where(in_batches(Activite.id, wanted))
        )
        return {row.id: row.libelle for row in result}
