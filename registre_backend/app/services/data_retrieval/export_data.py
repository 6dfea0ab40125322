# registre_backend/app/services/data_retrieval/export_data.py
"""
Export configuration and export demand (throttling lease) storage.
"""
import logging
from typing import Optional

from sqlalchemy import Integer, String, exists, func, insert, literal, literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import ExportConfigurationError
from ...models.exports import ExportConfiguration, ExportDemand
from ...schemas.registre import DemandToken, ExportConfig

logger = logging.getLogger(__name__)


class ExportConfigData:
    """Reads per-kind export limits."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_export_config(self, kind: str) -> ExportConfig:
        stmt = select(ExportConfiguration).where(ExportConfiguration.type == kind)
        result = await self.session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is None:
            logger.error(f"No export configuration found for kind '{kind}'")
            raise ExportConfigurationError(kind)
        return ExportConfig.model_validate(row)


class ExportDemandData:
    """Append-only store of export demands."""

    async def insert_new_demand(
        self, sub: str, delai_retry: int, session: AsyncSession
    ) -> Optional[DemandToken]:
        """
        Insert a demand unless one of the requester's demands is still within
        its own retry delay. Returns None in that case.

        A transaction-scoped advisory lock on the requester serializes
        concurrent inserts, so the check and the insert act as one statement.
        The lock is released when the caller's transaction ends.
        """
        await session.execute(select(func.pg_advisory_xact_lock(func.hashtext(sub))))

        still_running = (
            select(ExportDemand.id)
            .where(ExportDemand.sub == sub)
            .where(
                ExportDemand.created_at
                + ExportDemand.delai_retry * literal_column("interval '1 second'")
                > func.now()
            )
        )
        stmt = (
            insert(ExportDemand)
            .from_select(
                ["sub", "delai_retry"],
                select(literal(sub, String), literal(delai_retry, Integer)).where(
                    ~exists(still_running)
                ),
            )
            .returning(
                ExportDemand.id,
                ExportDemand.sub,
                ExportDemand.delai_retry,
                ExportDemand.created_at,
            )
        )
        result = await session.execute(stmt)
        row = result.mappings().first()
        if row is None:
            logger.info(f"Demand refused for {sub}: unexpired demand exists")
            return None
        return DemandToken.model_validate(dict(row))
