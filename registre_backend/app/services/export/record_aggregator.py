"""Fetching and ordering of the three record collections of a register."""

import asyncio
import logging
from typing import List, Sequence

from ...core.exceptions import ExportTooLargeError
from ...schemas.registre import (
    AggregatedExportData,
    EvenementRecord,
    ExportQueryOptions,
    FlattenedServiceView,
    MentionRecord,
    Period,
    PriseDeServiceRecord,
)
from .interfaces import RecordSource

logger = logging.getLogger(__name__)


def evenement_scope_ids(services: Sequence[FlattenedServiceView]) -> List[str]:
    """Events are filed against the external registry id of a service."""
    return [s.service_rpsi_id for s in services if s.service_rpsi_id is not None]


def internal_scope_ids(services: Sequence[FlattenedServiceView]) -> List[int]:
    """Mentions and shift check-ins reference the internal service id."""
    return [s.id for s in services]


def sort_evenements(records: Sequence[EvenementRecord]) -> List[EvenementRecord]:
    return sorted(records, key=lambda r: r.date_connaissance_faits)


def sort_mentions(records: Sequence[MentionRecord]) -> List[MentionRecord]:
    return sorted(records, key=lambda r: r.date_creation)


def _prise_key(record: PriseDeServiceRecord):
    # Open shifts (no end) come before closed ones starting at the same time
    if record.date_fin is None:
        return (record.date_debut, 0, 0)
    return (record.date_debut, 1, record.date_fin)


def sort_prises_de_service(
    records: Sequence[PriseDeServiceRecord],
) -> List[PriseDeServiceRecord]:
    return sorted(records, key=_prise_key)


class RecordAggregator:
    """
    Collects events, mentions and shift check-ins for a service scope.

    The three sources are independent reads and are awaited together; the
    quota is checked once all of them have returned and been sorted.
    """

    def __init__(
        self,
        evenement_source: RecordSource,
        mention_source: RecordSource,
        prise_de_service_source: RecordSource,
    ):
        self.evenement_source = evenement_source
        self.mention_source = mention_source
        self.prise_de_service_source = prise_de_service_source

    async def aggregate(
        self,
        services: Sequence[FlattenedServiceView],
        periode: Period,
        options: ExportQueryOptions,
        limite_fiches: int,
    ) -> AggregatedExportData:
        """
        Fetch, sort and count the records of the scope.

        Raises:
            ExportTooLargeError: if the combined count exceeds ``limite_fiches``.
        """
        internal_ids = internal_scope_ids(services)

        evenements, mentions, prises = await asyncio.gather(
            self.evenement_source.get_all_for_export(
                evenement_scope_ids(services), periode, options
            ),
            self.mention_source.get_all_for_export(internal_ids, periode, options),
            self.prise_de_service_source.get_all_for_export(
                internal_ids, periode, options
            ),
        )

        aggregated = AggregatedExportData(
            evenements=sort_evenements(evenements.data),
            mentions=sort_mentions(mentions.data),
            prises_de_service=sort_prises_de_service(prises.data),
        )

        logger.debug(
            f"Aggregated {len(aggregated.evenements)} events, "
            f"{len(aggregated.mentions)} mentions, "
            f"{len(aggregated.prises_de_service)} shifts over {len(services)} services"
        )

        if aggregated.total > limite_fiches:
            logger.warning(
                f"Register too large: {aggregated.total} records for a maximum of {limite_fiches}"
            )
            raise ExportTooLargeError(aggregated.total, limite_fiches)

        return aggregated
