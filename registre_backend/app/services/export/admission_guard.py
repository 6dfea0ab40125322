"""Admission of a register export request.

Checks run in a fixed order and the first failure wins:

1. ``plageHoraire`` and ``fuseauHoraire`` both present;
2. ``plageHoraire`` made of two timestamps and ``fuseauHoraire`` a known
   IANA zone;
3. period duration within ``limite_plage_horaire`` (boundary inclusive);
4. no unexpired demand for the requester, enforced by the demand store's
   conditional insert.

The guard writes the demand row through the caller's session and never
commits or rolls back.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    DuplicateRequestError,
    MalformedFieldError,
    MissingFieldError,
    PeriodTooLargeError,
)
from ...schemas.registre import DemandToken, ExportConfig, Period
from .interfaces import DemandStore

logger = logging.getLogger(__name__)

PLAGE_HORAIRE_FIELD = "plageHoraire"
FUSEAU_HORAIRE_FIELD = "fuseauHoraire"


def _parse_timestamp(raw: str) -> datetime:
    value = datetime.fromisoformat(raw.strip())
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def parse_plage_horaire(plage_horaire: Optional[str]) -> Period:
    """Build a Period from ``"<start>,<end>"``.

    Raises:
        MissingFieldError: if the value is absent or blank.
        MalformedFieldError: if it is not exactly two ISO-8601 timestamps.
    """
    if not plage_horaire or not plage_horaire.strip():
        raise MissingFieldError(PLAGE_HORAIRE_FIELD)

    bounds = plage_horaire.split(",")
    if len(bounds) != 2:
        raise MalformedFieldError(PLAGE_HORAIRE_FIELD, plage_horaire)

    try:
        return Period(
            date_debut=_parse_timestamp(bounds[0]),
            date_fin=_parse_timestamp(bounds[1]),
        )
    except ValueError as e:
        raise MalformedFieldError(PLAGE_HORAIRE_FIELD, plage_horaire) from e


def validate_fuseau_horaire(fuseau_horaire: Optional[str]) -> str:
    """Return the zone name when it is a known IANA zone."""
    if not fuseau_horaire or not fuseau_horaire.strip():
        raise MissingFieldError(FUSEAU_HORAIRE_FIELD)

    name = fuseau_horaire.strip()
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise MalformedFieldError(FUSEAU_HORAIRE_FIELD, name) from e
    return name


class ExportAdmissionGuard:
    """Validates a request and takes the requester's export lease."""

    def __init__(self, demand_store: DemandStore):
        self.demand_store = demand_store

    def check_period(self, periode: Period, config: ExportConfig) -> None:
        duration = periode.duration_seconds
        if duration > config.limite_plage_horaire:
            raise PeriodTooLargeError(config.limite_plage_horaire, duration)

    async def admit(
        self,
        requester_id: str,
        plage_horaire: Optional[str],
        fuseau_horaire: Optional[str],
        config: ExportConfig,
        session: AsyncSession,
    ) -> Tuple[DemandToken, Period]:
        """
        Validate the request and insert one export demand.

        Returns:
            The inserted demand and the parsed period.

        Raises:
            MissingFieldError, PeriodTooLargeError, DuplicateRequestError
        """
        try:
            if not plage_horaire or not plage_horaire.strip():
                raise MissingFieldError(PLAGE_HORAIRE_FIELD)
            if not fuseau_horaire or not fuseau_horaire.strip():
                raise MissingFieldError(FUSEAU_HORAIRE_FIELD)

            periode = parse_plage_horaire(plage_horaire)
            validate_fuseau_horaire(fuseau_horaire)
            self.check_period(periode, config)
        except MissingFieldError as e:
            logger.warning(f"Export rejected for {requester_id}: {e.message}")
            raise
        except PeriodTooLargeError as e:
            logger.warning(
                f"Export rejected for {requester_id}: period of "
                f"{e.context['duration_seconds']:.0f}s exceeds {config.limite_plage_horaire}s"
            )
            raise

        demand = await self.demand_store.insert_new_demand(
            requester_id, config.delai_retry, session
        )
        if demand is None:
            logger.warning(
                f"Export rejected for {requester_id}: demand within "
                f"{config.delai_retry}s retry window"
            )
            raise DuplicateRequestError(config.delai_retry, sub=requester_id)

        logger.info(f"Export demand {demand.id} admitted for {requester_id}")
        return demand, periode
