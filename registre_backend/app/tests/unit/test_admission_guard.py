# registre_backend/app/tests/unit/test_admission_guard.py

"""
Tests for request admission: period parsing, timezone validation, the period
ceiling and duplicate-demand throttling.
"""

from datetime import datetime, timezone

import pytest

from ...core.exceptions import (
    DuplicateRequestError,
    MalformedFieldError,
    MissingFieldError,
    PeriodTooLargeError,
)
from ...schemas.registre import ExportConfig
from ...services.export.admission_guard import (
    ExportAdmissionGuard,
    parse_plage_horaire,
)

TWO_HOURS = "2024-01-01T00:00:00Z,2024-01-01T02:00:00Z"


def config(limite_plage_horaire=7200, delai_retry=300, limite_fiches=100):
    return ExportConfig(
        limite_fiches=limite_fiches,
        delai_retry=delai_retry,
        limite_plage_horaire=limite_plage_horaire,
    )


class TestParsePlageHoraire:
    def test_parses_both_bounds(self):
        periode = parse_plage_horaire(TWO_HOURS)

        assert periode.date_debut == datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
        assert periode.date_fin == datetime(2024, 1, 1, 2, 0, tzinfo=timezone.utc)
        assert periode.duration_seconds == 7200

    def test_naive_timestamps_are_utc(self):
        periode = parse_plage_horaire("2024-01-01T00:00:00, 2024-01-01T01:00:00")

        assert periode.date_debut.tzinfo is not None
        assert periode.duration_seconds == 3600

    def test_reversed_bounds_have_absolute_duration(self):
        periode = parse_plage_horaire("2024-01-01T02:00:00Z,2024-01-01T00:00:00Z")

        assert periode.duration_seconds == 7200
        assert periode.lower < periode.upper

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_value(self, value):
        with pytest.raises(MissingFieldError) as exc_info:
            parse_plage_horaire(value)

        assert exc_info.value.field == "plageHoraire"
        assert not isinstance(exc_info.value, MalformedFieldError)

    @pytest.mark.parametrize(
        "value",
        [
            "2024-01-01T00:00:00Z",
            "2024-01-01T00:00:00Z,2024-01-01T01:00:00Z,2024-01-01T02:00:00Z",
            "hier,demain",
        ],
    )
    def test_malformed_value(self, value):
        with pytest.raises(MalformedFieldError) as exc_info:
            parse_plage_horaire(value)

        assert exc_info.value.field == "plageHoraire"
        assert exc_info.value.code == "malformed_field"


class TestExportAdmissionGuard:
    @pytest.mark.asyncio
    async def test_duration_equal_to_ceiling_is_admitted(self, demand_store, session):
        guard = ExportAdmissionGuard(demand_store)

        demand, periode = await guard.admit(
            "agent-1", TWO_HOURS, "Europe/Paris", config(7200), session
        )

        assert demand.sub == "agent-1"
        assert demand.delai_retry == 300
        assert periode.duration_seconds == 7200
        assert demand_store.sessions == [session]

    @pytest.mark.asyncio
    async def test_duration_above_ceiling_is_rejected_in_hours(
        self, demand_store, session
    ):
        guard = ExportAdmissionGuard(demand_store)

        with pytest.raises(PeriodTooLargeError) as exc_info:
            await guard.admit("agent-1", TWO_HOURS, "Europe/Paris", config(3600), session)

        assert exc_info.value.limit_hours == 1
        assert "supérieure à 1 heures" in exc_info.value.message
        assert demand_store.demands == []

    @pytest.mark.asyncio
    async def test_ceiling_hours_are_rounded_up(self, demand_store, session):
        guard = ExportAdmissionGuard(demand_store)

        with pytest.raises(PeriodTooLargeError) as exc_info:
            await guard.admit("agent-1", TWO_HOURS, "Europe/Paris", config(5400), session)

        assert exc_info.value.limit_hours == 2

    @pytest.mark.asyncio
    async def test_missing_period_is_reported_before_missing_timezone(
        self, demand_store, session
    ):
        guard = ExportAdmissionGuard(demand_store)

        with pytest.raises(MissingFieldError) as exc_info:
            await guard.admit("agent-1", None, None, config(), session)

        assert exc_info.value.field == "plageHoraire"

    @pytest.mark.asyncio
    async def test_missing_timezone(self, demand_store, session):
        guard = ExportAdmissionGuard(demand_store)

        with pytest.raises(MissingFieldError) as exc_info:
            await guard.admit("agent-1", TWO_HOURS, "", config(), session)

        assert exc_info.value.field == "fuseauHoraire"
        assert "Europe/Paris" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_timezone_is_reported_before_period_size(
        self, demand_store, session
    ):
        guard = ExportAdmissionGuard(demand_store)

        with pytest.raises(MissingFieldError):
            await guard.admit("agent-1", TWO_HOURS, None, config(60), session)

    @pytest.mark.asyncio
    async def test_missing_timezone_is_reported_before_malformed_period(
        self, demand_store, session
    ):
        guard = ExportAdmissionGuard(demand_store)

        with pytest.raises(MissingFieldError) as exc_info:
            await guard.admit("agent-1", "hier,demain", None, config(), session)

        assert exc_info.value.field == "fuseauHoraire"
        assert not isinstance(exc_info.value, MalformedFieldError)
        assert demand_store.demands == []

    @pytest.mark.asyncio
    async def test_unknown_timezone(self, demand_store, session):
        guard = ExportAdmissionGuard(demand_store)

        with pytest.raises(MalformedFieldError) as exc_info:
            await guard.admit("agent-1", TWO_HOURS, "Mars/Olympus_Mons", config(), session)

        assert exc_info.value.field == "fuseauHoraire"

    @pytest.mark.asyncio
    async def test_second_request_within_retry_delay_is_rejected(
        self, demand_store, clock, session
    ):
        guard = ExportAdmissionGuard(demand_store)
        cfg = config(delai_retry=90)

        await guard.admit("agent-1", TWO_HOURS, "Europe/Paris", cfg, session)
        clock.advance(60)

        with pytest.raises(DuplicateRequestError) as exc_info:
            await guard.admit("agent-1", TWO_HOURS, "Europe/Paris", cfg, session)

        assert exc_info.value.retry_minutes == 2
        assert exc_info.value.status_code == 429
        assert "moins de 2 minutes" in exc_info.value.message
        assert len(demand_store.demands) == 1

    @pytest.mark.asyncio
    async def test_request_after_retry_delay_is_admitted(
        self, demand_store, clock, session
    ):
        guard = ExportAdmissionGuard(demand_store)
        cfg = config(delai_retry=90)

        await guard.admit("agent-1", TWO_HOURS, "Europe/Paris", cfg, session)
        clock.advance(90)
        demand, _ = await guard.admit("agent-1", TWO_HOURS, "Europe/Paris", cfg, session)

        assert demand.id == 2

    @pytest.mark.asyncio
    async def test_demands_are_per_requester(self, demand_store, session):
        guard = ExportAdmissionGuard(demand_store)

        first, _ = await guard.admit("agent-1", TWO_HOURS, "UTC", config(), session)
        second, _ = await guard.admit("agent-2", TWO_HOURS, "UTC", config(), session)

        assert {first.sub, second.sub} == {"agent-1", "agent-2"}
