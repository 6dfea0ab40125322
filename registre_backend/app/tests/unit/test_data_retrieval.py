"""
Tests for the SQL stores of the register export.

Sessions are mocked; statements are compiled with the PostgreSQL dialect to
check the SQL they would send.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import column
from sqlalchemy.dialects import postgresql

from ...core.exceptions import ExportConfigurationError
from ...schemas.registre import ExportQueryOptions, Period
from ...services.data_retrieval import (
    ActiviteData,
    EvenementData,
    ExportConfigData,
    ExportDemandData,
    MentionDeServiceData,
    PriseDeServiceData,
    ServiceTreeData,
)
from ...services.data_retrieval.helpers import (
    BATCH_SIZE,
    chunked,
    in_batches,
    within_period,
)
from ..fakes import at

PERIODE = Period(date_debut=at(0), date_fin=at(23))
OPTIONS = ExportQueryOptions(fuseau_horaire="UTC")


def sql(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


def result_with_scalars(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


def session_factory_for(session):
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    return factory


class TestHelpers:
    def test_chunked(self):
        assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]
        assert list(chunked([], 2)) == []

    def test_in_batches_without_values_is_false(self):
        assert str(in_batches(column("id"), [])) == "false"

    def test_in_batches_splits_long_lists(self):
        clause = in_batches(column("id"), list(range(BATCH_SIZE * 2 + 1)))

        assert sql(clause).count(" IN ") == 3

    def test_within_period_uses_ordered_bounds(self):
        reversed_period = Period(date_debut=at(5), date_fin=at(1))

        params = within_period(column("d"), reversed_period).compile().params

        assert sorted(params.values()) == [at(1), at(5)]


class TestExportConfigData:
    @pytest.mark.asyncio
    async def test_returns_configuration(self):
        session = AsyncMock()
        result = MagicMock()
        result.scalar_one_or_none.return_value = SimpleNamespace(
            type="registre", limite_fiches=500, delai_retry=300, limite_plage_horaire=86400
        )
        session.execute.return_value = result

        config = await ExportConfigData(session).get_export_config("registre")

        assert config.limite_fiches == 500
        assert "export_configurations" in sql(session.execute.call_args.args[0])

    @pytest.mark.asyncio
    async def test_missing_configuration(self):
        session = AsyncMock()
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        session.execute.return_value = result

        with pytest.raises(ExportConfigurationError) as exc_info:
            await ExportConfigData(session).get_export_config("registre")

        assert exc_info.value.context["kind"] == "registre"


class TestExportDemandData:
    @staticmethod
    def session_returning(row):
        session = AsyncMock()
        insert_result = MagicMock()
        insert_result.mappings.return_value.first.return_value = row
        session.execute.side_effect = [MagicMock(), insert_result]
        return session

    @pytest.mark.asyncio
    async def test_locks_requester_then_inserts_conditionally(self):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        session = self.session_returning(
            {"id": 3, "sub": "agent-1", "delai_retry": 60, "created_at": created}
        )

        token = await ExportDemandData().insert_new_demand("agent-1", 60, session)

        assert token.id == 3
        assert token.created_at == created
        lock, insert = [call.args[0] for call in session.execute.call_args_list]
        assert "pg_advisory_xact_lock(hashtext(" in sql(lock)
        insert_sql = sql(insert)
        assert insert_sql.startswith("INSERT INTO registre.export_demands")
        assert "NOT (EXISTS" in insert_sql
        assert "RETURNING" in insert_sql

    @pytest.mark.asyncio
    async def test_unexpired_demand_returns_none(self):
        session = self.session_returning(None)

        assert await ExportDemandData().insert_new_demand("agent-1", 60, session) is None
        session.commit.assert_not_called()


class TestServiceTreeData:
    @pytest.mark.asyncio
    async def test_builds_tree_in_sibling_order(self):
        rows = [
            SimpleNamespace(
                id=i,
                parent_id=parent,
                service_rpsi_id=f"R{i}",
                libelle=f"Service {i}",
                abreviation=None,
                service_hierarchie=None,
            )
            # rows come back ordered by position then id
            for i, parent in [(1, None), (3, 1), (2, 1), (4, 2)]
        ]
        session = AsyncMock()
        session.execute.return_value = result_with_scalars(rows)

        root = await ServiceTreeData().load_service_sub_tree(1, session)

        assert root.id == 1
        assert [c.id for c in root.sub_services] == [3, 2]
        assert [c.id for c in root.sub_services[1].sub_services] == [4]
        assert "WITH RECURSIVE sub_tree" in sql(session.execute.call_args.args[0])

    @pytest.mark.asyncio
    async def test_unknown_root(self):
        session = AsyncMock()
        session.execute.return_value = result_with_scalars([])

        assert await ServiceTreeData().load_service_sub_tree(42, session) is None


class TestRecordData:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "store_class", [EvenementData, MentionDeServiceData, PriseDeServiceData]
    )
    async def test_empty_scope_does_not_query(self, store_class):
        factory = MagicMock()

        page = await store_class(factory).get_all_for_export([], PERIODE, OPTIONS)

        assert page.data == []
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_events_filtered_by_activity(self):
        session = AsyncMock()
        session.execute.return_value = result_with_scalars(
            [
                SimpleNamespace(
                    id=1,
                    numero="EV-1",
                    unite_rpsi_id="R1",
                    date_connaissance_faits=at(3),
                    libelle="Intrusion",
                    description=None,
                    activite_id=7,
                )
            ]
        )
        options = ExportQueryOptions(fuseau_horaire="UTC", activite_ids=[7])

        page = await EvenementData(session_factory_for(session)).get_all_for_export(
            ["R1"], PERIODE, options
        )

        assert [e.id for e in page.data] == [1]
        statement = sql(session.execute.call_args.args[0])
        assert "evenements.activite_id IN" in statement
        assert "evenements.unite_rpsi_id IN" in statement

    @pytest.mark.asyncio
    async def test_shifts_include_open_ones(self):
        session = AsyncMock()
        session.execute.return_value = result_with_scalars([])

        await PriseDeServiceData(session_factory_for(session)).get_all_for_export(
            [1, 2], PERIODE, OPTIONS
        )

        assert "prises_de_service.date_fin IS NULL" in sql(
            session.execute.call_args.args[0]
        )

    @pytest.mark.asyncio
    async def test_activity_labels(self):
        session = AsyncMock()
        session.execute.return_value = [SimpleNamespace(id=7, libelle="Surveillance")]

        labels = await ActiviteData(session).get_libelles([7, 7])

        assert labels == {7: "Surveillance"}

    @pytest.mark.asyncio
    async def test_activity_labels_without_ids(self):
        session = AsyncMock()

        assert await ActiviteData(session).get_libelles([]) == {}
        session.execute.assert_not_called()
