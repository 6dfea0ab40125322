# registre_backend/app/tests/conftest.py

import logging
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.registre import ExportConfig, RequestUser
from ..services.export import (
    ExportAdmissionGuard,
    RecordAggregator,
    ReportAssembler,
    RegistreExportService,
)
from .fakes import (
    FakeActiviteSource,
    FakeClock,
    FakeConfigSource,
    FakeContentGenerator,
    FakeDemandStore,
    FakeDocumentEngine,
    FakeRecordSource,
    FakeServiceRegistry,
    service,
)


def pytest_configure(config):
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@pytest.fixture
def export_config() -> ExportConfig:
    return ExportConfig(limite_fiches=10, delai_retry=300, limite_plage_horaire=7200)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def demand_store(clock) -> FakeDemandStore:
    return FakeDemandStore(clock)


@pytest.fixture
def session() -> AsyncSession:
    """Stand-in for the request session; the fakes never touch it."""
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def service_tree():
    # 1 -> [2, 3], 2 -> [4]
    return service(1, service(2, service(4)), service(3))


@pytest.fixture
def record_sources():
    return {
        "evenements": FakeRecordSource(),
        "mentions": FakeRecordSource(),
        "prises": FakeRecordSource(),
    }


@pytest.fixture
def document_engine() -> FakeDocumentEngine:
    return FakeDocumentEngine()


@pytest.fixture
def content_generator() -> FakeContentGenerator:
    return FakeContentGenerator()


@pytest.fixture
def request_user() -> RequestUser:
    return RequestUser(sub="agent-42", premier_noeud_tague=1)


@pytest.fixture
def export_service(
    export_config,
    demand_store,
    service_tree,
    record_sources,
    document_engine,
    content_generator,
) -> RegistreExportService:
    return RegistreExportService(
        config_source=FakeConfigSource({"registre": export_config}),
        admission_guard=ExportAdmissionGuard(demand_store),
        service_registry=FakeServiceRegistry({1: service_tree}),
        aggregator=RecordAggregator(
            record_sources["evenements"],
            record_sources["mentions"],
            record_sources["prises"],
        ),
        assembler=ReportAssembler(
            document_engine, content_generator, FakeActiviteSource()
        ),
        page_factory=document_engine.get_default_page,
    )
