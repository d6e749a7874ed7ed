"""Shared pytest fixtures: in-memory database, collaborators, fake ledger."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from core.bootstrap import Collaborators, ReconciliationServices, build_services
from core.domain.value_objects import BranchInfo, PaymentMethodInfo, PromotionInfo
from core.infrastructure.adapters.directories import (
    InMemoryBranchService,
    InMemoryCatalog,
    InMemoryOrderFeeDirectory,
    InMemoryPaymentMethodDirectory,
    InMemoryPromotionDirectory,
    InMemoryWarehouseCodeMapper,
)
from core.infrastructure.database import DatabaseSettings, create_session_factory, init_database
from core.settings import AppSettings, LedgerSettings, PipelineSettings
from tests.mocks.factories import make_product
from tests.mocks.fake_ledger_client import FakeLedgerClient


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    await init_database(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    """Create test session factory."""
    yield create_session_factory(test_engine)


@pytest.fixture
def ledger_client() -> FakeLedgerClient:
    return FakeLedgerClient()


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog(
        {
            "MN0001": make_product(),
            "MN0002": make_product(material_code="MN0002"),
            "DV0001": make_product(material_code="DV0001", product_type="S", product_group="DIVU"),
        }
    )


@pytest.fixture
def branches() -> InMemoryBranchService:
    return InMemoryBranchService(
        {
            "TTM01": BranchInfo(ledger_company_code="TTM", ledger_branch_code="TTM01"),
            "NOCO": BranchInfo(ledger_company_code=None, ledger_branch_code="NOCO"),
        }
    )


@pytest.fixture
def promotions() -> InMemoryPromotionDirectory:
    return InMemoryPromotionDirectory(
        [
            PromotionInfo(code="VIP MP"),
            PromotionInfo(code="VIP DV MAT"),
            PromotionInfo(code="R601KM.I"),
            PromotionInfo(code="VC HB"),
            PromotionInfo(code="2511MN.TKDV"),
        ]
    )


@pytest.fixture
def payment_methods() -> InMemoryPaymentMethodDirectory:
    return InMemoryPaymentMethodDirectory(
        methods=[
            PaymentMethodInfo(code="VISA", document_type="Giấy báo có", bank_unit="VCB", partner_code="NH01"),
            PaymentMethodInfo(code="MOMO", document_type="Phiếu thu"),
            PaymentMethodInfo(code="GIFTCARD", document_type=None),
        ]
    )


@pytest.fixture
def warehouse_mapper() -> InMemoryWarehouseCodeMapper:
    return InMemoryWarehouseCodeMapper({"KHO01": "K01", "KHO02": "K02"})


@pytest.fixture
def fee_directory() -> InMemoryOrderFeeDirectory:
    return InMemoryOrderFeeDirectory()


@pytest.fixture
def app_settings() -> AppSettings:
    """Settings for tests: one order at a time, no retry backoff."""
    return AppSettings(
        ledger=LedgerSettings(base_url="http://ledger.test/api"),
        pipeline=PipelineSettings(concurrency=1, max_attempts=2, backoff_seconds=0.0),
        database=DatabaseSettings(database_url=TEST_DATABASE_URL),
    )


@pytest.fixture
def collaborators(catalog, branches, promotions, payment_methods, warehouse_mapper, fee_directory) -> Collaborators:
    return Collaborators(
        catalog=catalog,
        branches=branches,
        promotions=promotions,
        payment_methods=payment_methods,
        warehouse_mapper=warehouse_mapper,
        fee_directory=fee_directory,
    )


@pytest.fixture
def services(collaborators, app_settings, session_factory, ledger_client) -> ReconciliationServices:
    """Fully wired ingestion and posting services over the fake ledger."""
    return build_services(
        collaborators,
        settings=app_settings,
        session_factory=session_factory,
        ledger_client=ledger_client,
    )
