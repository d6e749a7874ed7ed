"""
Composition root.

Wires settings, database, ledger client and the posting pipeline into the
ingestion and posting services. Collaborator directories (catalog, branch,
promotion, payment method, warehouse mapping, fee records) belong to other
systems and are passed in.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from core.application.interfaces import (
    IBranchService,
    ICatalogService,
    ILedgerClient,
    IOrderFeeDirectory,
    IPaymentMethodDirectory,
    IPromotionDirectory,
    IWarehouseCodeMapper,
)
from core.application.services import DedupNormalizer, LookupPrefetcher, OrderDocumentBuilder
from core.application.services.posting_batch_service import PostingBatchService
from core.application.use_cases import PostOrderUseCase
from core.domain.accounting import AccountingRuleResolver
from core.infrastructure.adapters.ledger import HttpLedgerClient
from core.infrastructure.database import create_engine, create_session_factory, init_database
from core.infrastructure.database.repositories import SQLAlchemyAuditRepository
from core.settings import AppSettings, get_app_settings
from orchestration import InMemoryEventBus, PostingPipeline, RetryPolicy, create_posting_steps


logger = logging.getLogger(__name__)


@dataclass
class Collaborators:
    catalog: ICatalogService
    branches: IBranchService
    promotions: IPromotionDirectory
    payment_methods: IPaymentMethodDirectory
    warehouse_mapper: IWarehouseCodeMapper
    fee_directory: Optional[IOrderFeeDirectory] = None


@dataclass
class ReconciliationServices:
    """Everything a caller (scheduler, CLI, test) needs to ingest and post."""
    normalizer: DedupNormalizer
    post_order: PostOrderUseCase
    batch: PostingBatchService
    event_bus: InMemoryEventBus
    ledger_client: ILedgerClient
    session_factory: async_sessionmaker[AsyncSession]
    engine: Optional[AsyncEngine] = None

    async def prepare_store(self) -> None:
        """Create the store tables when the engine was built here."""
        if self.engine is not None:
            await init_database(self.engine)

    async def close(self) -> None:
        await self.ledger_client.close()
        if self.engine is not None:
            await self.engine.dispose()


def build_services(
    collaborators: Collaborators,
    settings: Optional[AppSettings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    ledger_client: Optional[ILedgerClient] = None,
    resolver: Optional[AccountingRuleResolver] = None,
) -> ReconciliationServices:
    """
    Build the ingestion and posting services.

    Args:
        collaborators: Lookup directories owned by other systems
        settings: Defaults to get_app_settings()
        session_factory: Defaults to a factory over a new engine from settings.database
        ledger_client: Defaults to HttpLedgerClient(settings.ledger)
        resolver: Defaults to the resolver with the production rule tables
    """
    settings = settings or get_app_settings()
    pipeline_settings = settings.pipeline
    engine = None
    if session_factory is None:
        engine = create_engine(settings.database)
        session_factory = create_session_factory(engine)
    client = ledger_client or HttpLedgerClient(settings.ledger)

    audit = SQLAlchemyAuditRepository(session_factory)
    event_bus = InMemoryEventBus()
    steps = create_posting_steps(
        client,
        audit,
        collaborators.promotions,
        collaborators.payment_methods,
        retry_policy=RetryPolicy(
            max_attempts=pipeline_settings.max_attempts,
            backoff_seconds=pipeline_settings.backoff_seconds,
        ),
        duplicate_patterns=pipeline_settings.duplicate_patterns,
    )
    prefetcher = LookupPrefetcher(
        collaborators.catalog,
        collaborators.branches,
        collaborators.warehouse_mapper,
        collaborators.fee_directory,
        concurrency=pipeline_settings.lookup_concurrency,
        timeout_seconds=pipeline_settings.lookup_timeout_seconds,
    )
    use_case = PostOrderUseCase(
        session_factory,
        OrderDocumentBuilder(resolver or AccountingRuleResolver()),
        steps,
        PostingPipeline(event_bus, audit),
        collaborators.payment_methods,
        prefetcher,
    )
    batch = PostingBatchService(
        use_case,
        session_factory,
        prefetcher,
        concurrency=pipeline_settings.concurrency,
        max_error_entries=pipeline_settings.max_error_entries,
    )
    logger.info(
        f"[BATCH] Services ready: concurrency {pipeline_settings.concurrency}, "
        f"max attempts {pipeline_settings.max_attempts}"
    )
    return ReconciliationServices(
        normalizer=DedupNormalizer(session_factory),
        post_order=use_case,
        batch=batch,
        event_bus=event_bus,
        ledger_client=client,
        session_factory=session_factory,
        engine=engine,
    )
