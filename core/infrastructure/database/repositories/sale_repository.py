"""
SQLAlchemy Sale Repository Implementation.

Implements SaleRepository using SQLAlchemy.
"""
from datetime import date
from typing import List, Optional
import logging

from sqlalchemy import distinct, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.repositories import SaleRepository
from core.domain.value_objects import CanonicalSale
from core.domain.value_objects.sale import DESCRIPTIVE_FIELDS, MONETARY_FIELDS
from core.infrastructure.database.models import SaleModel
from ledger_sdk.utils.numbers import to_decimal


logger = logging.getLogger(__name__)

_PLAIN_FIELDS = (
    "natural_key",
    "order_code",
    "item_code",
    "qty",
    "unit_price",
    "promo_code",
    "serial",
    "customer_code",
    "source_native_id",
    "position_index",
    "branch_code",
    "order_date",
    "sale_type",
    "customer_source",
    "is_employee",
    "is_marketplace",
    "gift_code",
    "discount_reason",
    "warehouse_code",
    "department_code",
    "discount_account",
    "expense_account",
    "fee_code",
    "posted",
) + DESCRIPTIVE_FIELDS + MONETARY_FIELDS


class SQLAlchemySaleRepository(SaleRepository):
    """
    SQLAlchemy implementation of SaleRepository.

    Commit is handled by the Unit of Work.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_natural_key(self, natural_key: str) -> Optional[CanonicalSale]:
        model = await self._get_model(natural_key)
        return self._to_domain(model) if model is not None else None

    async def add(self, sale: CanonicalSale) -> None:
        logger.debug(f"Inserting sale: {sale.natural_key}")
        self.session.add(self._to_model(sale))
        await self.session.flush()

    async def update_descriptive(self, sale: CanonicalSale) -> None:
        model = await self._get_model(sale.natural_key)
        if model is None:
            raise LookupError(f"Sale not found: {sale.natural_key}")
        for name in DESCRIPTIVE_FIELDS:
            setattr(model, name, getattr(sale, name))
        await self.session.flush()

    async def find_by_order(self, order_code: str) -> List[CanonicalSale]:
        result = await self.session.execute(
            select(SaleModel)
            .where(SaleModel.order_code == order_code)
            .order_by(SaleModel.position_index, SaleModel.id)
        )
        return [self._to_domain(model) for model in result.scalars().all()]

    async def find_order_codes(
        self,
        date_from: date,
        date_to: date,
        unposted_only: bool = False,
    ) -> List[str]:
        query = select(distinct(SaleModel.order_code)).where(
            SaleModel.order_date >= date_from,
            SaleModel.order_date <= date_to,
        )
        if unposted_only:
            query = query.where(SaleModel.posted.is_(False))
        result = await self.session.execute(query.order_by(SaleModel.order_code))
        return list(result.scalars().all())

    async def mark_posted(self, order_code: str) -> int:
        result = await self.session.execute(
            update(SaleModel)
            .where(SaleModel.order_code == order_code, SaleModel.posted.is_(False))
            .values(posted=True)
        )
        logger.info(f"Marked {result.rowcount} line(s) posted: {order_code}")
        return result.rowcount or 0

    # =========================================================================
    # MAPPING
    # =========================================================================

    async def _get_model(self, natural_key: str) -> Optional[SaleModel]:
        result = await self.session.execute(
            select(SaleModel).where(SaleModel.natural_key == natural_key)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_model(sale: CanonicalSale) -> SaleModel:
        model = SaleModel(**{name: getattr(sale, name) for name in _PLAIN_FIELDS})
        model.extra_discounts = {str(k): str(v) for k, v in sale.extra_discounts.items()}
        model.discount_codes = {str(k): v for k, v in sale.discount_codes.items()}
        return model

    @staticmethod
    def _to_domain(model: SaleModel) -> CanonicalSale:
        data = {name: getattr(model, name) for name in _PLAIN_FIELDS}
        for name in MONETARY_FIELDS + ("qty", "unit_price"):
            data[name] = to_decimal(data[name])
        return CanonicalSale(
            **data,
            extra_discounts={int(k): to_decimal(v) for k, v in (model.extra_discounts or {}).items()},
            discount_codes={int(k): v for k, v in (model.discount_codes or {}).items()},
        )
