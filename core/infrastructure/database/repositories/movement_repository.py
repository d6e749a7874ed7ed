"""SQLAlchemy implementation of MovementRepository."""
from typing import List
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.enums import MovementType
from core.domain.repositories import MovementRepository
from core.domain.value_objects import WarehouseMovement
from core.infrastructure.database.models import WarehouseMovementModel
from ledger_sdk.utils.numbers import to_decimal


logger = logging.getLogger(__name__)


class SQLAlchemyMovementRepository(MovementRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_order(self, order_code: str) -> List[WarehouseMovement]:
        result = await self.session.execute(
            select(WarehouseMovementModel)
            .where(WarehouseMovementModel.order_code == order_code)
            .order_by(WarehouseMovementModel.id)
        )
        return [self._to_domain(model) for model in result.scalars().all()]

    async def add(self, movement: WarehouseMovement) -> bool:
        key = movement.composite_key
        result = await self.session.execute(
            select(WarehouseMovementModel.id).where(WarehouseMovementModel.composite_key == key)
        )
        if result.scalar_one_or_none() is not None:
            return False

        self.session.add(
            WarehouseMovementModel(
                composite_key=key,
                order_code=movement.order_code,
                doc_code=movement.doc_code,
                doc_type=movement.doc_type,
                item_code=movement.item_code,
                material_code=movement.material_code,
                qty=movement.qty,
                io_type=movement.movement_type.value,
                stock_code=movement.stock_code,
                related_stock_code=movement.related_stock_code,
                batch_serial=movement.batch_serial,
                trans_date=movement.trans_date,
            )
        )
        await self.session.flush()
        return True

    @staticmethod
    def _to_domain(model: WarehouseMovementModel) -> WarehouseMovement:
        return WarehouseMovement(
            order_code=model.order_code,
            item_code=model.item_code,
            qty=to_decimal(model.qty),
            movement_type=MovementType.parse(model.io_type),
            material_code=model.material_code,
            doc_code=model.doc_code,
            doc_type=model.doc_type,
            stock_code=model.stock_code,
            related_stock_code=model.related_stock_code,
            batch_serial=model.batch_serial,
            trans_date=model.trans_date,
        )
