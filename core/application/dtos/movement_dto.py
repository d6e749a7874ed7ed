"""DTOs for raw warehouse movement records."""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.domain.enums import MovementType
from core.domain.value_objects import WarehouseMovement
from ledger_sdk.utils.numbers import ZERO, to_decimal


class RawMovement(BaseModel):
    """Stock movement as sent by the warehouse feed."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    doc_code: str = Field(default="", alias="docCode")
    order_code: str = Field(..., alias="soCode")
    item_code: str = Field(..., alias="itemCode")
    material_code: Optional[str] = Field(default=None, alias="materialCode")
    qty: Decimal = Field(default=ZERO, alias="qty")
    io_type: Optional[str] = Field(default=None, alias="ioType")
    doc_type: str = Field(default="", alias="doctype")
    stock_code: str = Field(default="", alias="stockCode")
    related_stock_code: Optional[str] = Field(default=None, alias="relatedStockCode")
    batch_serial: Optional[str] = Field(default=None, alias="batchSerial")
    trans_date: Optional[date] = Field(default=None, alias="transDate")

    @field_validator("qty", mode="before")
    @classmethod
    def coerce_qty(cls, v: Any) -> Decimal:
        return to_decimal(v)

    @field_validator("trans_date", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            return v.strip()[:10] or None
        return v

    def to_domain(self) -> WarehouseMovement:
        movement_type = MovementType.parse(self.io_type)
        if self.doc_type == "STOCK_TRANSFER":
            movement_type = MovementType.TRANSFER
        return WarehouseMovement(
            order_code=self.order_code,
            item_code=self.item_code,
            qty=self.qty,
            movement_type=movement_type,
            material_code=self.material_code,
            doc_code=self.doc_code,
            doc_type=self.doc_type,
            stock_code=self.stock_code,
            related_stock_code=self.related_stock_code or None,
            batch_serial=self.batch_serial or None,
            trans_date=self.trans_date,
        )
