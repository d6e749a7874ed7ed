"""
SQLAlchemy ORM Models.

Maps canonical sales, warehouse movements and audit records to tables.
"""
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

from ledger_sdk.utils.datetime import utc_now


Base = declarative_base()


def _money():
    return Column(Numeric(18, 2), nullable=False, default=0)


# =============================================================================
# SALE MODEL
# =============================================================================

class SaleModel(Base):
    """
    Canonical sale line.

    `natural_key` is the deduplication key; it is unique and never updated.
    """

    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, autoincrement=True)
    natural_key = Column(String(1024), unique=True, nullable=False, index=True)

    # Key fields
    order_code = Column(String(100), nullable=False, index=True)
    item_code = Column(String(100), nullable=False)
    qty = Column(Numeric(18, 4), nullable=False)
    unit_price = _money()
    disc_amt = _money()
    grade_disc_amt = _money()
    other_disc_amt = _money()
    revenue = _money()
    promo_code = Column(String(255), nullable=True)
    serial = Column(String(255), nullable=True)
    customer_code = Column(String(100), nullable=False, default="")
    source_native_id = Column(String(100), nullable=True)
    position_index = Column(Integer, nullable=False, default=0)

    # Descriptive fields
    item_name = Column(String(500), nullable=False, default="")
    material_code = Column(String(100), nullable=True)
    order_type_label = Column(String(255), nullable=False, default="")
    product_type = Column(String(20), nullable=True)
    brand = Column(String(100), nullable=False, default="")
    category_tags = Column(String(500), nullable=False, default="")

    # Other attributes
    branch_code = Column(String(50), nullable=False, default="", index=True)
    order_date = Column(Date, nullable=True, index=True)
    sale_type = Column(String(20), nullable=False, default="RETAIL")
    customer_source = Column(String(100), nullable=False, default="")
    is_employee = Column(Boolean, nullable=False, default=False)
    is_marketplace = Column(Boolean, nullable=False, default=False)
    subtotal = _money()
    line_total = _money()
    promo_disc_amt = _money()
    policy_disc_amt = _money()
    voucher_amount = _money()
    coupon_amount = _money()
    voucher_dp1_amount = _money()
    voucher_dp2_amount = _money()
    voucher_dp3_amount = _money()
    wallet_amount = _money()
    tax_amount = _money()
    # {"9": "1000.00", ...} / {"3": "VIP MP", ...}
    extra_discounts = Column(JSON, nullable=False, default=dict)
    discount_codes = Column(JSON, nullable=False, default=dict)
    gift_code = Column(String(255), nullable=True)
    discount_reason = Column(String(255), nullable=True)
    warehouse_code = Column(String(50), nullable=True)
    department_code = Column(String(50), nullable=True)
    discount_account = Column(String(50), nullable=True)
    expense_account = Column(String(50), nullable=True)
    fee_code = Column(String(50), nullable=True)

    # Posting status
    posted = Column(Boolean, nullable=False, default=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_sales_order_date_posted", "order_date", "posted"),
    )

    def __repr__(self):
        return f"<SaleModel(order_code={self.order_code}, item_code={self.item_code}, qty={self.qty})>"


# =============================================================================
# WAREHOUSE MOVEMENT MODEL
# =============================================================================

class WarehouseMovementModel(Base):
    """Stock movement reported by the warehouse feed (read-only for posting)."""

    __tablename__ = "warehouse_movements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    composite_key = Column(String(512), unique=True, nullable=False)

    order_code = Column(String(100), nullable=False, index=True)
    doc_code = Column(String(100), nullable=False, default="", index=True)
    doc_type = Column(String(50), nullable=False, default="")
    item_code = Column(String(100), nullable=False)
    material_code = Column(String(100), nullable=True)
    qty = Column(Numeric(18, 4), nullable=False)
    io_type = Column(String(1), nullable=False, default="O")
    stock_code = Column(String(50), nullable=False, default="")
    related_stock_code = Column(String(50), nullable=True)
    batch_serial = Column(String(255), nullable=True)
    trans_date = Column(Date, nullable=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)

    def __repr__(self):
        return f"<WarehouseMovementModel(order_code={self.order_code}, item_code={self.item_code}, qty={self.qty})>"


# =============================================================================
# AUDIT RECORD MODEL
# =============================================================================

class AuditRecordModel(Base):
    """
    One external ledger call (append-only).

    Used for retry inspection and operator visibility.
    """

    __tablename__ = "posting_audit"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_code = Column(String(100), nullable=False, index=True)
    step = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, index=True)
    request_payload = Column(JSON, nullable=True)
    response_payload = Column(JSON, nullable=True)
    error_message = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=utc_now, nullable=False, index=True)

    __table_args__ = (
        Index("ix_posting_audit_order_timestamp", "order_code", "timestamp"),
    )

    def __repr__(self):
        return f"<AuditRecordModel(order_code={self.order_code}, step={self.step}, status={self.status})>"
