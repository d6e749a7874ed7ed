"""
Order document assembly.

Explodes the sales of one order against its warehouse movements, resolves
the accounting treatment of every posting line and collects everything
the posting pipeline needs into one OrderDocument.
"""
from typing import Iterable, Sequence
import logging

from core.application.services.lookup_prefetcher import LookupCache
from core.domain.accounting import AccountingRuleResolver, resolve_batch_serial, resolve_warehouse_code
from core.domain.exceptions import ValidationError
from core.domain.reconciliation import LineExploder, group_transfers
from core.domain.value_objects import (
    CanonicalSale,
    OrderDocument,
    PaymentRecord,
    ResolvedLine,
    WarehouseMovement,
)


logger = logging.getLogger(__name__)


class OrderDocumentBuilder:
    def __init__(self, resolver: AccountingRuleResolver):
        self.resolver = resolver

    def build(
        self,
        sales: Sequence[CanonicalSale],
        movements: Iterable[WarehouseMovement],
        lookups: LookupCache,
        payments: Sequence[PaymentRecord] = (),
    ) -> OrderDocument:
        """
        Build the document of one order.

        Raises:
            ValidationError: If the order has no sales or its branch has no
                ledger company code
        """
        if not sales:
            raise ValidationError("", "sales lines", "Cannot build a document without sales")

        head = sales[0]
        order_code = head.order_code
        branch = lookups.branches.get(head.branch_code)
        company_code = branch.ledger_company_code if branch else None
        if not company_code:
            raise ValidationError(order_code, f"branch:{head.branch_code} -> ledger company code")

        movements = [m for m in movements if m.order_code == order_code]
        category = self.resolver.classifier.classify(head.order_type_label)
        exploder = LineExploder(lookups.warehouse_map)
        is_marketplace = order_code in lookups.marketplace_order_codes

        lines = []
        for line in exploder.explode_order(sales, movements, category):
            sale = line.sale
            product = lookups.products.get(sale.resolved_material_code)
            resolution = self.resolver.resolve(
                sale,
                product=product,
                company_code=company_code,
                payments=payments,
                is_marketplace=is_marketplace,
            )
            batch_no, serial_no = resolve_batch_serial(line.batch_serial, product)
            lines.append(
                ResolvedLine(
                    line=line,
                    resolution=resolution,
                    product=product,
                    warehouse_code=resolve_warehouse_code(
                        resolution.category,
                        line.warehouse_code,
                        exploder.map_warehouse(sale.warehouse_code),
                        sale.department_code,
                    ),
                    batch_no=batch_no,
                    serial_no=serial_no,
                )
            )

        transfers = group_transfers(movements, lookups.warehouse_map)
        if transfers.skipped:
            logger.warning(f"[BATCH] {order_code}: {transfers.skipped} transfer line(s) without target skipped")

        return OrderDocument(
            order_code=order_code,
            order_date=head.order_date,
            customer_code=head.customer_code,
            company_code=company_code,
            branch_code=(branch.ledger_branch_code or head.branch_code) if branch else head.branch_code,
            lines=tuple(lines),
            payments=tuple(payments),
            stock_movements=tuple(
                m for m in movements if not m.is_transfer and not m.is_carry_forward
            ),
            transfers=tuple(transfers.requests),
            allow_without_stock_codes=any(sale.is_cancellation for sale in sales),
            warehouse_map=dict(lookups.warehouse_map),
        )
