"""
Order posting steps.

Binds the pipeline steps to the ledger endpoints. Every ledger call goes
through AuditedLedgerCall, which writes one audit record per call and turns
duplicate-object errors into synthesized success responses.
"""

from collections.abc import Callable
from typing import Any, Optional

from core.application.interfaces import (
    ILedgerClient,
    IPaymentMethodDirectory,
    IPromotionDirectory,
)
from core.domain.accounting.order_types import normalize_label
from core.domain.accounting.rule_tables import E_WALLET_METHOD_CODES, VOUCHER_METHOD_CODES
from core.domain.enums import AuditStatus, MovementType, PostingState
from core.domain.exceptions import (
    LedgerCallError,
    LedgerRejectedError,
    UnknownPromotionCodeError,
    UnmappedPaymentMethodError,
)
from core.domain.repositories import AuditRepository
from core.domain.value_objects import AuditRecord, OrderDocument, PaymentRecord, WarehouseMovement
from core.infrastructure.adapters.ledger import (
    DuplicateErrorDetector,
    LedgerPayloadMapper,
    collect_promotion_codes,
    interpret,
    synthesize_generic_response,
    synthesize_invoice_response,
    synthesize_sales_order_response,
)
from core.infrastructure.adapters.ledger.outcome import INVALID_RESPONSE_MESSAGE
from ledger_sdk.logging import get_logger

from .models import PostingContext, StepOutput
from .steps import PipelineDefinition, PipelineStep, RetryPolicy

CUSTOMER_ENDPOINT = "customer/create"
SALES_ORDER_ENDPOINT = "salesOrder"
SALES_INVOICE_ENDPOINT = "salesInvoice"
CASH_RECEIPT_ENDPOINT = "cashReceipt"
CREDIT_ADVICE_ENDPOINT = "creditAdvice"
WAREHOUSE_RELEASE_ENDPOINT = "warehouseRelease"
WAREHOUSE_RECEIPT_ENDPOINT = "warehouseReceipt"
WAREHOUSE_TRANSFER_ENDPOINT = "warehouseTransfer"

CASH_METHOD_CODE = "CASH"

# Payment-method document types, as declared in the payment-method directory
_DOCUMENT_TYPE_ENDPOINTS = {
    normalize_label("Giấy báo có"): CREDIT_ADVICE_ENDPOINT,
    normalize_label("Phiếu thu"): CASH_RECEIPT_ENDPOINT,
}

_STOCK_ENDPOINTS = {
    MovementType.OUT: WAREHOUSE_RELEASE_ENDPOINT,
    MovementType.IN: WAREHOUSE_RECEIPT_ENDPOINT,
}

Synthesizer = Callable[[Optional[str]], Any]


class AuditedLedgerCall:
    """
    One audited, duplicate-tolerant ledger call.

    Outcomes:
        success              -> SUCCESS record, response returned
        duplicate-object     -> DUPLICATE record, synthesized response returned
        rejected             -> ERROR record, LedgerRejectedError raised
        transport failure    -> ERROR record, LedgerCallError re-raised
    """

    def __init__(
        self,
        client: ILedgerClient,
        audit: AuditRepository,
        detector: Optional[DuplicateErrorDetector] = None,
    ):
        self._client = client
        self._audit = audit
        self._detector = detector or DuplicateErrorDetector()
        self._logger = get_logger("orchestration.ledger_call")

    async def __call__(
        self,
        order_code: str,
        step: str,
        endpoint: str,
        payload: dict,
        on_duplicate: Synthesizer = synthesize_generic_response,
    ) -> StepOutput:
        self._logger.info(f"[LEDGER] {order_code}: {step} -> {endpoint}")
        try:
            response = await self._client.call(endpoint, payload)
        except LedgerCallError as exc:
            if self._detector.matches(str(exc)):
                return await self._duplicate(order_code, step, payload, str(exc), on_duplicate)
            self._logger.error(f"[LEDGER] {order_code}: {endpoint} failed: {exc}")
            await self._record(order_code, step, AuditStatus.ERROR, payload, error=str(exc))
            raise

        outcome = interpret(response)
        if outcome.success:
            await self._record(order_code, step, AuditStatus.SUCCESS, payload, response)
            return StepOutput(value=response)

        if self._detector.is_duplicate(response, outcome.message):
            return await self._duplicate(order_code, step, payload, outcome.message, on_duplicate, response)

        message = outcome.message or INVALID_RESPONSE_MESSAGE
        self._logger.error(f"[LEDGER] {order_code}: {endpoint} rejected: {message}")
        await self._record(order_code, step, AuditStatus.ERROR, payload, response, error=message)
        raise LedgerRejectedError(endpoint, message, response)

    async def _duplicate(
        self,
        order_code: str,
        step: str,
        payload: dict,
        message: Optional[str],
        on_duplicate: Synthesizer,
        response: Any = None,
    ) -> StepOutput:
        self._logger.warning(f"[LEDGER] {order_code}: {step} already posted ({message}), continuing")
        synthesized = on_duplicate(message)
        await self._record(
            order_code,
            step,
            AuditStatus.DUPLICATE,
            payload,
            response if response is not None else synthesized,
            error=message,
        )
        return StepOutput(value=synthesized, duplicate=True)

    async def _record(
        self,
        order_code: str,
        step: str,
        status: AuditStatus,
        request: Any,
        response: Any = None,
        error: Optional[str] = None,
    ) -> None:
        await self._audit.append(
            AuditRecord(
                order_code=order_code,
                step=step,
                status=status,
                request_payload=request,
                response_payload=response,
                error_message=error,
            )
        )


class OrderPostingSteps:
    """
    The fixed posting sequence of one order.

    customer -> sales_order -> sales_invoice -> payment -> warehouse
    """

    def __init__(
        self,
        ledger_call: AuditedLedgerCall,
        promotions: IPromotionDirectory,
        payment_methods: IPaymentMethodDirectory,
        mapper: Optional[LedgerPayloadMapper] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self.ledger_call = ledger_call
        self.promotions = promotions
        self.payment_methods = payment_methods
        self.mapper = mapper or LedgerPayloadMapper()
        self.retry_policy = retry_policy or RetryPolicy()

    def definition(self) -> PipelineDefinition:
        policy = self.retry_policy
        return PipelineDefinition(
            name="order_posting",
            steps=[
                PipelineStep("customer", PostingState.CUSTOMER_OK, self.customer, policy, blocking=False),
                PipelineStep("sales_order", PostingState.ORDER_SUBMITTED, self.sales_order, policy),
                PipelineStep("sales_invoice", PostingState.INVOICE_SUBMITTED, self.sales_invoice, policy),
                PipelineStep("payment", PostingState.PAYMENT_PROCESSED, self.payment, policy),
                PipelineStep("warehouse", PostingState.WAREHOUSE_POSTED, self.warehouse, policy),
            ],
        )

    # =========================================================================
    # STEPS
    # =========================================================================

    async def customer(self, ctx: PostingContext) -> StepOutput:
        payload = self.mapper.customer_payload(ctx.document)
        return await self.ledger_call(ctx.order_code, "customer", CUSTOMER_ENDPOINT, payload)

    async def sales_order(self, ctx: PostingContext) -> StepOutput:
        payload = self.mapper.sales_order_payload(ctx.document)
        return await self.ledger_call(
            ctx.order_code,
            "sales_order",
            SALES_ORDER_ENDPOINT,
            payload,
            on_duplicate=synthesize_sales_order_response,
        )

    async def sales_invoice(self, ctx: PostingContext) -> StepOutput:
        payload = self.mapper.sales_invoice_payload(ctx.document)
        await self.validate_promotions(ctx.order_code, payload)
        return await self.ledger_call(
            ctx.order_code,
            "sales_invoice",
            SALES_INVOICE_ENDPOINT,
            payload,
            on_duplicate=synthesize_invoice_response,
        )

    async def payment(self, ctx: PostingContext) -> StepOutput:
        document = ctx.document
        responses = []
        duplicates = []
        for payment in document.payments:
            endpoint, payload = await self.route_payment(document, payment)
            if endpoint is None:
                continue
            output = await self.ledger_call(ctx.order_code, "payment", endpoint, payload)
            responses.append(output.value)
            duplicates.append(output.duplicate)

        if not responses:
            return StepOutput(skipped=True)
        return StepOutput(value=responses, duplicate=all(duplicates))

    async def warehouse(self, ctx: PostingContext) -> StepOutput:
        document = ctx.document
        if not document.warehouse_codes and not document.transfers:
            if document.allow_without_stock_codes:
                return StepOutput(value=None)
            return StepOutput(skipped=True)

        responses = []
        duplicates = []
        for (doc_code, movement_type), movements in _group_stock(document.stock_movements).items():
            payload = self.mapper.stock_payload(
                document, doc_code, movement_type, movements, document.warehouse_map
            )
            output = await self.ledger_call(
                ctx.order_code, "warehouse", _STOCK_ENDPOINTS[movement_type], payload
            )
            responses.append(output.value)
            duplicates.append(output.duplicate)

        for transfer in document.transfers:
            payload = self.mapper.transfer_payload(document, transfer)
            output = await self.ledger_call(
                ctx.order_code, "warehouse", WAREHOUSE_TRANSFER_ENDPOINT, payload
            )
            responses.append(output.value)
            duplicates.append(output.duplicate)

        return StepOutput(value=responses, duplicate=bool(duplicates) and all(duplicates))

    # =========================================================================
    # HELPERS
    # =========================================================================

    async def validate_promotions(self, order_code: str, invoice_payload: dict) -> None:
        """Raise UnknownPromotionCodeError unless every referenced code is known."""
        unknown = []
        for code in collect_promotion_codes(invoice_payload):
            if await self.promotions.get_promotion(code) is None:
                unknown.append(code)
        if unknown:
            raise UnknownPromotionCodeError(order_code, unknown)

    async def route_payment(
        self, document: OrderDocument, payment: PaymentRecord
    ) -> tuple[Optional[str], Optional[dict]]:
        """
        Endpoint and payload for one payment record.

        Returns (None, None) for records that are not posted as payments:
        non-positive cash, and voucher / e-wallet records, which are
        discount buckets of the invoice instead.
        """
        method = payment.normalized_method
        if method == CASH_METHOD_CODE:
            if payment.amount <= 0:
                return None, None
            return CASH_RECEIPT_ENDPOINT, self.mapper.cash_receipt_payload(document, payment)
        if method in VOUCHER_METHOD_CODES or method in E_WALLET_METHOD_CODES:
            return None, None

        info = await self.payment_methods.get_payment_method(method)
        document_type = info.document_type if info else None
        endpoint = _DOCUMENT_TYPE_ENDPOINTS.get(normalize_label(document_type))
        if endpoint is None:
            raise UnmappedPaymentMethodError(document.order_code, method, document_type)
        if endpoint == CREDIT_ADVICE_ENDPOINT:
            return endpoint, self.mapper.credit_advice_payload(document, payment, info)
        return endpoint, self.mapper.cash_receipt_payload(document, payment)


def _group_stock(
    movements: tuple[WarehouseMovement, ...],
) -> dict[tuple[str, MovementType], list[WarehouseMovement]]:
    grouped: dict[tuple[str, MovementType], list[WarehouseMovement]] = {}
    for movement in movements:
        if movement.movement_type not in _STOCK_ENDPOINTS:
            continue
        grouped.setdefault((movement.doc_code, movement.movement_type), []).append(movement)
    return grouped
