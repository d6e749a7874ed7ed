"""
Ledger payload mapping.

Turns an OrderDocument into the JSON bodies of the ledger endpoints.

CRITICAL: Field names are the ledger's wire format. Discount buckets map to
the paired fields ma_ckNN / ckNN_nt for NN = 01..22.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from core.domain.accounting.rule_tables import INVESTMENT_GIFT_CODE
from core.domain.enums import MovementType
from core.domain.value_objects import (
    BUCKET_COUNT,
    OrderDocument,
    PaymentMethodInfo,
    PaymentRecord,
    ResolvedLine,
    TransferRequest,
    WarehouseMovement,
)
from ledger_sdk.utils.numbers import ZERO


CURRENCY = "VND"
FX_RATE = 1
# Keys kept even when empty: the ledger distinguishes "no batch" from "absent".
PRESERVED_EMPTY_KEYS = frozenset({"ma_lo", "so_serial"})

_VOUCHER_CODE_ALIASES = {"VCHB": "VC HB", "VCKM": "VC KM", "VCDV": "VC DV"}
_FBV_PREFIX = "FBV TT "

# ma_nx (import/export reason) by movement direction
_STOCK_REASON = {MovementType.OUT: "1111", MovementType.IN: "1112"}


# =============================================================================
# CLEANING
# =============================================================================

def clean_payload(value: Any) -> Any:
    """Recursively drop None and empty-string fields, except preserved keys."""
    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            if key in PRESERVED_EMPTY_KEYS:
                cleaned[key] = item
                continue
            if item is None or item == "":
                continue
            cleaned[key] = clean_payload(item)
        return cleaned
    if isinstance(value, list):
        return [clean_payload(item) for item in value]
    return value


def _amount(value: Optional[Decimal]) -> float:
    return float(value if value is not None else ZERO)


def _date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def normalize_customer_code(code: Optional[str]) -> str:
    """Employee customers carry an "NV" prefix the ledger does not know."""
    code = (code or "").strip()
    if code.upper().startswith("NV"):
        return code[2:]
    return code


def bucket_field_names(index: int) -> tuple[str, str]:
    return f"ma_ck{index:02d}", f"ck{index:02d}_nt"


# =============================================================================
# MAPPER
# =============================================================================

class LedgerPayloadMapper:
    """
    Builds ledger request bodies.

    Every public method returns an already cleaned payload.
    """

    def customer_payload(self, document: OrderDocument) -> Dict[str, Any]:
        return clean_payload({
            "ma_dvcs": document.company_code,
            "ma_kh": normalize_customer_code(document.customer_code),
            "ten_kh": document.customer_code,
        })

    def sales_order_payload(self, document: OrderDocument) -> Dict[str, Any]:
        return self._sales_document(document)

    def sales_invoice_payload(self, document: OrderDocument) -> Dict[str, Any]:
        return self._sales_document(document)

    def _sales_document(self, document: OrderDocument) -> Dict[str, Any]:
        first = document.lines[0].resolution if document.lines else None
        header = {
            "ma_dvcs": document.company_code,
            "ma_kh": normalize_customer_code(document.customer_code),
            "so_ct": document.order_code,
            "ngay_ct": _date(document.order_date),
            "ma_nt": CURRENCY,
            "ty_gia": FX_RATE,
            "ma_kenh": document.branch_code,
            "loai_gd": first.transaction_type if first else None,
            "detail": [self.detail_line(line, number) for number, line in enumerate(document.lines, start=1)],
        }
        return clean_payload(header)

    def detail_line(self, resolved: ResolvedLine, number: int = 1) -> Dict[str, Any]:
        resolution = resolved.resolution
        sale = resolved.line.sale
        accounts = resolution.accounts
        detail: Dict[str, Any] = {
            "dong": number,
            "ma_vt": resolved.material_code,
            "dvt": resolved.product.unit if resolved.product else None,
            "ma_kho": resolved.warehouse_code,
            "ma_lo": resolved.batch_no or "",
            "so_serial": resolved.serial_no or "",
            "so_luong": _amount(resolved.line.qty),
            "gia_ban": _amount(resolution.price.unit_price),
            "tien_hang": _amount(resolution.price.subtotal),
            "loai_gd": resolution.transaction_type,
            "ma_thue": resolution.tax_code,
            "tien_thue": _amount(sale.tax_amount),
            "tk_chiet_khau": accounts.discount_account,
            "tk_chi_phi": accounts.expense_account,
            "ma_phi": accounts.fee_code,
            "ma_ctkm_th": resolution.promotion.gift_code,
            "km_yn": resolution.gift_flag,
            "ma_bp": sale.department_code,
        }
        for index in range(1, BUCKET_COUNT + 1):
            bucket = resolution.buckets[index]
            code_field, amount_field = bucket_field_names(index)
            detail[code_field] = bucket.code
            detail[amount_field] = _amount(bucket.amount)
        return detail

    # =========================================================================
    # PAYMENTS
    # =========================================================================

    def cash_receipt_payload(self, document: OrderDocument, payment: PaymentRecord) -> Dict[str, Any]:
        return clean_payload(self._payment_base(document, payment))

    def credit_advice_payload(
        self,
        document: OrderDocument,
        payment: PaymentRecord,
        method: PaymentMethodInfo,
    ) -> Dict[str, Any]:
        payload = self._payment_base(document, payment)
        payload["ma_ngan_hang"] = method.bank_unit
        payload["ma_doi_tac"] = method.partner_code
        return clean_payload(payload)

    def _payment_base(self, document: OrderDocument, payment: PaymentRecord) -> Dict[str, Any]:
        return {
            "ma_dvcs": document.company_code,
            "ma_kh": normalize_customer_code(document.customer_code),
            "so_ct": document.order_code,
            "ngay_ct": _date(document.order_date),
            "ma_nt": CURRENCY,
            "ty_gia": FX_RATE,
            "ma_httt": payment.normalized_method,
            "tien": _amount(payment.amount),
            "so_tham_chieu": payment.ref_no,
            "ky": payment.period_code,
        }

    # =========================================================================
    # WAREHOUSE
    # =========================================================================

    def stock_payload(
        self,
        document: OrderDocument,
        doc_code: str,
        movement_type: MovementType,
        movements: Iterable[WarehouseMovement],
        warehouse_map: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Warehouse release (io type O) or receipt (io type I)."""
        mapping = warehouse_map or {}
        return clean_payload({
            "ma_dvcs": document.company_code,
            "ma_kh": normalize_customer_code(document.customer_code),
            "so_ct": doc_code or document.order_code,
            "so_ct_goc": document.order_code,
            "ngay_ct": _date(document.order_date),
            "ma_nx": _STOCK_REASON.get(movement_type, "1111"),
            "detail": [
                {
                    "ma_vt": m.material_code or m.item_code,
                    "ma_kho": mapping.get(m.stock_code, m.stock_code),
                    "so_luong": _amount(abs(m.qty)),
                    "ma_lo": m.batch_serial or "",
                    "so_serial": "",
                }
                for m in movements
            ],
        })

    def transfer_payload(self, document: OrderDocument, transfer: TransferRequest) -> Dict[str, Any]:
        return clean_payload({
            "ma_dvcs": document.company_code,
            "so_ct": transfer.lines[0].doc_code or transfer.order_code,
            "so_ct_goc": transfer.order_code,
            "ngay_ct": _date(transfer.lines[0].trans_date or document.order_date),
            "ma_kho_xuat": transfer.source_warehouse,
            "ma_kho_nhap": transfer.target_warehouse,
            "detail": [
                {
                    "ma_vt": m.material_code or m.item_code,
                    "so_luong": _amount(abs(m.qty)),
                    "ma_lo": m.batch_serial or "",
                    "so_serial": "",
                }
                for m in transfer.lines
            ],
        })


# =============================================================================
# PROMOTION CODE COLLECTION
# =============================================================================

def normalize_bucket1_code(code: str) -> str:
    """
    Normalize a ma_ck01 code to its promotion-directory form.

    "FBV TT VCHB-2511" -> "VC HB"
    "R601ECOM-X.I"     -> "R601ECOM"
    """
    code = code.split("-")[0].strip()
    if code.startswith(_FBV_PREFIX):
        code = code[len(_FBV_PREFIX):]
    return _VOUCHER_CODE_ALIASES.get(code, code)


def collect_promotion_codes(payload: Dict[str, Any]) -> List[str]:
    """
    Every promotion code referenced by an invoice payload.

    Includes gift codes (except the investment literal) and bucket codes
    ma_ck01..ma_ck22 except ma_ck05, which carries voucher labels.
    """
    codes: set[str] = set()
    for detail in payload.get("detail", []):
        gift = detail.get("ma_ctkm_th")
        if gift and gift != INVESTMENT_GIFT_CODE:
            codes.add(gift)
        for index in range(1, BUCKET_COUNT + 1):
            if index == 5:
                continue
            code = detail.get(bucket_field_names(index)[0])
            if not code:
                continue
            codes.add(normalize_bucket1_code(code) if index == 1 else code)
    return sorted(codes)
