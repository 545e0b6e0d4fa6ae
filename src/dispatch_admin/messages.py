from __future__ import annotations

from collections.abc import Iterator, Mapping

from .codes import ErrorCode
from .errors import ConfigurationError

TH_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.ORDER_REASSIGNMENT_FAILED: "ไม่สามารถมอบหมายงานใหม่ได้",
    ErrorCode.NO_AVAILABLE_PROVIDERS: "ไม่มีผู้ให้บริการที่พร้อมรับงาน",
    ErrorCode.PROVIDER_ALREADY_ASSIGNED: "ผู้ให้บริการนี้ได้รับงานแล้ว",
    ErrorCode.INVALID_ORDER_STATUS: "สถานะคำสั่งซื้อไม่ถูกต้อง",
    ErrorCode.CUSTOMER_SUSPENSION_FAILED: "ไม่สามารถระงับบัญชีลูกค้าได้",
    ErrorCode.CUSTOMER_ALREADY_SUSPENDED: "บัญชีลูกค้านี้ถูกระงับแล้ว",
    ErrorCode.CUSTOMER_NOT_SUSPENDED: "บัญชีลูกค้านี้ไม่ได้ถูกระงับ",
    ErrorCode.CUSTOMER_HAS_ACTIVE_ORDERS: "ลูกค้ามีคำสั่งซื้อที่กำลังดำเนินการอยู่",
    ErrorCode.INSUFFICIENT_ADMIN_PERMISSIONS: "คุณไม่มีสิทธิ์ดำเนินการนี้",
    ErrorCode.ADMIN_DATA_FETCH_FAILED: "ไม่สามารถโหลดข้อมูลได้",
    ErrorCode.INVALID_PROVIDER_ID: "รหัสผู้ให้บริการไม่ถูกต้อง",
    ErrorCode.INVALID_ORDER_ID: "รหัสคำสั่งซื้อไม่ถูกต้อง",
    ErrorCode.INVALID_CUSTOMER_ID: "รหัสลูกค้าไม่ถูกต้อง",
    ErrorCode.INVALID_DATE_RANGE: "ช่วงวันที่ไม่ถูกต้อง",
    ErrorCode.NETWORK_TIMEOUT: "หมดเวลาการเชื่อมต่อ กรุณาลองใหม่",
    ErrorCode.ADMIN_UNKNOWN_ERROR: "เกิดข้อผิดพลาด กรุณาลองใหม่",
}

EN_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.ORDER_REASSIGNMENT_FAILED: "Could not reassign the order.",
    ErrorCode.NO_AVAILABLE_PROVIDERS: "No providers are available to take this job.",
    ErrorCode.PROVIDER_ALREADY_ASSIGNED: "This provider is already assigned to the order.",
    ErrorCode.INVALID_ORDER_STATUS: "The order is not in a valid status for this action.",
    ErrorCode.CUSTOMER_SUSPENSION_FAILED: "Could not change the customer's suspension.",
    ErrorCode.CUSTOMER_ALREADY_SUSPENDED: "This customer account is already suspended.",
    ErrorCode.CUSTOMER_NOT_SUSPENDED: "This customer account is not suspended.",
    ErrorCode.CUSTOMER_HAS_ACTIVE_ORDERS: "The customer has orders in progress.",
    ErrorCode.INSUFFICIENT_ADMIN_PERMISSIONS: "You do not have permission to do this.",
    ErrorCode.ADMIN_DATA_FETCH_FAILED: "Could not load data.",
    ErrorCode.INVALID_PROVIDER_ID: "Invalid provider ID.",
    ErrorCode.INVALID_ORDER_ID: "Invalid order ID.",
    ErrorCode.INVALID_CUSTOMER_ID: "Invalid customer ID.",
    ErrorCode.INVALID_DATE_RANGE: "Invalid date range.",
    ErrorCode.NETWORK_TIMEOUT: "Connection timed out, please try again.",
    ErrorCode.ADMIN_UNKNOWN_ERROR: "Something went wrong, please try again.",
}


class MessageCatalog(Mapping[ErrorCode, str]):
    """
    Localized user-facing messages, one per ErrorCode.

    Construction fails unless every code has a non-empty message, so lookups
    on a built catalog can never miss.
    """

    def __init__(self, locale: str, messages: Mapping[ErrorCode | str, str]):
        resolved: dict[ErrorCode, str] = {}
        for key, text in messages.items():
            try:
                code = ErrorCode(key)
            except ValueError as e:
                raise ConfigurationError(f"Unknown error code in {locale!r} catalog: {key!r}") from e
            resolved[code] = text

        missing = [c.value for c in ErrorCode if c not in resolved]
        if missing:
            raise ConfigurationError(f"Catalog {locale!r} is missing messages for: {', '.join(missing)}")
        empty = [c.value for c, text in resolved.items() if not isinstance(text, str) or not text.strip()]
        if empty:
            raise ConfigurationError(f"Catalog {locale!r} has empty messages for: {', '.join(empty)}")

        self.locale = locale
        self._messages = resolved

    def __getitem__(self, code: ErrorCode) -> str:
        try:
            return self._messages[ErrorCode(code)]
        except ValueError:
            raise KeyError(code) from None

    def __iter__(self) -> Iterator[ErrorCode]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


THAI_CATALOG = MessageCatalog("th", TH_MESSAGES)
ENGLISH_CATALOG = MessageCatalog("en", EN_MESSAGES)

_CATALOGS = {"th": THAI_CATALOG, "en": ENGLISH_CATALOG}


def catalog_for(locale: str | None) -> MessageCatalog:
    if not locale:
        return THAI_CATALOG
    catalog = _CATALOGS.get(locale.split("-")[0].split("_")[0].lower())
    if catalog is None:
        raise ConfigurationError(f"No message catalog for locale {locale!r}.")
    return catalog
