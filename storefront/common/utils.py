from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional, Union

from storefront.common.constants import CURRENCY_PRECISION


def now() -> datetime:
    return datetime.now(timezone.utc)


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Round to currency precision. Only call this where a value is displayed."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CURRENCY_PRECISION, rounding=ROUND_HALF_UP)


def format_money(value: Union[Decimal, int, float, str], symbol: str = "$") -> str:
    return f"{symbol}{to_money(value)}"


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, Decimal("0"))


def extract_error_message(payload: Any) -> Optional[str]:
    """
    Pull a human readable message out of an error body.
    Understands flat bodies ({"message": ..}, {"error": ..}, {"detail": ..}) and the
    envelope {"status": "error", "error": {"code": .., "details": {"message": ..}}}.
    """
    if payload is None:
        return None
    if isinstance(payload, str):
        return payload.strip() or None
    if not isinstance(payload, dict):
        return None

    for key in ("message", "detail"):
        val = payload.get(key)
        if isinstance(val, str) and val:
            return val

    err = payload.get("error")
    if isinstance(err, str) and err:
        return err
    if isinstance(err, dict):
        details = err.get("details")
        if isinstance(details, dict) and isinstance(details.get("message"), str):
            return details["message"]
        if isinstance(details, str) and details:
            return details
        if err.get("code"):
            return str(err["code"])
    return None


def unwrap_page(payload: Any) -> list:
    """Backends answer list endpoints either with a bare list or a page {"content": [...]}"""
    if payload is None:
        return []
    if isinstance(payload, dict):
        content = payload.get("content")
        if content is None:
            content = payload.get("data", [])
        return list(content or [])
    return list(payload)
