"""Month identifiers (`YYYY-MM`) and calendar arithmetic."""

import re
from datetime import date

from tourism_api.services.errors import PayoutValidationError

_MONTH_RE = re.compile(r"(\d{4})-(0[1-9]|1[0-2])")


def is_valid_month(value: object) -> bool:
    return isinstance(value, str) and _MONTH_RE.fullmatch(value) is not None


def validate_month(value: object) -> str:
    """Return `value` unchanged if it is a `YYYY-MM` month, else raise."""
    if not is_valid_month(value):
        raise PayoutValidationError(
            f"Invalid month {value!r}: expected format YYYY-MM",
            detail={"field": "month"},
        )
    return str(value)


def add_months(month: str, n: int) -> str:
    """Shift a month by `n` (negative goes back), rolling over year boundaries."""
    year, mon = (int(part) for part in validate_month(month).split("-"))
    index = year * 12 + (mon - 1) + n
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def subtract_months(month: str, n: int) -> str:
    return add_months(month, -n)


def current_month(today: date | None = None) -> str:
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"
