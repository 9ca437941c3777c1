from datetime import date

import pytest

from tourism_api.services.errors import PayoutValidationError
from tourism_api.services.months import (
    add_months,
    current_month,
    is_valid_month,
    subtract_months,
    validate_month,
)


def test_is_valid_month():
    assert is_valid_month("2025-03")
    assert is_valid_month("1999-12")
    assert not is_valid_month("2025-13")
    assert not is_valid_month("2025-00")
    assert not is_valid_month("2025-3")
    assert not is_valid_month("2025/03")
    assert not is_valid_month("2025-03\n")
    assert not is_valid_month(" 2025-03")
    assert not is_valid_month(202503)
    assert not is_valid_month(None)


def test_validate_month_raises_validation_error():
    assert validate_month("2025-03") == "2025-03"
    with pytest.raises(PayoutValidationError) as exc:
        validate_month("March 2025")
    assert exc.value.code == "VALIDATION_ERROR"
    assert exc.value.status_code == 400

    with pytest.raises(PayoutValidationError):
        validate_month("2025-03\n")


def test_subtract_months_rolls_over_year():
    assert subtract_months("2025-03", 1) == "2025-02"
    assert subtract_months("2025-01", 1) == "2024-12"
    assert subtract_months("2025-02", 2) == "2024-12"
    assert subtract_months("2025-03", 14) == "2024-01"


def test_add_months():
    assert add_months("2024-12", 1) == "2025-01"
    assert add_months("2025-03", 0) == "2025-03"
    assert add_months("2025-11", 3) == "2026-02"


def test_current_month():
    assert current_month(date(2025, 4, 30)) == "2025-04"
    assert is_valid_month(current_month())
