from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from printbridge.errors import ValidationError
from printbridge.services.payment import SimulatedPaymentService


NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_charge_always_succeeds() -> None:
    record = SimulatedPaymentService().charge(request_id="PR-1", amount=Decimal("25.00"), now=NOW)
    assert record.status == "paid"
    assert record.method == "test-simulated"
    assert record.amount == Decimal("25.00")
    assert record.paid_at == NOW


def test_negative_amount_is_rejected() -> None:
    with pytest.raises(ValidationError):
        SimulatedPaymentService().charge(request_id="PR-1", amount=Decimal("-1"), now=NOW)
