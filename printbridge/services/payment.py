from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from printbridge.errors import ValidationError
from printbridge.models import PaymentRecord


logger = logging.getLogger(__name__)

SIMULATED_METHOD = "test-simulated"


class SimulatedPaymentService:
    """Stands in for a payment gateway: every charge succeeds immediately."""

    def __init__(self, method: str = SIMULATED_METHOD):
        self.method = method

    def charge(self, *, request_id: str, amount: Decimal, now: datetime) -> PaymentRecord:
        if amount < 0:
            raise ValidationError(field="payment.amount", code="range", message="amount must not be negative")
        logger.info("Simulated payment of %s for %s", amount, request_id)
        return PaymentRecord(status="paid", method=self.method, amount=amount, paid_at=now)
