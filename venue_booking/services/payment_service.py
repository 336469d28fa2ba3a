"""
In-process payment gateways.

Neither talks to a real processor. DeterministicPaymentGateway applies the
charge rules and approves everything that passes them; SimulatedPaymentGateway
adds processor latency and occasional declines for load experiments.
"""

import asyncio
import random
import uuid
from decimal import Decimal

from venue_booking.core.config import get_settings
from venue_booking.core.logging import get_logger
from venue_booking.services.interfaces.payment import PaymentGateway, PaymentRequest, PaymentResult

logger = get_logger(__name__)


def _new_transaction_id() -> str:
    return f"TXN-{uuid.uuid4().hex}"


class DeterministicPaymentGateway(PaymentGateway):
    """
    Approves a charge if:
    - Amount is positive and within the configured maximum
    - User id is positive
    - A description is given
    """

    def __init__(self, max_amount: Decimal | None = None):
        self.max_amount = max_amount if max_amount is not None else get_settings().PAYMENT_MAX_AMOUNT

    def check_rules(self, request: PaymentRequest) -> PaymentResult | None:
        """Return a declined result if a rule fails, else None."""
        if request.amount <= 0:
            return PaymentResult.failure("Payment amount must be greater than zero")

        if request.amount > self.max_amount:
            return PaymentResult.failure(
                f"Payment amount exceeds maximum limit of ${self.max_amount:,.2f}"
            )

        if request.user_id <= 0:
            return PaymentResult.failure("Invalid user ID")

        if not request.description.strip():
            return PaymentResult.failure("Payment description is required")

        return None

    async def process_payment(self, request: PaymentRequest) -> PaymentResult:
        declined = self.check_rules(request)
        if declined is not None:
            return declined
        return PaymentResult.success(_new_transaction_id())


class SimulatedPaymentGateway(DeterministicPaymentGateway):
    """Same rules, plus latency and a configurable approval rate."""

    def __init__(
        self,
        max_amount: Decimal | None = None,
        approval_rate: float | None = None,
        latency_seconds: float | None = None,
        rng: random.Random | None = None,
    ):
        super().__init__(max_amount)
        settings = get_settings()
        self.approval_rate = approval_rate if approval_rate is not None else settings.PAYMENT_APPROVAL_RATE
        self.latency_seconds = latency_seconds if latency_seconds is not None else settings.PAYMENT_LATENCY_SECONDS
        self._rng = rng or random.Random()

    async def process_payment(self, request: PaymentRequest) -> PaymentResult:
        # Simulate processor round trip
        await asyncio.sleep(self.latency_seconds)

        declined = self.check_rules(request)
        if declined is not None:
            return declined

        if self._rng.random() >= self.approval_rate:
            logger.info("payment_randomly_declined", user_id=request.user_id)
            return PaymentResult.failure("Payment was declined by the payment processor")

        return PaymentResult.success(_new_transaction_id())
