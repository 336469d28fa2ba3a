"""
Payment gateway factory.
Configures which gateway implementation the booking service charges through.
"""

from venue_booking.core.config import get_settings
from venue_booking.services.interfaces.payment import PaymentGateway
from venue_booking.services.payment_service import (
    DeterministicPaymentGateway,
    SimulatedPaymentGateway,
)


def get_payment_gateway_strategy() -> PaymentGateway:
    """
    Build the configured payment gateway.

    Strategy selection via PAYMENT_GATEWAY:
    - deterministic (default): rule checks only, predictable for tests
    - simulated: adds latency and random declines
    """
    strategy = get_settings().PAYMENT_GATEWAY

    if strategy == 'simulated':
        return SimulatedPaymentGateway()
    if strategy == 'deterministic':
        return DeterministicPaymentGateway()
    raise ValueError(f"Unknown PAYMENT_GATEWAY: {strategy!r}")


# Singleton instance
_gateway: PaymentGateway | None = None


def get_payment_gateway() -> PaymentGateway:
    """Get payment gateway singleton."""
    global _gateway
    if _gateway is None:
        _gateway = get_payment_gateway_strategy()
    return _gateway
