"""
Tests for the in-process payment gateways and the gateway factory.
"""

import random
from decimal import Decimal

import pytest

from venue_booking.core.config import get_settings
from venue_booking.services import strategy_factory
from venue_booking.services.interfaces.payment import PaymentRequest
from venue_booking.services.payment_service import (
    DeterministicPaymentGateway,
    SimulatedPaymentGateway,
)


def make_request(user_id=1, amount=Decimal("100.00"), description="Booking for Test Concert on 2030-06-01"):
    return PaymentRequest(user_id=user_id, amount=amount, description=description)


@pytest.mark.asyncio
async def test_deterministic_gateway_approves_valid_charge():
    result = await DeterministicPaymentGateway().process_payment(make_request())

    assert result.is_successful
    assert result.transaction_id.startswith("TXN-")
    assert result.error_message == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("request_kwargs, message", [
    ({"amount": Decimal("0.00")}, "Payment amount must be greater than zero"),
    ({"amount": Decimal("-5.00")}, "Payment amount must be greater than zero"),
    ({"amount": Decimal("10000.01")}, "Payment amount exceeds maximum limit of $10,000.00"),
    ({"user_id": 0}, "Invalid user ID"),
    ({"description": "   "}, "Payment description is required"),
])
async def test_deterministic_gateway_rules(request_kwargs, message):
    result = await DeterministicPaymentGateway(max_amount=Decimal("10000.00")).process_payment(
        make_request(**request_kwargs)
    )

    assert not result.is_successful
    assert result.error_message == message
    assert result.transaction_id == ""


@pytest.mark.asyncio
async def test_transaction_ids_are_unique():
    gateway = DeterministicPaymentGateway()

    first = await gateway.process_payment(make_request())
    second = await gateway.process_payment(make_request())

    assert first.transaction_id != second.transaction_id


@pytest.mark.asyncio
async def test_simulated_gateway_declines_at_zero_approval_rate():
    gateway = SimulatedPaymentGateway(approval_rate=0.0, latency_seconds=0)

    result = await gateway.process_payment(make_request())

    assert not result.is_successful
    assert result.error_message == "Payment was declined by the payment processor"


@pytest.mark.asyncio
async def test_simulated_gateway_approves_at_full_approval_rate():
    gateway = SimulatedPaymentGateway(approval_rate=1.0, latency_seconds=0, rng=random.Random(7))

    result = await gateway.process_payment(make_request())

    assert result.is_successful


@pytest.mark.asyncio
async def test_simulated_gateway_still_applies_rules():
    gateway = SimulatedPaymentGateway(approval_rate=1.0, latency_seconds=0)

    result = await gateway.process_payment(make_request(user_id=-1))

    assert result.error_message == "Invalid user ID"


@pytest.fixture
def configured_gateway(monkeypatch):
    """Select PAYMENT_GATEWAY through the environment, restoring caches afterwards."""

    def configure(name: str):
        monkeypatch.setenv("PAYMENT_GATEWAY", name)
        get_settings.cache_clear()
        return strategy_factory.get_payment_gateway_strategy()

    yield configure
    get_settings.cache_clear()


def test_factory_builds_deterministic_gateway(configured_gateway):
    assert isinstance(configured_gateway("deterministic"), DeterministicPaymentGateway)


def test_factory_builds_simulated_gateway(configured_gateway):
    assert isinstance(configured_gateway("simulated"), SimulatedPaymentGateway)


def test_factory_rejects_unknown_gateway(configured_gateway):
    with pytest.raises(ValueError):
        configured_gateway("stripe")
