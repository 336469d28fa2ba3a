"""
Payment boundary interface.
The booking engine only cares whether a charge succeeded; it never interprets
the reason a gateway gives for a decline.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal


@dataclass(frozen=True)
class PaymentRequest:
    user_id: int
    amount: Decimal
    description: str
    payment_method: str = "CreditCard"


@dataclass(frozen=True)
class PaymentResult:
    is_successful: bool
    transaction_id: str = ""
    error_message: str = ""
    processed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def success(cls, transaction_id: str) -> "PaymentResult":
        return cls(is_successful=True, transaction_id=transaction_id)

    @classmethod
    def failure(cls, message: str) -> "PaymentResult":
        return cls(is_successful=False, error_message=message)


class PaymentGateway(ABC):
    """
    Interface for charging a user.

    Implementations:
    - DeterministicPaymentGateway: rule checks only, always approves valid charges
    - SimulatedPaymentGateway: rule checks plus latency and random declines
    """

    @abstractmethod
    async def process_payment(self, request: PaymentRequest) -> PaymentResult:
        """
        Charge a user.

        Args:
            request: Who to charge, how much and what for

        Returns:
            PaymentResult with a transaction id on success,
            or an error message on decline
        """
