"""Faults raised when the domain model is misused.

These indicate a bug in the caller, not a business condition, and are never
converted into result values by the core.
"""


class BookingDomainError(Exception):
    """
    Base exception for all domain-level faults
    inside the booking engine.
    """


class InvariantViolation(BookingDomainError):
    """Raised when an operation would break a domain invariant."""


class InvalidStatusTransitionError(InvariantViolation):
    """
    Raised when an illegal seat or payment status transition is attempted.
    """

    def __init__(self, subject: str, from_state: str, to_state: str):
        self.subject = subject
        self.from_state = from_state
        self.to_state = to_state

        message = (
            f"Illegal {subject} transition attempted: "
            f"{from_state} -> {to_state}"
        )
        super().__init__(message)
