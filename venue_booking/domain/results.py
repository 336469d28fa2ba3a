"""Result values for business-rule outcomes.

Business outcomes (sold out, missing selector, payment declined...) travel as
values that callers branch on. Invariant breaches are exceptions instead, see
venue_booking.domain.errors.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationResult:
    """Success flag plus a user-facing message on failure."""

    is_valid: bool
    error_message: str = ""

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def failure(cls, message: str) -> "ValidationResult":
        return cls(is_valid=False, error_message=message)

    def __bool__(self) -> bool:
        return self.is_valid
