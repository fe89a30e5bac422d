"""Domain-specific exceptions

Every concrete exception carries a stable ``kind`` so callers can branch on
the failure without parsing messages.
"""


class DomainException(Exception):
    """Base exception for domain layer"""

    kind = "DomainError"


class NotFoundError(DomainException):
    """Referenced company, loan or schedule item does not exist"""

    kind = "NotFound"


class ConflictError(DomainException):
    """Unique value (registration number, loan number) already taken"""

    kind = "Conflict"


class ValidationError(DomainException):
    """Input rejected before any write"""

    kind = "ValidationError"


class InvalidAmountError(ValidationError):
    kind = "InvalidAmount"


class InvalidRateError(ValidationError):
    kind = "InvalidRate"


class InvalidTermError(ValidationError):
    kind = "InvalidTerm"


class InvalidStatusError(ValidationError):
    kind = "InvalidStatus"


class InvalidRoleError(ValidationError):
    kind = "InvalidRole"


class UnsupportedFrequencyError(ValidationError):
    kind = "UnsupportedFrequency"


class SamePartyError(ValidationError):
    """Lender and borrower are the same company"""

    kind = "SameParty"


class PaymentRejectedError(DomainException):
    """Payment failed validation against the loan or schedule item"""

    kind = "PaymentRejected"


class AmountMismatchError(PaymentRejectedError):
    """Total is not principal + interest"""

    kind = "AmountMismatch"


class ExceedsOutstandingError(PaymentRejectedError):
    kind = "ExceedsOutstanding"


class AlreadyPaidError(PaymentRejectedError):
    kind = "AlreadyPaid"


class MismatchedLoanError(PaymentRejectedError):
    """Schedule item belongs to a different loan"""

    kind = "MismatchedLoan"


class SerializationConflictError(DomainException):
    """Concurrent transaction conflict reported by storage; safe to retry"""

    kind = "SerializationConflict"


class OperationCancelledError(DomainException):
    """Cancellation or deadline observed before the unit of work finished"""

    kind = "OperationCancelled"
