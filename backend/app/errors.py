"""Exception hierarchy for the installment ledger.

Every failure surfaced by the services is a ``LedgerError`` carrying the HTTP
status the API layer should answer with.
"""


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Malformed, missing or out-of-range input. Never retried."""

    status_code = 400


class NotFoundError(LedgerError):
    """A referenced entity does not exist."""

    status_code = 404


class ConflictError(LedgerError):
    """A business rule rejects the operation in the entity's current state."""

    status_code = 409


class InternalError(LedgerError):
    """Storage or unexpected failure. Safe for the caller to retry."""

    status_code = 500


class InvalidTenorError(ValidationError):
    """Requested tenor is not offered by the loan scheme."""


class InsufficientDownPaymentError(ValidationError):
    """Down payment is below the scheme's minimum percentage."""


class SchemeNotFoundError(NotFoundError):
    pass


class ProductNotFoundError(NotFoundError):
    pass


class CustomerNotFoundError(NotFoundError):
    pass


class InstallmentNotFoundError(NotFoundError):
    pass


class SchemeInactiveError(ConflictError):
    pass


class ProductInactiveError(ConflictError):
    pass


class OutOfStockError(ConflictError):
    pass


class AlreadyPaidError(ConflictError):
    pass


class DuplicateError(ConflictError):
    """A unique attribute (sku, nik, phone) is already taken."""
