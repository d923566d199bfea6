"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """User-supplied data failed validation"""

    pass


class InvalidTransactionDataError(ValidationError):
    """Transaction data is malformed or invalid"""

    pass


class InsufficientFundsError(DomainException):
    """Expense exceeds debit balance plus available credit"""

    pass


class CreditLimitExceededError(DomainException):
    """Amount charged to the card exceeds available credit"""

    pass


class NotFoundError(DomainException):
    """Requested entity does not exist"""

    pass


class ConflictError(DomainException):
    """Entity already exists or is in a state that forbids the operation"""

    pass


class MatriculaGenerationError(DomainException):
    """Could not find a free account number"""

    pass


class CouponError(ValidationError):
    """Coupon is unknown, inactive, expired or exhausted"""

    pass


class PaymentGatewayError(DomainException):
    """Payment gateway returned an error or is unavailable"""

    pass


class AssistantError(DomainException):
    """AI gateway returned an error or an unusable response"""

    pass


class SpeechSynthesisError(DomainException):
    """Text-to-speech service failed"""

    pass


class SpeechInterruptedError(DomainException):
    """Speech was superseded by a newer request on the same channel"""

    pass
