"""Typed domain failures.

Every failure carries a stable ``code`` for the transport layer. The four
category bases decide how a caller should react: validation and conflict
failures are final for the given input, not-found is final, transient
failures may be retried by the caller.
"""


class DomainError(Exception):
    code = "DOMAIN_ERROR"
    message = "domain error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(DomainError):
    code = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    code = "NOT_FOUND"


class ConflictError(DomainError):
    code = "CONFLICT"


class TransientError(DomainError):
    code = "INTERNAL_ERROR"


# --- validation ---

class InvalidQuantity(ValidationError):
    message = "quantity must be greater than 0"


class DescriptionRequired(ValidationError):
    message = "description is required"


class PriceInvalid(ValidationError):
    message = "price must be greater than 0"


class QuantityNegative(ValidationError):
    message = "quantity cannot be negative"


class OrderMustHaveItems(ValidationError):
    message = "order must contain at least one item"


class FirstNameRequired(ValidationError):
    message = "first name is required"


class LastNameRequired(ValidationError):
    message = "last name is required"


class UserTooYoung(ValidationError):
    message = "user is below the minimum age"


class PasswordTooShort(ValidationError):
    message = "password is too short"


class InvalidIdentifier(ValidationError):
    message = "invalid identifier format"


class AmountOutOfRange(ValidationError):
    message = "amount exceeds the supported range"


# --- not found ---

class UserNotFound(NotFoundError):
    message = "user not found"


class ProductNotFound(NotFoundError):
    message = "product not found"


class OrderNotFound(NotFoundError):
    message = "order not found"


# --- conflict / state ---

class InsufficientStock(ConflictError):
    message = "insufficient product quantity"


class InsufficientQuantity(ConflictError):
    message = "insufficient quantity available"


class OnlyPendingCanConfirm(ConflictError):
    message = "only pending orders can be confirmed"


class CannotConfirmEmptyOrder(ConflictError):
    message = "cannot confirm empty order"


class CompletedOrdersReadonly(ConflictError):
    message = "completed orders cannot be cancelled"


# --- transient / infrastructure ---

class StoreUnavailable(TransientError):
    code = "STORE_UNAVAILABLE"
    message = "backing store unavailable"


class LockTimeout(TransientError):
    code = "LOCK_TIMEOUT"
    message = "timed out waiting for a row lock"


class DeadlineExceeded(TransientError):
    code = "DEADLINE_EXCEEDED"
    message = "deadline exceeded"
