"""
Typed Exception Hierarchy for the Payroll Kernel.

===============================================================================
TYPED EXCEPTIONS
===============================================================================

Callers (the HTTP layer, batch scripts, tests) must be able to tell a
malformed month key from a locked order without parsing message strings.
Every error therefore has:
  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

Example:
    try:
        ledger.submit(user_id, "2024-02-10", 12)
    except OrderLockedError as e:
        return api_error(status=403, code=e.code, order_id=e.order_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    PayrollKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidMonthKeyError
    |   +-- InvalidDateKeyError
    |   +-- InvalidSubmittedCountError
    |   +-- InvalidApprovedCountError
    |   +-- InvalidAmountError
    |   +-- InvalidOrderActionError
    |
    +-- UserError
    |   +-- UserNotFoundError
    |   +-- UserInactiveError
    |
    +-- OrderError
    |   +-- OrderNotFoundError
    |   +-- OrderLockedError
    |   +-- InvalidOrderTransitionError
    |
    +-- WarningRecordError
        +-- WarningNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                      | When Raised
------------|---------------------------|---------------------------------------
Validation  | INVALID_MONTH_KEY         | Month key is not YYYY-MM / month not 1..12
            | INVALID_DATE_KEY          | Date key is not a real YYYY-MM-DD day
            | INVALID_SUBMITTED_COUNT   | Submitted count missing or negative
            | INVALID_APPROVED_COUNT    | APPROVE without a count >= 0
            | INVALID_AMOUNT            | Deduction amount negative / not a number
            | INVALID_ORDER_ACTION      | Action is not APPROVE or REJECT
------------|---------------------------|---------------------------------------
User        | USER_NOT_FOUND            | Referenced user does not exist
            | USER_INACTIVE             | Target user is deactivated
------------|---------------------------|---------------------------------------
Order       | ORDER_NOT_FOUND           | Order id does not resolve
            | ORDER_LOCKED              | Employee edit of an APPROVED order
            | INVALID_ORDER_TRANSITION  | Decision on an order that is not PENDING
------------|---------------------------|---------------------------------------
Warning     | WARNING_NOT_FOUND         | Warning missing or owned by another user

All of these are client errors detected before any mutation.  Storage-layer
failures (``sqlalchemy.exc.SQLAlchemyError``) are never wrapped; they reach
the caller unchanged.
"""


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


# Validation exceptions


class ValidationError(PayrollKernelError):
    """Base exception for malformed caller input."""

    code: str = "VALIDATION_ERROR"


class InvalidMonthKeyError(ValidationError):
    """Month key does not match YYYY-MM or the month is outside 1..12."""

    code: str = "INVALID_MONTH_KEY"

    def __init__(self, month_key: object):
        self.month_key = month_key
        super().__init__(f"Invalid month key {month_key!r}. Expected YYYY-MM")


class InvalidDateKeyError(ValidationError):
    """Date key does not match YYYY-MM-DD or is not a calendar day."""

    code: str = "INVALID_DATE_KEY"

    def __init__(self, date_key: object):
        self.date_key = date_key
        super().__init__(f"Invalid date key {date_key!r}. Expected YYYY-MM-DD")


class InvalidSubmittedCountError(ValidationError):
    """Submitted order count is missing, not an integer, or negative."""

    code: str = "INVALID_SUBMITTED_COUNT"

    def __init__(self, submitted_count: object):
        self.submitted_count = submitted_count
        super().__init__(
            f"Submitted count must be a non-negative integer, got {submitted_count!r}"
        )


class InvalidApprovedCountError(ValidationError):
    """APPROVE requested without a valid non-negative approved count."""

    code: str = "INVALID_APPROVED_COUNT"

    def __init__(self, approved_count: object):
        self.approved_count = approved_count
        super().__init__(
            f"Approved count must be a non-negative integer, got {approved_count!r}"
        )


class InvalidAmountError(ValidationError):
    """Monetary amount is negative or not a decimal value."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: object):
        self.amount = amount
        super().__init__(f"Amount must be a non-negative decimal, got {amount!r}")


class InvalidOrderActionError(ValidationError):
    """Decision action is neither APPROVE nor REJECT."""

    code: str = "INVALID_ORDER_ACTION"

    def __init__(self, action: object):
        self.action = action
        super().__init__(f"Unknown order action {action!r}")


# User exceptions


class UserError(PayrollKernelError):
    """Base exception for referenced-user errors."""

    code: str = "USER_ERROR"


class UserNotFoundError(UserError):
    """User with the given id does not exist."""

    code: str = "USER_NOT_FOUND"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class UserInactiveError(UserError):
    """User exists but is deactivated."""

    code: str = "USER_INACTIVE"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} is inactive")


# Order exceptions


class OrderError(PayrollKernelError):
    """Base exception for order-ledger errors."""

    code: str = "ORDER_ERROR"


class OrderNotFoundError(OrderError):
    """Order submission with the given id does not exist."""

    code: str = "ORDER_NOT_FOUND"

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class OrderLockedError(OrderError):
    """Attempt to modify an APPROVED order submission."""

    code: str = "ORDER_LOCKED"

    def __init__(self, order_id: str, date_key: str):
        self.order_id = order_id
        self.date_key = date_key
        super().__init__(
            f"Cannot modify approved order submission {order_id} for {date_key}"
        )


class InvalidOrderTransitionError(OrderError):
    """Requested status change is not allowed from the current status."""

    code: str = "INVALID_ORDER_TRANSITION"

    def __init__(self, order_id: str, from_status: str, to_status: str):
        self.order_id = order_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Order {order_id} cannot move from {from_status} to {to_status}"
        )


# Warning exceptions


class WarningRecordError(PayrollKernelError):
    """Base exception for warning-record errors."""

    code: str = "WARNING_RECORD_ERROR"


class WarningNotFoundError(WarningRecordError):
    """Warning does not exist or does not belong to the requesting user."""

    code: str = "WARNING_NOT_FOUND"

    def __init__(self, warning_id: str, user_id: str):
        self.warning_id = warning_id
        self.user_id = user_id
        super().__init__(f"Warning not found: {warning_id}")
