"""
Exceptions for payments app.

PaymentValidationError subclasses are rejections of a checkout request and
map to 4xx responses. PaymentIntegrityError subclasses come from the gateway
notification path.
"""


class PaymentError(Exception):
    """Base exception for payment errors."""

    pass


class PaymentValidationError(PaymentError):
    """A payment could not be initiated."""

    pass


class PackageNotFoundError(PaymentValidationError):
    """Package does not exist."""

    def __init__(self, package_id: int):
        super().__init__("Package not found")
        self.package_id = package_id


class PackageUnavailableError(PaymentValidationError):
    """Package exists but is not currently sold."""

    def __init__(self, package_id: int):
        super().__init__("Package is not available")
        self.package_id = package_id


class PackageFullError(PaymentValidationError):
    """Package has reached its member capacity."""

    def __init__(self, package_id: int):
        super().__init__("Package has reached maximum capacity")
        self.package_id = package_id


class UserNotFoundError(PaymentValidationError):
    """User does not exist."""

    def __init__(self, user_id: int):
        super().__init__("User not found")
        self.user_id = user_id


class MembershipStillActiveError(PaymentValidationError):
    """The user already has a running membership."""

    def __init__(self, days_remaining: int):
        super().__init__(
            f"You already have an active membership. "
            f"It expires in {days_remaining} days. "
            f"You can renew after it expires."
        )
        self.days_remaining = days_remaining


class DuplicatePendingPaymentError(PaymentValidationError):
    """A recent pending payment exists for the user."""

    def __init__(self, order_id: str):
        super().__init__(
            f"You have a pending payment (order {order_id}). "
            f"Complete or wait for it to expire before starting a new one."
        )
        self.order_id = order_id


class PaymentIntegrityError(PaymentError):
    """A gateway notification could not be trusted or matched."""

    pass


class InvalidSignatureError(PaymentIntegrityError):
    """Notification signature does not match."""

    def __init__(self, order_id: str):
        super().__init__("Invalid hash")
        self.order_id = order_id


class UnknownOrderError(PaymentIntegrityError):
    """Notification refers to an order we never created."""

    def __init__(self, order_id: str):
        super().__init__("Payment not found")
        self.order_id = order_id


class InvalidPaymentTransition(PaymentError):
    """A payment status change that the ledger does not allow."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move payment from '{current}' to '{target}'")
        self.current = current
        self.target = target


class PaymentAccessDeniedError(PaymentError):
    """User may not view this payment."""

    pass
