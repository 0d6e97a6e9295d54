"""Error taxonomy of the order engine.

Services raise these; the API layer turns them into ``{"kind", "message"}``
responses with the status code of the kind. Callers tell failures apart by
class (or ``kind``), never by message text.
"""


class MarketplaceError(Exception):
    kind = "internal"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(MarketplaceError):
    """Malformed input, detectable without touching storage."""

    kind = "validation_error"
    status_code = 400


class Unauthenticated(MarketplaceError):
    kind = "unauthenticated"
    status_code = 401


class Forbidden(MarketplaceError):
    """Caller is known but may not act on this entity."""

    kind = "forbidden"
    status_code = 403


class NotFound(MarketplaceError):
    kind = "not_found"
    status_code = 404


class OrderNotFound(NotFound):
    kind = "order_not_found"

    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found.")
        self.order_id = order_id


class ProductNotFound(NotFound):
    # a bad reference in a cart is the consumer's problem, hence 400
    kind = "product_not_found"
    status_code = 400

    def __init__(self, product_id: int):
        super().__init__(f"Product with ID {product_id} not found.")
        self.product_id = product_id


class Conflict(MarketplaceError):
    kind = "conflict"
    status_code = 409


class DuplicateTransactionId(Conflict):
    kind = "duplicate_transaction_id"

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction ID '{transaction_id}' already exists.")
        self.transaction_id = transaction_id


class OrderNotClaimable(Conflict):
    kind = "order_not_claimable"

    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} is not available for pickup or is already assigned.")
        self.order_id = order_id


class InvalidTransition(MarketplaceError):
    kind = "invalid_transition"
    status_code = 400

    def __init__(self, source: str, target: str):
        super().__init__(f"Invalid status transition from '{source}' to '{target}'.")
        self.source = source
        self.target = target


class InsufficientStock(MarketplaceError):
    kind = "insufficient_stock"
    status_code = 400

    def __init__(self, product_id: int, name: str, available: int, requested: int):
        super().__init__(
            f"Not enough stock for product: {name} (ID: {product_id}). "
            f"Available: {available}, Requested: {requested}."
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class ProductUnavailable(MarketplaceError):
    kind = "product_unavailable"
    status_code = 400

    def __init__(self, product_id: int, name: str):
        super().__init__(f"Product: {name} (ID: {product_id}) is not currently available for purchase.")
        self.product_id = product_id


class Internal(MarketplaceError):
    kind = "internal"
    status_code = 500
