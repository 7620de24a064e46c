"""Domain errors raised by the catalog and order services.

They carry identifiers and counts only. Translating them into HTTP
responses is the job of the handlers registered in ``main.py``.
"""

from typing import Any, Dict


class StoreError(Exception):
    """Base class for every error the services raise on purpose."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class NotFoundError(StoreError):
    resource = "Resource"

    def __init__(self, identifier: str):
        super().__init__(f"{self.resource} with ID {identifier} not found", id=identifier)
        self.identifier = identifier


class ProductNotFound(NotFoundError):
    resource = "Product"


class OrderNotFound(NotFoundError):
    resource = "Order"


class InsufficientStockError(StoreError):
    def __init__(self, product_id: str, product_name: str, available: int, requested: int):
        super().__init__(
            f'Insufficient stock for "{product_name}". Available: {available}, Requested: {requested}',
            product_id=product_id,
            available=available,
            requested=requested,
        )
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested


class InvalidStatusError(StoreError):
    def __init__(self, status: str, allowed):
        super().__init__(
            "Invalid status. Must be one of: " + ", ".join(allowed),
            status=status,
        )
        self.status = status


class ForbiddenError(StoreError):
    pass


class DuplicateProductError(StoreError):
    def __init__(self, name: str):
        super().__init__("A product with this name already exists", name=name)
        self.name = name
