class HojaVerdeError(Exception):
    """Base class for storage and domain errors."""


class RecordNotFoundError(HojaVerdeError):
    def __init__(self, model: str, record_id):
        self.model = model
        self.record_id = record_id
        super().__init__(f"{model} with ID {record_id} not found")


class ConflictError(HojaVerdeError):
    """The write clashes with the current state of the data."""


class DuplicateRecordError(ConflictError):
    pass


class OrderStatusError(ConflictError):
    pass


class InsufficientStockError(HojaVerdeError):
    def __init__(self, product_name: str, available, requested):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Not enough stock for product {product_name}. "
            f"Available: {available}, Requested: {requested}"
        )
