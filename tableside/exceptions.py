class OrderingError(Exception):
    """Base class for ordering errors."""


class NotFound(OrderingError):
    """A referenced table, menu item, cart line or order does not exist."""


class EmptyCart(OrderingError):
    """The table has nothing in its cart. Nothing was written."""

    def __init__(self, table_id: int) -> None:
        super().__init__(f"Cart is empty for table {table_id}")
        self.table_id = table_id


class PlacementFailed(OrderingError):
    """The placement transaction was rolled back. The cause is kept for operators."""

    def __init__(self, table_id: int, cause: BaseException) -> None:
        super().__init__(f"Failed to place order for table {table_id}")
        self.table_id = table_id
        self.cause = cause
