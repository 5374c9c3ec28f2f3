"""Exceptions raised by the supplier scorer."""


class SupplierScorerError(Exception):
    """Base class for supplier scorer errors."""


class JobRecordFetchError(SupplierScorerError):
    """A supplier's job records could not be read."""

    def __init__(self, supplier_id: int, message: str = "job records unavailable"):
        self.supplier_id = supplier_id
        super().__init__(f"Supplier {supplier_id}: {message}")


class SnapshotError(SupplierScorerError):
    """A snapshot file could not be loaded."""
