"""
Job Record Source Protocol

Defines the read-only interface the ranker uses to fetch supplier job
history, and an in-memory implementation.
"""

from collections import defaultdict
from typing import Iterable, Protocol

from .exceptions import JobRecordFetchError
from .schema import JobRecord


class JobRecordSource(Protocol):
    """Protocol for supplier job history access."""

    def fetch_job_records(self, supplier_id: int) -> list[JobRecord]:
        """
        Fetch every job record assigned to a supplier.

        Args:
            supplier_id: Supplier to fetch records for

        Returns:
            Completed, cancelled and in-progress records for the supplier

        Raises:
            JobRecordFetchError: If the records cannot be read
        """
        ...


class InMemoryJobRecordSource:
    """Job record source backed by a list of records.

    Suppliers listed in ``unavailable`` raise JobRecordFetchError, which
    lets callers model a partially failing backend.
    """

    def __init__(self, records: Iterable[JobRecord] = (), unavailable: Iterable[int] = ()):
        self._records: dict[int, list[JobRecord]] = defaultdict(list)
        for record in records:
            self._records[record.supplier_id].append(record)
        self.unavailable = set(unavailable)

    def add(self, record: JobRecord) -> None:
        self._records[record.supplier_id].append(record)

    def fetch_job_records(self, supplier_id: int) -> list[JobRecord]:
        if supplier_id in self.unavailable:
            raise JobRecordFetchError(supplier_id)
        return list(self._records.get(supplier_id, []))
