"""Shared fixtures for the supplier scorer tests."""

from datetime import datetime, timedelta
from typing import Optional

import pytest

from supplier_scorer.config import reset_config
from supplier_scorer.schema import JobRecord, JobStatus, Supplier, SupplierStatus

ACCEPTED_AT = datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture(autouse=True)
def default_config():
    """Every test starts from the default configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def make_job():
    """Factory for job records with a given promised/actual duration."""
    counter = {"id": 0}

    def _make(
        supplier_id: int,
        promised: Optional[int] = 3,
        actual: Optional[int] = 3,
        status: JobStatus = JobStatus.DELIVERED,
        courier: Optional[bool] = True,
        **kwargs,
    ) -> JobRecord:
        counter["id"] += 1
        ready_at = None
        if actual is not None and status.is_completed():
            ready_at = ACCEPTED_AT + timedelta(days=actual, hours=2)
        fields = dict(
            id=counter["id"],
            supplier_id=supplier_id,
            status=status,
            promised_delivery_days=promised,
            courier_confirmed_ready=courier if status.is_completed() else None,
            created_at=ACCEPTED_AT - timedelta(hours=3),
            accepted_at=ACCEPTED_AT,
            ready_at=ready_at,
        )
        fields.update(kwargs)
        return JobRecord(**fields)

    return _make


@pytest.fixture
def make_supplier():
    """Factory for suppliers."""

    def _make(supplier_id: int, status: SupplierStatus = SupplierStatus.ACTIVE, **kwargs) -> Supplier:
        fields = dict(
            id=supplier_id,
            name=f"Supplier {supplier_id}",
            company_name=f"Print House {supplier_id}",
            status=status,
            supplier_number=1000 + supplier_id,
        )
        fields.update(kwargs)
        return Supplier(**fields)

    return _make


@pytest.fixture
def perfect_history(make_job):
    """20 delivered jobs: all on time and courier-confirmed, 6 of them early."""

    def _history(supplier_id: int) -> list[JobRecord]:
        early = [make_job(supplier_id, promised=4, actual=2) for _ in range(6)]
        on_time = [make_job(supplier_id, promised=4, actual=4) for _ in range(14)]
        return early + on_time

    return _history
