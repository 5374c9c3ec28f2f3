"""Snapshot files for the command-line tool.

A snapshot is a JSON export of suppliers, their job records and an optional
price snapshot for one item, so that rankings can be reproduced offline.
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from .exceptions import SnapshotError
from .schema import ItemContext, JobRecord, Supplier
from .sources import InMemoryJobRecordSource


class Snapshot(BaseModel):
    """Contents of a snapshot file."""
    suppliers: list[Supplier] = Field(default_factory=list)
    jobs: list[JobRecord] = Field(default_factory=list)
    prices: dict[int, float] = Field(default_factory=dict)
    open_job_counts: dict[int, int] = Field(default_factory=dict)
    size_quantity_id: Optional[int] = None
    category_id: Optional[int] = None
    product_name: Optional[str] = None

    def job_source(self) -> InMemoryJobRecordSource:
        return InMemoryJobRecordSource(self.jobs)

    def item_context(self, scope_history_to_category: bool = False) -> ItemContext:
        return ItemContext(
            size_quantity_id=self.size_quantity_id,
            category_id=self.category_id,
            product_name=self.product_name,
            supplier_prices=self.prices,
            open_job_counts=self.open_job_counts,
            scope_history_to_category=scope_history_to_category,
        )


def load_snapshot(path: Path) -> Snapshot:
    """Load and validate a snapshot file.

    Raises:
        SnapshotError: If the file cannot be read, is not valid JSON or fails validation
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"{path}: invalid JSON ({e})") from e
    except UnicodeDecodeError as e:
        raise SnapshotError(f"{path}: not UTF-8 text ({e})") from e
    except OSError as e:
        raise SnapshotError(f"{path}: cannot read file ({e})") from e

    try:
        return Snapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotError(f"{path}: {e.error_count()} validation error(s)\n{e}") from e
