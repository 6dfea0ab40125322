# registre_backend/app/services/data_retrieval/helpers.py
"""
Reusable helper functions for data retrieval services
"""
from typing import Iterator, List, Sequence, TypeVar

from sqlalchemy import ColumnElement, and_, or_, false

from ...schemas.registre import Period

T = TypeVar("T")

# Keeps each IN list well under the driver's bind parameter limit
BATCH_SIZE = 500


def chunked(values: Sequence[T], size: int = BATCH_SIZE) -> Iterator[List[T]]:
    """Yield consecutive slices of at most ``size`` values."""
    for i in range(0, len(values), size):
        yield list(values[i : i + size])


def in_batches(column, values: Sequence[T]) -> ColumnElement[bool]:
    """``column IN (...)`` split into OR-ed batches; false for no values."""
    clauses = [column.in_(batch) for batch in chunked(values)]
    if not clauses:
        return false()
    return clauses[0] if len(clauses) == 1 else or_(*clauses)


def within_period(column, periode: Period) -> ColumnElement[bool]:
    """Inclusive bounds, whatever order the request gave them in."""
    return and_(column >= periode.lower, column <= periode.upper)


def overlaps_period(start_column, end_column, periode: Period) -> ColumnElement[bool]:
    """Intervals touching the period; an open interval has no end."""
    return and_(
        start_column <= periode.upper,
        or_(end_column.is_(None), end_column >= periode.lower),
    )
