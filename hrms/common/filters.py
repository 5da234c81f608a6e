"""Query-string filters, period windows and substring search for list endpoints."""

from __future__ import annotations

import calendar
from datetime import date
from typing import Any, Callable, Optional, Sequence

from sqlalchemy import Select, String, cast, inspect, or_
from sqlalchemy.orm import InstrumentedAttribute

from hrms.common.exceptions import ValidationException

# "<column>__<op>" suffixes understood by apply_filters; a bare name is equality
_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "ilike": lambda col, value: col.ilike(f"%{value}%"),
    "from": lambda col, value: col >= value,
    "to": lambda col, value: col <= value,
    "in": lambda col, value: col.in_(value),
}


def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    """Mapped column attribute *name* on *model*, or None."""
    if name not in inspect(model).columns:
        return None
    return getattr(model, name)


def _split_key(key: str) -> tuple[str, Callable[[Any, Any], Any]]:
    name, sep, op = key.rpartition("__")
    if sep and op in _OPERATORS:
        return name, _OPERATORS[op]
    return key, lambda col, value: col == value


def apply_filters(query: Select, model: Any, filters: dict[str, Any]) -> Select:
    """AND together ``filters`` keyed ``column`` or ``column__{ilike,from,to,in}``.

    ``None`` values and names that are not columns of *model* are skipped.
    """
    for key, value in filters.items():
        if value is None:
            continue
        name, build = _split_key(key)
        column = _get_column(model, name)
        if column is not None:
            query = query.where(build(column, value))
    return query


def apply_search(
    query: Select,
    model: Any,
    search: Optional[str],
    columns: Sequence[str],
) -> Select:
    """Keep rows where any of *columns* contains *search*, ignoring case."""
    term = (search or "").strip()
    if not term:
        return query

    matches = [
        cast(column, String).ilike(f"%{term}%")
        for column in (_get_column(model, name) for name in columns)
        if column is not None
    ]
    return query.where(or_(*matches)) if matches else query


# ── Period windows ──────────────────────────────────────────────────

def month_bounds(month: int, year: int) -> tuple[date, date]:
    if month < 1 or month > 12:
        raise ValidationException({"month": ["Month must be between 1 and 12."]})
    _, days = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, days)


def resolve_period(
    *,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> Optional[tuple[date, date]]:
    """Inclusive window from ``start_date``/``end_date``, else ``month``/``year``.

    A half-supplied pair counts as absent; ``None`` means "no window".
    """
    if start_date is not None and end_date is not None:
        if start_date > end_date:
            raise ValidationException({"date_range": ["end_date must be on or after start_date."]})
        return start_date, end_date
    if month is not None and year is not None:
        return month_bounds(month, year)
    return None


def apply_period(
    query: Select,
    column: InstrumentedAttribute,
    period: Optional[tuple[date, date]],
) -> Select:
    if period is None:
        return query
    first, last = period
    return query.where(column.between(first, last))
