"""
In-memory filter / search / sort pipeline for the admin tables.

List endpoints load a resource's full collection and run it through
this module. The Python admin client uses the same functions, so a table
filtered locally and one filtered by the server always agree.

Everything here is pure and synchronous: no I/O, no exceptions for bad
input. Malformed dates on either side (record or filter bound) simply
impose no constraint.

Usage:
------
    criteria = FilterCriteria(search="robot", status="published")
    rows = filter_records(highlights, criteria, HIGHLIGHT_VIEW)
    rows = sort_records(rows, "seq", "desc")
    page = paginate(rows, 0, 25)
"""

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Iterable, List, Optional, Sequence, Tuple

ALL = "all"


class Period(str, enum.Enum):
    """Quick time-window filter used on the subscribers table."""

    ALL = "all"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FilterCriteria:
    """
    User-controlled table filters. Every active filter must match (AND).

    Defaults make every predicate inactive, so ``FilterCriteria()`` is the
    identity filter.
    """

    search: Optional[str] = None
    start_date: Optional[Any] = None
    end_date: Optional[Any] = None
    status: Optional[str] = ALL
    category: Optional[str] = ALL
    period: Optional[str] = ALL

    @property
    def is_empty(self) -> bool:
        return not any((
            _clean_search(self.search),
            _is_active(self.status),
            _is_active(self.category),
            self.start_date,
            self.end_date,
            _is_active(self.period),
        ))


@dataclass(frozen=True)
class ResourceView:
    """Which record fields each filter looks at for one resource type."""

    search_fields: Tuple[str, ...]
    date_field: Optional[str] = None
    status_field: Optional[str] = None
    category_field: Optional[str] = None
    sortable_fields: Tuple[str, ...] = ("seq", "created_at", "updated_at")
    default_sort: str = "created_at"
    default_order: str = "desc"

    def sort_field(self, requested: Optional[str]) -> str:
        """The requested sort field, or the default when it is not sortable here."""
        if requested and requested in self.sortable_fields:
            return requested
        return self.default_sort


HIGHLIGHT_VIEW = ResourceView(
    search_fields=("title", "location", "seq"),
    sortable_fields=("seq", "title", "status", "date", "location", "category", "created_at", "updated_at"),
    date_field="date",
    status_field="status",
    category_field="category",
)

PRESS_RELEASE_VIEW = ResourceView(
    search_fields=("title", "publisher", "seq"),
    sortable_fields=("seq", "title", "publisher", "date", "link", "created_at", "updated_at"),
    date_field="date",
)

SUBSCRIBER_VIEW = ResourceView(
    search_fields=("email", "seq"),
    sortable_fields=("seq", "email", "created_at"),
    date_field="created_at",
    default_sort="seq",
)

CATEGORY_VIEW = ResourceView(
    search_fields=("name",),
    sortable_fields=("name", "created_at"),
    default_sort="name",
    default_order="asc",
)


# ========================================
# Filtering
# ========================================

def filter_records(
    records: Iterable[Any],
    criteria: FilterCriteria,
    view: ResourceView,
    now: Optional[datetime] = None,
) -> List[Any]:
    """
    Return the records matching every active predicate in ``criteria``.

    Records may be mappings or attribute objects (ORM rows). Input order
    is preserved; sorting is a separate step.

    Args:
        records: Full collection
        criteria: Active filters
        view: Field mapping for the resource type
        now: Reference time for ``period`` (defaults to the current UTC time)
    """
    search = _clean_search(criteria.search)
    start = parse_date_bound(criteria.start_date)
    end = parse_date_bound(criteria.end_date, end_of_day=True)
    window = _period_window(criteria.period, now)

    matched = []
    for record in records:
        if search and not _matches_search(record, search, view.search_fields):
            continue
        if view.status_field and _is_active(criteria.status):
            if _plain(_get(record, view.status_field)) != criteria.status:
                continue
        if view.category_field and _is_active(criteria.category):
            if not _matches_category(record, criteria.category, view.category_field):
                continue
        if view.date_field and (start or end or window):
            value = _to_datetime(_get(record, view.date_field))
            if value is not None:
                if start and value < start:
                    continue
                if end and value > end:
                    continue
                if window and not (window[0] <= value < window[1]):
                    continue
        matched.append(record)
    return matched


def _matches_search(record: Any, search: str, fields: Sequence[str]) -> bool:
    for field in fields:
        value = _get(record, field)
        if value is None:
            continue
        if search in str(_plain(value)).lower():
            return True
    return False


def _matches_category(record: Any, category_id: str, field: str) -> bool:
    if _get(record, f"{field}_id") == category_id:
        return True
    value = _get(record, field)
    if value is None:
        return False
    if isinstance(value, str):
        return value == category_id
    return _get(value, "id") == category_id or _get(value, "_id") == category_id


def _period_window(period: Optional[str], now: Optional[datetime]) -> Optional[Tuple[datetime, datetime]]:
    try:
        period = Period(period or ALL)
    except ValueError:
        return None
    if period is Period.ALL:
        return None

    now = _normalize(now or datetime.now(timezone.utc))
    today = datetime.combine(now.date(), time.min)
    if period is Period.DAY:
        return today, today + timedelta(days=1)
    if period is Period.WEEK:
        return now - timedelta(days=7), datetime.max
    # month: same calendar month as now
    first = today.replace(day=1)
    if first.month == 12:
        following = first.replace(year=first.year + 1, month=1)
    else:
        following = first.replace(month=first.month + 1)
    return first, following


# ========================================
# Sorting & Pagination
# ========================================

def sort_records(records: Iterable[Any], field: str, order: str = "asc") -> List[Any]:
    """
    Stable sort by ``field``. Records where the field is None always go last.

    ``order`` is "asc" or "desc" (case-insensitive); anything else is asc.
    """
    keyed = [(_sort_key(_get(r, field)), r) for r in records]
    present = [(key, r) for key, r in keyed if key is not None]
    missing = [r for key, r in keyed if key is None]
    descending = (order or "").lower() == "desc"
    present.sort(key=lambda pair: pair[0], reverse=descending)
    return [r for _, r in present] + missing


def paginate(records: Sequence[Any], start: Optional[int] = None, end: Optional[int] = None) -> List[Any]:
    """Slice with ``_start``/``_end`` semantics (end exclusive, None = to the end)."""
    start = max(start or 0, 0)
    if end is not None:
        end = max(end, start)
    return list(records[start:end])


def _sort_key(value: Any) -> Any:
    value = _plain(_related_label(value))
    if isinstance(value, str):
        return value.lower()
    if isinstance(value, (date, datetime)):
        return _to_datetime(value)
    return value


# ========================================
# Dates
# ========================================

def parse_date_bound(value: Any, end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse a filter bound into a naive UTC datetime.

    Accepts dates, datetimes and ISO strings ("2024-05-02",
    "2024-05-02T10:00:00Z"). A date-only end bound covers the whole day.
    Anything unparseable returns None, meaning "no constraint".
    """
    if value is None or value == "":
        return None

    date_only = False
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
        date_only = True
    elif isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                parsed = datetime.combine(date.fromisoformat(text), time.min)
                date_only = True
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    parsed = _normalize(parsed)
    if date_only and end_of_day:
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def _to_datetime(value: Any) -> Optional[datetime]:
    return parse_date_bound(value)


def _normalize(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ========================================
# Helpers
# ========================================

def _get(record: Any, field: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(field)
    return getattr(record, field, None)


def _plain(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    return value


def _related_label(value: Any) -> Any:
    """Embedded records (a highlight's category) sort by their name, then id."""
    if isinstance(value, Mapping):
        return value.get("name") or value.get("id")
    if hasattr(value, "__table__"):
        return getattr(value, "name", None) or getattr(value, "id", None)
    return value


def _is_active(value: Optional[str]) -> bool:
    return bool(value) and value != ALL


def _clean_search(value: Optional[str]) -> str:
    return (value or "").strip().lower()
