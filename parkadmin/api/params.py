"""
Query parameters shared by the list endpoints.

The admin tables send json-server style parameters:

    GET /api/v1/highlights?title_like=robot&status=published&_sort=seq&_order=desc&_start=0&_end=25

The handler loads the full collection, filters and sorts it in memory,
reports the filtered count in ``x-total-count`` and returns the slice.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from fastapi import Query, Response

from parkadmin.services.listing import ALL, FilterCriteria, paginate

TOTAL_COUNT_HEADER = "x-total-count"


@dataclass
class ListParams:
    criteria: FilterCriteria
    sort: Optional[str]
    order: Optional[str]
    start: Optional[int]
    end: Optional[int]


def list_params(
    title_like: Optional[str] = Query(None, description="Case-insensitive search"),
    q: Optional[str] = Query(None, description="Alias of title_like"),
    status: Optional[str] = Query(ALL, description="Exact status or 'all'"),
    category: Optional[str] = Query(ALL, description="Category id or 'all'"),
    start_date: Optional[str] = Query(None, description="Inclusive lower date bound"),
    end_date: Optional[str] = Query(None, description="Inclusive upper date bound"),
    period: Optional[str] = Query(ALL, description="all | day | week | month"),
    sort: Optional[str] = Query(None, alias="_sort"),
    order: Optional[str] = Query(None, alias="_order"),
    start: Optional[int] = Query(None, alias="_start", ge=0),
    end: Optional[int] = Query(None, alias="_end", ge=0),
) -> ListParams:
    """FastAPI dependency collecting the list query parameters."""
    return ListParams(
        criteria=FilterCriteria(
            search=title_like or q,
            start_date=start_date,
            end_date=end_date,
            status=status or ALL,
            category=category or ALL,
            period=period or ALL,
        ),
        sort=sort,
        order=order,
        start=start,
        end=end,
    )


def paginated(response: Response, rows: Sequence[Any], params: ListParams) -> List[Any]:
    """Set the total-count header and return the requested slice."""
    response.headers[TOTAL_COUNT_HEADER] = str(len(rows))
    return paginate(rows, params.start, params.end)
