"""
Subscriber CSV export.
"""

import csv
import io
from datetime import date, datetime
from typing import Iterable, Optional

from parkadmin.models.content import Subscriber

CSV_HEADER = ("seq", "email", "subscribed_at")


def subscribers_to_csv(subscribers: Iterable[Subscriber]) -> str:
    """Render subscribers as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for subscriber in subscribers:
        writer.writerow((
            subscriber.seq,
            subscriber.email,
            _format_timestamp(subscriber.created_at),
        ))
    return buffer.getvalue()


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"subscribers_export_{today.isoformat()}.csv"


def _format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.replace(microsecond=0).isoformat()
