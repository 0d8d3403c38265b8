"""
Tests for the in-memory filter/sort/paginate pipeline.
"""

from datetime import date, datetime, timezone
from types import SimpleNamespace

import pytest

from parkadmin.models.content import HighlightStatus
from parkadmin.services.listing import (
    HIGHLIGHT_VIEW,
    PRESS_RELEASE_VIEW,
    SUBSCRIBER_VIEW,
    FilterCriteria,
    filter_records,
    paginate,
    parse_date_bound,
    sort_records,
)


@pytest.fixture
def highlights():
    robotics = SimpleNamespace(id="c1", name="Robotics")
    return [
        {"id": "h1", "seq": 1, "title": "Robot Demo Day", "location": "Hall B",
         "status": "published", "category_id": "c1", "category": {"id": "c1"}, "date": "2024-05-02"},
        {"id": "h2", "seq": 2, "title": "Startup pitch", "location": "Auditorium",
         "status": "draft", "category_id": None, "category": None, "date": "2024-05-10"},
        SimpleNamespace(id="h3", seq=13, title="Solar workshop", location=None,
                        status=HighlightStatus.PUBLISHED, category_id="c1", category=robotics,
                        date=date(2024, 6, 1)),
        {"id": "h4", "seq": 4, "title": "Open house", "location": "robotics lab",
         "status": "rejected", "category_id": "c2", "category": None, "date": "not a date"},
    ]


def ids(rows):
    return [r["id"] if isinstance(r, dict) else r.id for r in rows]


class TestFilterRecords:

    def test_empty_criteria_is_identity(self, highlights):
        criteria = FilterCriteria()

        assert criteria.is_empty
        assert filter_records(highlights, criteria, HIGHLIGHT_VIEW) == highlights

    def test_search_is_case_insensitive_substring(self, highlights):
        rows = filter_records(highlights, FilterCriteria(search="  ROBOT "), HIGHLIGHT_VIEW)

        # Title "Robot Demo Day" and location "robotics lab"
        assert ids(rows) == ["h1", "h4"]

    def test_search_matches_seq(self, highlights):
        rows = filter_records(highlights, FilterCriteria(search="13"), HIGHLIGHT_VIEW)
        assert ids(rows) == ["h3"]

    def test_status_accepts_enum_values(self, highlights):
        rows = filter_records(highlights, FilterCriteria(status="published"), HIGHLIGHT_VIEW)
        assert ids(rows) == ["h1", "h3"]

    def test_status_all_matches_everything(self, highlights):
        rows = filter_records(highlights, FilterCriteria(status="all"), HIGHLIGHT_VIEW)
        assert len(rows) == 4

    def test_category_matches_id_or_embedded_object(self, highlights):
        rows = filter_records(highlights, FilterCriteria(category="c1"), HIGHLIGHT_VIEW)
        assert ids(rows) == ["h1", "h3"]

    def test_filters_combine_with_and(self, highlights):
        criteria = FilterCriteria(search="robot", status="published", category="c1")

        assert not criteria.is_empty
        assert ids(filter_records(highlights, criteria, HIGHLIGHT_VIEW)) == ["h1"]

    def test_date_range_is_inclusive(self, highlights):
        criteria = FilterCriteria(start_date="2024-05-02", end_date="2024-05-10")
        rows = filter_records(highlights, criteria, HIGHLIGHT_VIEW)

        # h4 has a malformed date and is not constrained
        assert ids(rows) == ["h1", "h2", "h4"]

    def test_malformed_bound_imposes_no_constraint(self, highlights):
        rows = filter_records(highlights, FilterCriteria(start_date="yesterday-ish"), HIGHLIGHT_VIEW)
        assert len(rows) == 4

    def test_search_ignores_fields_outside_the_view(self):
        releases = [
            {"id": "p1", "seq": 1, "title": "Campus news", "publisher": "Herald", "link": "https://robot.example"},
        ]
        assert filter_records(releases, FilterCriteria(search="herald"), PRESS_RELEASE_VIEW) == releases
        assert filter_records(releases, FilterCriteria(search="robot"), PRESS_RELEASE_VIEW) == []

    def test_status_filter_ignored_for_views_without_status(self):
        releases = [{"id": "p1", "seq": 1, "title": "A", "publisher": "B"}]
        assert filter_records(releases, FilterCriteria(status="draft"), PRESS_RELEASE_VIEW) == releases


class TestPeriod:

    @pytest.fixture
    def subscribers(self):
        return [
            {"id": "s1", "seq": 1, "email": "a@x.io", "created_at": datetime(2024, 5, 20, 9, 0)},
            {"id": "s2", "seq": 2, "email": "b@x.io", "created_at": datetime(2024, 5, 14, 9, 0)},
            {"id": "s3", "seq": 3, "email": "c@x.io", "created_at": datetime(2024, 5, 1, 0, 0)},
            {"id": "s4", "seq": 4, "email": "d@x.io", "created_at": datetime(2024, 4, 30, 23, 59)},
        ]

    now = datetime(2024, 5, 20, 15, 0, tzinfo=timezone.utc)

    def test_day(self, subscribers):
        rows = filter_records(subscribers, FilterCriteria(period="day"), SUBSCRIBER_VIEW, now=self.now)
        assert ids(rows) == ["s1"]

    def test_week_is_last_seven_days(self, subscribers):
        rows = filter_records(subscribers, FilterCriteria(period="week"), SUBSCRIBER_VIEW, now=self.now)
        assert ids(rows) == ["s1", "s2"]

    def test_month_is_calendar_month(self, subscribers):
        rows = filter_records(subscribers, FilterCriteria(period="month"), SUBSCRIBER_VIEW, now=self.now)
        assert ids(rows) == ["s1", "s2", "s3"]

    def test_unknown_period_is_ignored(self, subscribers):
        rows = filter_records(subscribers, FilterCriteria(period="fortnight"), SUBSCRIBER_VIEW, now=self.now)
        assert len(rows) == 4


class TestSortAndPaginate:

    def test_sort_desc_keeps_none_last(self):
        rows = [{"seq": 2}, {"seq": None}, {"seq": 10}, {"seq": 1}]
        assert [r["seq"] for r in sort_records(rows, "seq", "desc")] == [10, 2, 1, None]
        assert [r["seq"] for r in sort_records(rows, "seq", "asc")] == [1, 2, 10, None]

    def test_sort_strings_case_insensitive_and_stable(self):
        rows = [
            {"id": 1, "title": "beta"},
            {"id": 2, "title": "Alpha"},
            {"id": 3, "title": "alpha"},
        ]
        assert [r["id"] for r in sort_records(rows, "title")] == [2, 3, 1]

    def test_embedded_records_sort_by_name(self):
        rows = [
            {"id": "h1", "category": SimpleNamespace(__table__=object(), id="c2", name="Workshops")},
            {"id": "h2", "category": None},
            {"id": "h3", "category": {"id": "c1", "name": "Awards"}},
            {"id": "h4", "category": {"id": "c9"}},
        ]
        assert ids(sort_records(rows, "category")) == ["h3", "h4", "h1", "h2"]

    def test_sort_field_is_limited_to_the_view(self):
        assert HIGHLIGHT_VIEW.sort_field("category") == "category"
        assert HIGHLIGHT_VIEW.sort_field("content") == "created_at"
        assert HIGHLIGHT_VIEW.sort_field(None) == "created_at"
        assert SUBSCRIBER_VIEW.sort_field("title") == "seq"

    def test_unknown_order_sorts_ascending(self):
        rows = [{"seq": 3}, {"seq": 1}]
        assert [r["seq"] for r in sort_records(rows, "seq", "sideways")] == [1, 3]

    def test_paginate(self):
        rows = list(range(10))
        assert paginate(rows, 0, 3) == [0, 1, 2]
        assert paginate(rows, 8, 20) == [8, 9]
        assert paginate(rows, 5) == [5, 6, 7, 8, 9]
        assert paginate(rows, 6, 2) == []
        assert paginate(rows) == rows


class TestParseDateBound:

    def test_date_only_end_bound_covers_whole_day(self):
        end = parse_date_bound("2024-05-02", end_of_day=True)
        assert end.date() == date(2024, 5, 2)
        assert end.hour == 23 and end.minute == 59

    def test_aware_datetimes_normalize_to_naive_utc(self):
        parsed = parse_date_bound("2024-05-02T10:00:00+02:00")
        assert parsed == datetime(2024, 5, 2, 8, 0)
        assert parsed.tzinfo is None

    def test_z_suffix(self):
        assert parse_date_bound("2024-05-02T10:00:00Z") == datetime(2024, 5, 2, 10, 0)

    @pytest.mark.parametrize("value", [None, "", "02/05/2024", "nope", 12345])
    def test_unparseable_returns_none(self, value):
        assert parse_date_bound(value) is None
