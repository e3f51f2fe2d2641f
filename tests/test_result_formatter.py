"""Tests for flattening and ordering scan batches."""

from datetime import date, datetime

from conftest import make_case

from app.schemas.company import PRIORITY_RANK, Priority
from app.schemas.scan import ScanBatch
from app.services.result_formatter import build_case_url, format_results, parse_filed_date

SCANNED_AT = datetime(2024, 1, 15, 12, 0, 0)


def _batch(cases, company="Acme Games", company_id="acme", term="Acme Inc"):
    return ScanBatch(
        company=company,
        company_id=company_id,
        search_term=term,
        cases=cases,
        scanned_at=SCANNED_AT,
    )


class TestParseFiledDate:
    def test_plain_date(self):
        assert parse_filed_date("2024-01-10") == date(2024, 1, 10)

    def test_datetime_prefix(self):
        assert parse_filed_date("2024-01-10T00:00:00-08:00") == date(2024, 1, 10)

    def test_unparseable(self):
        assert parse_filed_date("not a date") is None
        assert parse_filed_date(None) is None
        assert parse_filed_date("") is None


class TestBuildCaseUrl:
    def test_joins_origin_and_path(self):
        assert build_case_url("/docket/1/x/", "https://www.courtlistener.com") == "https://www.courtlistener.com/docket/1/x/"

    def test_trailing_slash_on_origin(self):
        assert build_case_url("/docket/1/x/", "https://example.org/") == "https://example.org/docket/1/x/"

    def test_missing_path(self):
        assert build_case_url(None) is None


class TestFormatResults:
    def test_flattens_every_case(self):
        batches = [
            _batch([make_case(1), make_case(2)]),
            _batch([make_case(3)], company="Globex", company_id="globex", term="Globex LLC"),
        ]

        formatted = format_results(batches)

        assert sorted(f.id for f in formatted) == ["1", "2", "3"]
        globex = next(f for f in formatted if f.id == "3")
        assert globex.company == "Globex"
        assert globex.company_id == "globex"
        assert globex.scanned_at == SCANNED_AT
        assert globex.url == "https://www.courtlistener.com/docket/3/doe-v-acme/"

    def test_priority_then_date_descending(self):
        batches = [_batch([
            make_case(1, "Plain case", "2024-01-12"),
            make_case(2, "Patent case", "2024-01-01"),
            make_case(3, "Antitrust class action", "2023-12-01"),
            make_case(4, "Copyright case", "2024-01-05"),
            make_case(5, "Antitrust privacy", "2024-01-09"),
        ])]

        formatted = format_results(batches)

        assert [f.id for f in formatted] == ["5", "3", "4", "2", "1"]
        for a, b in zip(formatted, formatted[1:]):
            rank_a = PRIORITY_RANK[a.analysis.priority]
            rank_b = PRIORITY_RANK[b.analysis.priority]
            assert rank_a <= rank_b
            if rank_a == rank_b:
                assert a.date_filed >= b.date_filed

    def test_missing_dates_sort_as_oldest(self):
        batches = [_batch([
            make_case(1, date_filed=None),
            make_case(2, date_filed="2020-01-01"),
            make_case(3, date_filed="garbage"),
        ])]

        formatted = format_results(batches)

        assert [f.id for f in formatted] == ["2", "1", "3"]
        assert formatted[1].date_filed is None

    def test_ties_keep_input_order(self):
        batches = [
            _batch([make_case(7, date_filed="2024-01-01"), make_case(8, date_filed="2024-01-01")]),
            _batch([make_case(9, date_filed="2024-01-01")], term="Acme Corp"),
        ]

        formatted = format_results(batches)

        assert [f.id for f in formatted] == ["7", "8", "9"]

    def test_analysis_is_attached(self):
        formatted = format_results([_batch([make_case(1, "Doe v. Acme", cause="Data breach")])])

        assert formatted[0].analysis.priority == Priority.MEDIUM
        assert formatted[0].analysis.keywords == ["data breach"]

    def test_empty_input(self):
        assert format_results([]) == []
