"""Tests for roster iteration, rate limiting and progress reporting."""

import re
from datetime import datetime, timezone

import pytest

from conftest import FakeSearchClient, make_case

from app.core.exceptions import CompanyNotFoundError
from app.schemas.company import Company
from app.schemas.scan import ScanEventStatus
from app.services.company_roster import CompanyRoster
from app.services.scan_orchestrator import ScanOrchestrator, filed_after_date


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def _orchestrator(client, roster, delay=1.0):
    sleep = RecordingSleep()
    return ScanOrchestrator(client, roster, search_delay=delay, sleep=sleep), sleep


def test_filed_after_is_a_date_hours_back():
    now = datetime(2024, 3, 10, 6, 30, tzinfo=timezone.utc)

    assert filed_after_date(24, now) == "2024-03-09"
    assert filed_after_date(168, now) == "2024-03-03"
    assert filed_after_date(1, now) == "2024-03-10"


class TestScanHighPriorityOnly:
    @pytest.mark.asyncio
    async def test_single_company_scenario(self):
        roster = CompanyRoster([
            Company(id="acme", name="Acme", legal_names=("Acme Inc", "Acme Corp"), priority="high"),
        ])
        client = FakeSearchClient({"Acme Inc": [make_case(1, "Doe v. Acme Inc", cause="Antitrust")]})
        orchestrator, _ = _orchestrator(client, roster)

        batches = await orchestrator.scan_all(24)

        assert len(batches) == 1
        assert batches[0].search_term == "Acme Inc"
        assert batches[0].company_id == "acme"
        assert len(batches[0].cases) == 1
        assert [term for term, _ in client.calls] == ["Acme Inc", "Acme Corp"]

    @pytest.mark.asyncio
    async def test_skips_non_high_priority(self, roster, fake_client):
        orchestrator, _ = _orchestrator(fake_client, roster)

        batches = await orchestrator.scan_high_priority_only(24)

        assert [term for term, _ in fake_client.calls] == ["Acme Inc", "Acme Corp", "Initech"]
        assert [b.search_term for b in batches] == ["Acme Inc"]

    @pytest.mark.asyncio
    async def test_filed_after_passed_as_date(self, roster, fake_client):
        orchestrator, _ = _orchestrator(fake_client, roster)

        await orchestrator.scan_high_priority_only(48)

        for _, filed_after in fake_client.calls:
            assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", filed_after)


class TestScanAllCompanies:
    @pytest.mark.asyncio
    async def test_whole_roster_in_order(self, roster, fake_client):
        orchestrator, _ = _orchestrator(fake_client, roster)

        batches = await orchestrator.scan_all_companies(24)

        assert [term for term, _ in fake_client.calls] == ["Acme Inc", "Acme Corp", "Globex LLC", "Initech"]
        assert [b.company_id for b in batches] == ["acme", "globex"]

    @pytest.mark.asyncio
    async def test_delay_between_consecutive_searches(self, roster, fake_client):
        orchestrator, sleep = _orchestrator(fake_client, roster, delay=1.0)

        await orchestrator.scan_all_companies(24)

        # four searches, three gaps
        assert sleep.delays == [1.0, 1.0, 1.0]

    @pytest.mark.asyncio
    async def test_zero_delay_never_sleeps(self, roster, fake_client):
        orchestrator, sleep = _orchestrator(fake_client, roster, delay=0)

        await orchestrator.scan_all_companies(24)

        assert sleep.delays == []


class TestScanOne:
    @pytest.mark.asyncio
    async def test_scans_only_that_company(self, roster, fake_client):
        orchestrator, _ = _orchestrator(fake_client, roster)

        batches = await orchestrator.scan_one("globex", 24)

        assert [term for term, _ in fake_client.calls] == ["Globex LLC"]
        assert batches[0].company == "Globex"

    @pytest.mark.asyncio
    async def test_unknown_company_makes_no_calls(self, roster, fake_client):
        orchestrator, _ = _orchestrator(fake_client, roster)

        with pytest.raises(CompanyNotFoundError):
            await orchestrator.scan_one("umbrella", 24)

        assert fake_client.calls == []


class TestProgress:
    @pytest.mark.asyncio
    async def test_one_progress_report_per_company(self, companies, fake_client):
        roster = CompanyRoster(companies[:2])
        orchestrator, _ = _orchestrator(fake_client, roster)
        reports = []

        await orchestrator.scan_all_companies(24, on_progress=reports.append)

        assert [r.company_name for r in reports] == ["", "Acme Games", "Globex"]
        assert [r.current_company for r in reports] == [0, 1, 2]
        assert all(r.total_companies == 2 for r in reports)

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_change_result(self, roster, fake_client):
        orchestrator, _ = _orchestrator(fake_client, roster)

        def broken(progress):
            raise RuntimeError("socket closed")

        batches = await orchestrator.scan_all_companies(24, on_progress=broken)

        assert [b.company_id for b in batches] == ["acme", "globex"]

    @pytest.mark.asyncio
    async def test_event_sequence(self, companies, fake_client):
        roster = CompanyRoster(companies[:2])
        orchestrator, _ = _orchestrator(fake_client, roster)

        events = [event async for event in orchestrator.iter_scan(roster.companies, 24)]

        assert [e.status for e in events] == [
            ScanEventStatus.STARTED,
            ScanEventStatus.SEARCHING,
            ScanEventStatus.FOUND,
            ScanEventStatus.COMPANY_COMPLETE,
            ScanEventStatus.SEARCHING,
            ScanEventStatus.FOUND,
            ScanEventStatus.COMPANY_COMPLETE,
        ]
        found = events[2]
        assert found.search_term == "Acme Inc"
        assert found.count == 1
        assert found.batch is not None
        assert "batch" not in found.to_frame()
