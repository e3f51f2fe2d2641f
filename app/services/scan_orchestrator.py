import asyncio
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Sequence

from loguru import logger

from app.core.config import settings
from app.schemas.company import Company
from app.schemas.scan import ScanBatch, ScanEvent, ScanEventStatus, ScanProgress
from app.services.company_roster import CompanyRoster

ProgressCallback = Callable[[ScanProgress], None]

def filed_after_date(hours_back: float, now: Optional[datetime] = None) -> str:
    """Lower filing-date bound for a scan, as a date string (no time part)"""
    now = now or datetime.now(timezone.utc)
    return (now - timedelta(hours=hours_back)).date().isoformat()

def progress_from_event(event: ScanEvent) -> ScanProgress:
    return ScanProgress(
        is_scanning=True,
        message=event.message,
        current_company=event.current_company or 0,
        total_companies=event.total_companies or 0,
        company_name=event.company_name or "",
    )

class ScanOrchestrator:
    """Walks companies and their legal names, one search at a time.

    Everything is sequential: companies in roster order, legal names in the
    order they are declared, with ``search_delay`` seconds between two
    consecutive searches. That delay is the only thing keeping the scan
    under the CourtListener rate limit.
    """

    def __init__(
        self,
        client,
        roster: CompanyRoster,
        search_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.roster = roster
        self.search_delay = settings.SEARCH_DELAY_SECONDS if search_delay is None else search_delay
        self.sleep = sleep

    async def iter_scan(self, companies: Sequence[Company], hours_back: float) -> AsyncIterator[ScanEvent]:
        """Scan ``companies`` and yield an event for every step of the run"""
        filed_after = filed_after_date(hours_back)
        total = len(companies)

        logger.info(f"Scanning {total} companies for cases filed after {filed_after}")
        yield ScanEvent(
            status=ScanEventStatus.STARTED,
            message=f"Scanning {total} companies...",
            current_company=0,
            total_companies=total,
            company_name="",
        )

        searches_done = 0
        for index, company in enumerate(companies, start=1):
            logger.info(f"Checking {company.name}...")
            yield ScanEvent(
                status=ScanEventStatus.SEARCHING,
                message=f"Scanning {company.name}...",
                current_company=index,
                total_companies=total,
                company_name=company.name,
            )

            company_cases = 0
            for legal_name in company.legal_names:
                if searches_done and self.search_delay > 0:
                    await self.sleep(self.search_delay)
                cases = await self.client.search_cases(legal_name, filed_after)
                searches_done += 1

                if not cases:
                    continue

                batch = ScanBatch(
                    company=company.name,
                    company_id=company.id,
                    search_term=legal_name,
                    cases=cases,
                    scanned_at=datetime.now(timezone.utc),
                )
                company_cases += len(cases)
                logger.info(f"  Found {len(cases)} case(s) for {legal_name}")
                yield ScanEvent(
                    status=ScanEventStatus.FOUND,
                    message=f"Found {len(cases)} case(s) for {legal_name}",
                    current_company=index,
                    total_companies=total,
                    company_name=company.name,
                    search_term=legal_name,
                    count=len(cases),
                    batch=batch,
                )

            yield ScanEvent(
                status=ScanEventStatus.COMPANY_COMPLETE,
                message=f"Finished {company.name}: {company_cases} case(s)",
                current_company=index,
                total_companies=total,
                company_name=company.name,
                count=company_cases,
            )

    async def collect(
        self,
        companies: Sequence[Company],
        hours_back: float,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[ScanBatch]:
        """Drain ``iter_scan`` into a list of batches, reporting progress on the way"""
        results = []
        async for event in self.iter_scan(companies, hours_back):
            if event.status in (ScanEventStatus.STARTED, ScanEventStatus.SEARCHING):
                notify_progress(on_progress, progress_from_event(event))
            elif event.batch is not None:
                results.append(event.batch)
        return results

    async def scan_high_priority_only(self, hours_back: float, on_progress: Optional[ProgressCallback] = None) -> List[ScanBatch]:
        """Scan only the companies flagged as high priority"""
        return await self.collect(self.roster.high_priority(), hours_back, on_progress)

    # the dashboard's default scan has always been the high priority subset
    scan_all = scan_high_priority_only

    async def scan_all_companies(self, hours_back: float, on_progress: Optional[ProgressCallback] = None) -> List[ScanBatch]:
        """Scan the whole roster"""
        return await self.collect(list(self.roster.companies), hours_back, on_progress)

    async def scan_one(self, company_id: str, hours_back: float, on_progress: Optional[ProgressCallback] = None) -> List[ScanBatch]:
        company = self.roster.get(company_id)
        return await self.collect([company], hours_back, on_progress)

def notify_progress(on_progress: Optional[ProgressCallback], progress: ScanProgress) -> None:
    if on_progress is None:
        return
    try:
        on_progress(progress)
    except Exception as e:
        # progress is best effort and must not change the scan result
        logger.warning(f"Progress callback failed: {e}")
