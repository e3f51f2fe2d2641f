from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional, Sequence, Tuple

from loguru import logger

from app.core.database import SessionLocal
from app.core.exceptions import ScanInProgressError, UnhandledScanError
from app.schemas.company import Company
from app.schemas.scan import ScanEvent, ScanEventStatus, ScanMode, ScanResult
from app.services.company_roster import CompanyRoster
from app.services.lawsuit_service import LawsuitService
from app.services.result_formatter import format_results
from app.services.scan_log_service import ScanLogService
from app.services.scan_orchestrator import ScanOrchestrator
from app.services.scan_session import ScanSession, ScanSessionRegistry

class ScanRunner:
    """Runs a scan end to end: search, format, persist, log.

    ``iter_events`` is the single event sequence every progress channel reads
    from. The polling channel sees it through the ScanSession it updates, the
    push channel writes each event out as it is yielded.
    """

    def __init__(
        self,
        orchestrator: ScanOrchestrator,
        roster: CompanyRoster,
        session_factory=SessionLocal,
        registry: Optional[ScanSessionRegistry] = None,
        web_origin: Optional[str] = None,
    ):
        self.orchestrator = orchestrator
        self.roster = roster
        self.session_factory = session_factory
        self.registry = registry if registry is not None else ScanSessionRegistry()
        self.web_origin = web_origin

    def resolve_companies(self, mode: ScanMode, company_id: Optional[str] = None) -> List[Company]:
        if mode == ScanMode.COMPANY:
            if not company_id:
                raise ValueError("company_id is required for a single company scan")
            return [self.roster.get(company_id)]
        if mode == ScanMode.ALL:
            return list(self.roster.companies)
        return self.roster.high_priority()

    def prepare(self, mode: ScanMode, hours_back: int, company_id: Optional[str] = None) -> Tuple[ScanSession, List[Company]]:
        """Resolve the companies and create the session that will run them.

        Raises CompanyNotFoundError or ScanInProgressError before any search is
        made. The slot itself is only claimed once ``iter_events`` starts, so a
        prepared session that never runs holds nothing.
        """
        companies = self.resolve_companies(mode, company_id)
        self.registry.ensure_idle()
        return ScanSession(mode, hours_back), companies

    async def iter_events(self, session: ScanSession, companies: Sequence[Company]) -> AsyncIterator[ScanEvent]:
        db = self.session_factory()
        batches = []
        try:
            self.registry.claim(session)
            async for event in self.orchestrator.iter_scan(companies, session.hours_back):
                if event.batch is not None:
                    batches.append(event.batch)
                session.apply(event)
                yield event

            case_count = sum(len(batch.cases) for batch in batches)
            saving = ScanEvent(
                status=ScanEventStatus.SAVING,
                message=f"Saving {case_count} case(s)...",
                found=case_count,
            )
            session.apply(saving)
            yield saving

            formatted = format_results(batches, self.web_origin)
            summary = LawsuitService(db).save_all(formatted)
            scanned_at = datetime.now(timezone.utc)
            message = f"Scan complete. Found {summary.found} cases, saved {summary.saved}."

            ScanLogService(db).save_scan_log(
                scan_mode=session.mode.value,
                hours_back=session.hours_back,
                companies_scanned=len(companies),
                total_found=summary.found,
                total_saved=summary.saved,
                success_status=True,
            )

            result = ScanResult(
                success=True,
                message=message,
                session_id=session.id,
                found=summary.found,
                saved=summary.saved,
                inserted=summary.inserted,
                updated=summary.updated,
                failed=summary.failed,
                scanned_at=scanned_at,
            )
            complete = ScanEvent(
                status=ScanEventStatus.COMPLETE,
                message=message,
                current_company=len(companies),
                total_companies=len(companies),
                found=summary.found,
                saved=summary.saved,
                scanned_at=scanned_at,
            )
            session.apply(complete)
            session.finish(result)
            logger.info(message)
            yield complete

        except ScanInProgressError:
            raise

        except Exception as e:
            error = UnhandledScanError(str(e))
            logger.error(f"Scan error: {error}")
            logger.exception("Full traceback:")

            ScanLogService(db).save_scan_log(
                scan_mode=session.mode.value,
                hours_back=session.hours_back,
                companies_scanned=len(companies),
                total_found=sum(len(batch.cases) for batch in batches),
                total_saved=0,
                success_status=False,
                error_message=str(error),
            )

            result = ScanResult(
                success=False,
                message="Scan failed",
                session_id=session.id,
                error=str(error),
            )
            failed = ScanEvent(
                status=ScanEventStatus.ERROR,
                message=f"Scan failed: {error}",
                error=str(error),
            )
            session.apply(failed)
            session.finish(result)
            yield failed

        finally:
            if session.is_active:
                # the consumer went away before the run finished
                logger.warning(f"Scan session {session.id} was interrupted")
                session.finish(ScanResult(
                    success=False,
                    message="Scan interrupted",
                    session_id=session.id,
                    error="Scan interrupted",
                ))
            db.close()

    async def drain(self, session: ScanSession, companies: Sequence[Company]) -> ScanResult:
        async for _ in self.iter_events(session, companies):
            pass
        return session.result

    async def run(self, mode: ScanMode, hours_back: int, company_id: Optional[str] = None) -> ScanResult:
        session, companies = self.prepare(mode, hours_back, company_id)
        return await self.drain(session, companies)
