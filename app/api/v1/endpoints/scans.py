import json
from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session
from loguru import logger

from app.api.deps import get_scan_registry, get_scan_runner
from app.core.database import get_db
from app.core.exceptions import NotFoundError, ScanInProgressError
from app.schemas.company import Company
from app.schemas.scan import ScanEvent, ScanEventStatus, ScanMode, ScanRequest
from app.schemas.scan_log import ScanLog as ScanLogSchema
from app.services.lawsuit_service import LawsuitService
from app.services.scan_log_service import ScanLogService
from app.services.scan_runner import ScanRunner
from app.services.scan_session import ScanSession, ScanSessionRegistry

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})

def _prepare(runner: ScanRunner, mode: ScanMode, hours_back: int, company_id: Optional[str] = None):
    """Check the request can run, or return the error response to send instead.

    The scan slot is claimed by whoever iterates the session's events, never here.
    """
    try:
        return runner.prepare(mode, hours_back, company_id), None
    except NotFoundError as e:
        return None, _error(404, str(e))
    except ScanInProgressError as e:
        return None, _error(409, str(e))

async def _run(runner: ScanRunner, mode: ScanMode, hours_back: int, company_id: Optional[str] = None):
    prepared, error = _prepare(runner, mode, hours_back, company_id)
    if error:
        return error

    logger.info(f"Starting lawsuit scan ({mode.value}, {hours_back} hours back)...")
    try:
        result = await runner.drain(*prepared)
    except ScanInProgressError as e:
        return _error(409, str(e))
    if not result.success:
        return _error(500, result.error or result.message)
    return {
        "success": True,
        "message": result.message,
        "data": {
            "found": result.found,
            "saved": result.saved,
            "scannedAt": result.scanned_at.isoformat() if result.scanned_at else None,
        },
    }

def _stream(runner: ScanRunner, mode: ScanMode, hours_back: int, company_id: Optional[str] = None):
    prepared, error = _prepare(runner, mode, hours_back, company_id)
    if error:
        return error

    async def event_stream():
        try:
            async for event in runner.iter_events(*prepared):
                yield f"data: {json.dumps(event.to_frame())}\n\n"
        except ScanInProgressError as e:
            rejected = ScanEvent(status=ScanEventStatus.ERROR, message=str(e), error=str(e))
            yield f"data: {json.dumps(rejected.to_frame())}\n\n"

    return StreamingResponse(event_stream(), media_type="text/event-stream", headers=SSE_HEADERS)

async def _drain_in_background(runner: ScanRunner, session: ScanSession, companies: List[Company]):
    try:
        await runner.drain(session, companies)
    except ScanInProgressError as e:
        logger.warning(f"Background scan {session.id} did not start: {e}")

@router.post("/lawsuits")
async def scan_lawsuits(request: Optional[ScanRequest] = None, runner: ScanRunner = Depends(get_scan_runner)):
    """Scan the roster and save every case found"""
    request = request or ScanRequest()
    if request.mode == ScanMode.COMPANY:
        return _error(400, "Use /scan/companies/{company_id} for a single company scan")
    return await _run(runner, request.mode, request.hours_back)

@router.post("/lawsuits/stream")
async def stream_scan_lawsuits(request: Optional[ScanRequest] = None, runner: ScanRunner = Depends(get_scan_runner)):
    """Scan the roster, pushing every progress event to the client as it happens"""
    request = request or ScanRequest()
    if request.mode == ScanMode.COMPANY:
        return _error(400, "Use /scan/companies/{company_id}/stream for a single company scan")
    return _stream(runner, request.mode, request.hours_back)

@router.post("/lawsuits/background")
async def start_background_scan(
    background_tasks: BackgroundTasks,
    request: Optional[ScanRequest] = None,
    runner: ScanRunner = Depends(get_scan_runner),
):
    """Start a scan and return at once; follow it through /scan/progress"""
    request = request or ScanRequest()
    if request.mode == ScanMode.COMPANY:
        return _error(400, "Single company scans cannot run in the background")
    prepared, error = _prepare(runner, request.mode, request.hours_back)
    if error:
        return error
    session, companies = prepared
    background_tasks.add_task(_drain_in_background, runner, session, companies)
    return {"success": True, "sessionId": session.id}

@router.post("/companies/{company_id}")
async def scan_company(company_id: str, request: Optional[ScanRequest] = None, runner: ScanRunner = Depends(get_scan_runner)):
    """Scan a single company by roster id"""
    request = request or ScanRequest()
    return await _run(runner, ScanMode.COMPANY, request.hours_back, company_id)

@router.post("/companies/{company_id}/stream")
async def stream_scan_company(company_id: str, request: Optional[ScanRequest] = None, runner: ScanRunner = Depends(get_scan_runner)):
    request = request or ScanRequest()
    return _stream(runner, ScanMode.COMPANY, request.hours_back, company_id)

@router.get("/progress")
def get_scan_progress(registry: ScanSessionRegistry = Depends(get_scan_registry)):
    """Snapshot of the latest scan session"""
    return {"success": True, "data": registry.snapshot()}

@router.get("/status")
def get_scan_status(db: Session = Depends(get_db)):
    """Time of the most recent scan that saved or refreshed a lawsuit"""
    try:
        last_scan = LawsuitService(db).last_scan_time()
        return {"success": True, "lastScan": last_scan.isoformat() if last_scan else None}
    except Exception as e:
        logger.error(f"Error fetching scan status: {e}")
        return _error(500, str(e))

@router.get("/logs", response_model=List[ScanLogSchema])
def get_scan_logs(limit: int = 50, db: Session = Depends(get_db)):
    """Get the most recent scan runs"""
    return ScanLogService(db).get_scan_logs(limit=limit)
