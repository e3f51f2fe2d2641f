import uuid
from datetime import datetime, timezone
from typing import Optional

from loguru import logger

from app.core.exceptions import ScanInProgressError
from app.schemas.scan import ScanEvent, ScanEventStatus, ScanMode, ScanProgress, ScanResult, ScanState

IDLE_MESSAGE = "Idle"

class ScanSession:
    """Handle for one scan run and the progress it reports"""

    def __init__(self, mode: ScanMode, hours_back: int):
        self.id = str(uuid.uuid4())
        self.mode = mode
        self.hours_back = hours_back
        self.state = ScanState.IDLE
        self.progress = ScanProgress(message=IDLE_MESSAGE)
        self.started_at: Optional[datetime] = None
        self.finished_at: Optional[datetime] = None
        self.result: Optional[ScanResult] = None

    @property
    def is_active(self) -> bool:
        return self.state in (ScanState.RUNNING, ScanState.SAVING)

    def start(self):
        self.state = ScanState.RUNNING
        self.started_at = datetime.now(timezone.utc)
        self.progress = ScanProgress(is_scanning=True, message="Starting scan...")

    def apply(self, event: ScanEvent):
        """Fold an event into the progress snapshot"""
        if event.status == ScanEventStatus.SAVING:
            self.state = ScanState.SAVING
        progress = self.progress.model_copy(update={"message": event.message})
        if event.current_company is not None:
            progress.current_company = event.current_company
        if event.total_companies is not None:
            progress.total_companies = event.total_companies
        if event.company_name is not None:
            progress.company_name = event.company_name
        progress.is_scanning = not event.is_terminal
        self.progress = progress

    def finish(self, result: ScanResult):
        self.result = result
        self.finished_at = datetime.now(timezone.utc)
        self.state = ScanState.COMPLETE if result.success else ScanState.ERROR
        self.progress = self.progress.model_copy(update={
            "is_scanning": False,
            "message": result.message if result.success else f"Scan failed: {result.error}",
        })

    def snapshot(self) -> dict:
        data = self.progress.model_dump(mode="json", by_alias=True)
        data.update({
            "sessionId": self.id,
            "state": self.state.value,
            "mode": self.mode.value,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
        })
        if self.result is not None:
            data["result"] = self.result.model_dump(mode="json", by_alias=True)
        return data

class ScanSessionRegistry:
    """Keeps the latest scan session and refuses to start a second one while it runs"""

    def __init__(self):
        self.latest: Optional[ScanSession] = None

    @property
    def active(self) -> Optional[ScanSession]:
        if self.latest is not None and self.latest.is_active:
            return self.latest
        return None

    def ensure_idle(self):
        """Raise ScanInProgressError while another session holds the slot"""
        if self.active is not None:
            logger.warning(f"Rejected scan request, session {self.active.id} is still running")
            raise ScanInProgressError(self.active.id)

    def claim(self, session: ScanSession) -> ScanSession:
        """Start ``session`` and make it the one progress is reported for"""
        if self.active is not session:
            self.ensure_idle()
        session.start()
        self.latest = session
        logger.info(f"Started scan session {session.id} ({session.mode.value}, {session.hours_back}h back)")
        return session

    def begin(self, mode: ScanMode, hours_back: int) -> ScanSession:
        return self.claim(ScanSession(mode, hours_back))

    def snapshot(self) -> dict:
        if self.latest is None:
            data = ScanProgress(message=IDLE_MESSAGE).model_dump(mode="json", by_alias=True)
            data.update({"sessionId": None, "state": ScanState.IDLE.value})
            return data
        return self.latest.snapshot()
