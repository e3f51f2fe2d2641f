from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from app.core.config import settings
from app.schemas.lawsuit import RawCaseRecord

class ScanMode(str, Enum):
    HIGH_PRIORITY = "high-priority"
    ALL = "all"
    COMPANY = "company"

class ScanState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SAVING = "saving"
    COMPLETE = "complete"
    ERROR = "error"

class ScanEventStatus(str, Enum):
    STARTED = "started"
    SEARCHING = "searching"
    FOUND = "found"
    COMPANY_COMPLETE = "company-complete"
    SAVING = "saving"
    COMPLETE = "complete"
    ERROR = "error"

TERMINAL_EVENTS = (ScanEventStatus.COMPLETE, ScanEventStatus.ERROR)

class ScanBatch(BaseModel):
    """Cases found for one legal name of one company"""
    company: str
    company_id: str = Field(alias="companyId")
    search_term: str = Field(alias="searchTerm")
    cases: List[RawCaseRecord]
    scanned_at: datetime = Field(alias="scannedAt")

    class Config:
        populate_by_name = True

class ScanProgress(BaseModel):
    is_scanning: bool = Field(False, alias="isScanning")
    message: str = ""
    current_company: int = Field(0, alias="currentCompany")
    total_companies: int = Field(0, alias="totalCompanies")
    company_name: str = Field("", alias="companyName")

    class Config:
        populate_by_name = True

class ScanEvent(BaseModel):
    status: ScanEventStatus
    message: str = ""
    company_name: Optional[str] = Field(None, alias="companyName")
    current_company: Optional[int] = Field(None, alias="currentCompany")
    total_companies: Optional[int] = Field(None, alias="totalCompanies")
    search_term: Optional[str] = Field(None, alias="searchTerm")
    count: Optional[int] = None
    found: Optional[int] = None
    saved: Optional[int] = None
    scanned_at: Optional[datetime] = Field(None, alias="scannedAt")
    error: Optional[str] = None
    # carried in-process only, never serialized onto the wire
    batch: Optional[ScanBatch] = Field(None, exclude=True)

    class Config:
        populate_by_name = True

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_EVENTS

    def to_frame(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

class ScanRequest(BaseModel):
    hours_back: int = Field(settings.DEFAULT_HOURS_BACK, alias="hoursBack", gt=0)
    mode: ScanMode = ScanMode.HIGH_PRIORITY

    class Config:
        populate_by_name = True

class ScanResult(BaseModel):
    success: bool
    message: str = ""
    session_id: Optional[str] = Field(None, alias="sessionId")
    found: int = 0
    saved: int = 0
    inserted: int = 0
    updated: int = 0
    failed: int = 0
    scanned_at: Optional[datetime] = Field(None, alias="scannedAt")
    error: Optional[str] = None

    class Config:
        populate_by_name = True
