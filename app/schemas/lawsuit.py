from datetime import date, datetime
from typing import List, Optional, Union
from pydantic import BaseModel, Field

from app.schemas.company import Priority

class RawCaseRecord(BaseModel):
    """A docket hit as returned by the CourtListener search endpoint"""
    docket_id: Optional[Union[int, str]] = None
    case_name: Optional[str] = Field(None, alias="caseName")
    docket_number: Optional[str] = Field(None, alias="docketNumber")
    court: Optional[str] = None
    date_filed: Optional[str] = Field(None, alias="dateFiled")
    cause: Optional[str] = None
    docket_absolute_url: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "allow"

class CaseAnalysis(BaseModel):
    is_interesting: bool = Field(alias="isInteresting")
    keywords: List[str] = []
    priority: Priority

    class Config:
        populate_by_name = True

class FormattedLawsuit(BaseModel):
    id: Optional[str] = None
    company: str
    company_id: str = Field(alias="companyId")
    case_name: Optional[str] = Field(None, alias="caseName")
    docket_number: Optional[str] = Field(None, alias="docketNumber")
    court: Optional[str] = None
    date_filed: Optional[date] = Field(None, alias="dateFiled")
    cause: Optional[str] = None
    url: Optional[str] = None
    analysis: CaseAnalysis
    scanned_at: datetime = Field(alias="scannedAt")

    class Config:
        populate_by_name = True

class Lawsuit(BaseModel):
    id: int
    case_id: str
    company_id: str
    company_name: str
    case_name: Optional[str] = None
    docket_number: Optional[str] = None
    court: Optional[str] = None
    date_filed: Optional[date] = None
    cause: Optional[str] = None
    url: Optional[str] = None
    priority: Optional[str] = None
    keywords: Optional[List[str]] = None
    scanned_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class LawsuitStats(BaseModel):
    total: int = 0
    high_priority: int = 0
    medium_priority: int = 0
    last_week: int = 0
    last_month: int = 0

class SaveSummary(BaseModel):
    found: int = 0
    saved: int = 0
    inserted: int = 0
    updated: int = 0
    failed: int = 0
    failed_case_ids: List[Optional[str]] = []
