from datetime import datetime
from typing import Optional
from pydantic import BaseModel

class ScanLog(BaseModel):
    id: str
    date_time: datetime
    scan_mode: str
    hours_back: int
    companies_scanned: int
    total_found: int
    total_saved: int
    success_status: bool
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "date_time": "2024-03-14T12:00:00",
                "scan_mode": "high-priority",
                "hours_back": 168,
                "companies_scanned": 12,
                "total_found": 4,
                "total_saved": 4,
                "success_status": True,
                "error_message": None,
                "created_at": "2024-03-14T12:00:00"
            }
        }
