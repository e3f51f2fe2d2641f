import uuid
from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from app.models.scan_log import ScanLog

class ScanLogService:
    def __init__(self, db: Session):
        self.db = db

    def save_scan_log(
        self,
        scan_mode: str,
        hours_back: int,
        companies_scanned: int,
        total_found: int,
        total_saved: int,
        success_status: bool,
        error_message: Optional[str] = "",
    ) -> Optional[ScanLog]:
        """Record the outcome of a scan run. A failure here is logged, never raised."""
        try:
            log_entry = ScanLog(
                id=str(uuid.uuid4()),
                date_time=datetime.now(timezone.utc),
                scan_mode=scan_mode,
                hours_back=hours_back,
                companies_scanned=companies_scanned,
                total_found=total_found,
                total_saved=total_saved,
                success_status=success_status,
                error_message=error_message,
            )
            self.db.add(log_entry)
            self.db.commit()
            logger.info(f"Saved scan log {log_entry.id} - Found: {total_found}, Saved: {total_saved}, Success: {success_status}")
            return log_entry
        except Exception as e:
            self.db.rollback()
            logger.error(f"Database error while saving scan log: {str(e)}")
            logger.exception("Full traceback:")
            return None

    def get_scan_logs(self, limit: int = 50) -> List[ScanLog]:
        return self.db.query(ScanLog).order_by(ScanLog.date_time.desc()).limit(limit).all()
