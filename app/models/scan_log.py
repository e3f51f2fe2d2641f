from sqlalchemy import Column, String, Integer, Boolean, DateTime
from sqlalchemy.sql import func
from app.core.base import Base

class ScanLog(Base):
    __tablename__ = "scan_logs"

    id = Column(String(36), primary_key=True, index=True)
    date_time = Column(DateTime(timezone=True), nullable=False)
    scan_mode = Column(String(50), nullable=False)
    hours_back = Column(Integer, nullable=False)
    companies_scanned = Column(Integer, nullable=False, default=0)
    total_found = Column(Integer, nullable=False, default=0)
    total_saved = Column(Integer, nullable=False, default=0)
    success_status = Column(Boolean, nullable=False)
    error_message = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
