from sqlalchemy import Column, Integer, String, Text, Date, DateTime, JSON
from sqlalchemy.sql import func
from app.core.base import Base

class Lawsuit(Base):
    __tablename__ = "lawsuits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(String(255), unique=True, nullable=False, index=True)
    company_id = Column(String(255), nullable=False, index=True)
    company_name = Column(String(255), nullable=False)
    case_name = Column(Text)
    docket_number = Column(String(255))
    court = Column(String(255))
    date_filed = Column(Date, index=True)
    cause = Column(Text)
    url = Column(Text)
    priority = Column(String(50), index=True)
    keywords = Column(JSON)
    scanned_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
