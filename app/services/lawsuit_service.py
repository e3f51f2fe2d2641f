from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from loguru import logger
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import PersistenceError
from app.models.lawsuit import Lawsuit
from app.schemas.lawsuit import FormattedLawsuit, LawsuitStats, SaveSummary

INSERTED = "inserted"
UPDATED = "updated"

class LawsuitService:
    def __init__(self, db: Session):
        self.db = db

    def upsert(self, lawsuit: FormattedLawsuit) -> str:
        """Insert a lawsuit, or only refresh scanned_at when its case_id is already stored.

        The first write wins on content, the latest scan wins on scanned_at.
        """
        if not lawsuit.id:
            raise PersistenceError(f"Lawsuit for {lawsuit.company_id} has no case id")

        try:
            db_lawsuit = self.db.query(Lawsuit).filter(Lawsuit.case_id == lawsuit.id).first()

            if db_lawsuit:
                db_lawsuit.scanned_at = lawsuit.scanned_at
                self.db.commit()
                logger.debug(f"Refreshed scan time for lawsuit {lawsuit.id}")
                return UPDATED

            db_lawsuit = Lawsuit(
                case_id=lawsuit.id,
                company_id=lawsuit.company_id,
                company_name=lawsuit.company,
                case_name=lawsuit.case_name,
                docket_number=lawsuit.docket_number,
                court=lawsuit.court,
                date_filed=lawsuit.date_filed,
                cause=lawsuit.cause,
                url=lawsuit.url,
                priority=lawsuit.analysis.priority.value,
                keywords=list(lawsuit.analysis.keywords),
                scanned_at=lawsuit.scanned_at,
            )
            self.db.add(db_lawsuit)
            self.db.commit()
            logger.info(f"Saved new lawsuit {lawsuit.id}: {lawsuit.case_name}")
            return INSERTED

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving lawsuit {lawsuit.id}: {str(e)}")
            raise PersistenceError(f"Error saving lawsuit {lawsuit.id}: {e}") from e

    def save_all(self, lawsuits: Iterable[FormattedLawsuit]) -> SaveSummary:
        """Upsert every lawsuit; a failing row is logged and counted, never raised"""
        summary = SaveSummary()
        for lawsuit in lawsuits:
            summary.found += 1
            try:
                outcome = self.upsert(lawsuit)
            except PersistenceError as e:
                logger.error(f"Skipping lawsuit {lawsuit.id}: {e}")
                summary.failed += 1
                summary.failed_case_ids.append(lawsuit.id)
                continue

            summary.saved += 1
            if outcome == INSERTED:
                summary.inserted += 1
            else:
                summary.updated += 1

        logger.info(
            f"Saved {summary.saved} of {summary.found} lawsuits "
            f"({summary.inserted} new, {summary.updated} refreshed, {summary.failed} failed)"
        )
        return summary

    def get_lawsuit(self, case_id: str) -> Optional[Lawsuit]:
        return self.db.query(Lawsuit).filter(Lawsuit.case_id == case_id).first()

    def list_lawsuits(
        self,
        company_id: Optional[str] = None,
        priority: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Lawsuit]:
        query = self.db.query(Lawsuit)
        if company_id:
            query = query.filter(Lawsuit.company_id == company_id)
        if priority:
            query = query.filter(Lawsuit.priority == priority)
        return (
            query.order_by(Lawsuit.date_filed.desc(), Lawsuit.priority.asc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def recent_lawsuits(self, days: int = 7, limit: int = 100, today: Optional[date] = None) -> List[Lawsuit]:
        cutoff = (today or date.today()) - timedelta(days=days)
        return (
            self.db.query(Lawsuit)
            .filter(Lawsuit.date_filed >= cutoff)
            .order_by(Lawsuit.date_filed.desc(), Lawsuit.priority.asc())
            .limit(limit)
            .all()
        )

    def stats(self, today: Optional[date] = None) -> LawsuitStats:
        today = today or date.today()
        week_ago = today - timedelta(days=7)
        month_ago = today - timedelta(days=30)

        row = self.db.query(
            func.count(Lawsuit.id),
            func.count(case((Lawsuit.priority == "high", 1))),
            func.count(case((Lawsuit.priority == "medium", 1))),
            func.count(case((Lawsuit.date_filed >= week_ago, 1))),
            func.count(case((Lawsuit.date_filed >= month_ago, 1))),
        ).one()

        return LawsuitStats(
            total=row[0] or 0,
            high_priority=row[1] or 0,
            medium_priority=row[2] or 0,
            last_week=row[3] or 0,
            last_month=row[4] or 0,
        )

    def last_scan_time(self) -> Optional[datetime]:
        return self.db.query(func.max(Lawsuit.scanned_at)).scalar()

    def delete_all(self) -> int:
        try:
            deleted = self.db.query(Lawsuit).delete(synchronize_session=False)
            self.db.commit()
            logger.info(f"Deleted {deleted} lawsuits")
            return deleted
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error deleting lawsuits: {str(e)}")
            logger.exception("Full traceback:")
            raise PersistenceError(f"Error deleting lawsuits: {e}") from e
