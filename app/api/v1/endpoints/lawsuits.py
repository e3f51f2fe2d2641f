from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from loguru import logger

from app.core.database import get_db
from app.core.exceptions import PersistenceError
from app.schemas.company import Priority
from app.schemas.lawsuit import Lawsuit as LawsuitSchema
from app.services.lawsuit_service import LawsuitService

router = APIRouter()

def _rows(lawsuits):
    return [LawsuitSchema.model_validate(lawsuit).model_dump(mode="json") for lawsuit in lawsuits]

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})

@router.get("/")
def get_lawsuits(
    company: Optional[str] = None,
    priority: Optional[Priority] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Get lawsuits, optionally filtered by company id and priority"""
    try:
        service = LawsuitService(db)
        lawsuits = service.list_lawsuits(
            company_id=company,
            priority=priority.value if priority else None,
            limit=limit,
            offset=offset,
        )
        return {"success": True, "data": _rows(lawsuits), "count": len(lawsuits)}
    except Exception as e:
        logger.error(f"Error fetching lawsuits: {e}")
        return _error(500, str(e))

@router.get("/recent")
def get_recent_lawsuits(db: Session = Depends(get_db)):
    """Get lawsuits filed in the last 7 days"""
    try:
        lawsuits = LawsuitService(db).recent_lawsuits(days=7, limit=100)
        return {"success": True, "data": _rows(lawsuits), "count": len(lawsuits)}
    except Exception as e:
        logger.error(f"Error fetching recent lawsuits: {e}")
        return _error(500, str(e))

@router.get("/stats")
def get_lawsuit_stats(db: Session = Depends(get_db)):
    """Get aggregate lawsuit counts"""
    try:
        stats = LawsuitService(db).stats()
        return {"success": True, "data": stats.model_dump()}
    except Exception as e:
        logger.error(f"Error fetching stats: {e}")
        return _error(500, str(e))

@router.get("/{case_id}")
def get_lawsuit(case_id: str, db: Session = Depends(get_db)):
    """Get a specific lawsuit by CourtListener docket id"""
    lawsuit = LawsuitService(db).get_lawsuit(case_id)
    if not lawsuit:
        return _error(404, "Lawsuit not found")
    return {"success": True, "data": LawsuitSchema.model_validate(lawsuit).model_dump(mode="json")}

@router.delete("/")
def delete_lawsuits(db: Session = Depends(get_db)):
    """Delete every stored lawsuit"""
    try:
        deleted = LawsuitService(db).delete_all()
        return {"success": True, "deleted": deleted}
    except PersistenceError as e:
        return _error(500, str(e))
