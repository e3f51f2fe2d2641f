from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from app.api.deps import get_roster
from app.core.exceptions import RosterError
from app.services.company_roster import CompanyRoster

router = APIRouter()

@router.get("/")
def get_companies(roster: CompanyRoster = Depends(get_roster)):
    """Get the tracked company roster in scan order"""
    data = [company.model_dump(mode="json", by_alias=True) for company in roster]
    return {"success": True, "data": data, "count": len(data)}

@router.post("/reload")
def reload_companies(roster: CompanyRoster = Depends(get_roster)):
    """Re-read the roster file. Scans already running keep their snapshot."""
    try:
        count = roster.reload()
        return {"success": True, "count": count}
    except RosterError as e:
        logger.error(f"Error reloading roster: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
