from fastapi import APIRouter

from app.api.v1.endpoints import companies, lawsuits, scans

api_router = APIRouter()

api_router.include_router(lawsuits.router, prefix="/lawsuits", tags=["lawsuits"])
api_router.include_router(scans.router, prefix="/scan", tags=["scan"])
api_router.include_router(companies.router, prefix="/companies", tags=["companies"])
