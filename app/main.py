from datetime import datetime, timezone
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.core.config import settings
from app.core.database import SessionLocal, init_db
from app.core.logging import configure_logging
from app.api.v1.api import api_router
from app.services.company_roster import CompanyRoster
from app.services.scan_orchestrator import ScanOrchestrator
from app.services.scan_runner import ScanRunner
from app.utils.courtlistener_client import CourtListenerClient
from app.utils.retry import RetryingSearchClient

configure_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description=settings.DESCRIPTION,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

# Set up CORS middleware with appropriate origins
origins = ["*"] if settings.ALLOW_ALL_ORIGINS else [str(origin) for origin in settings.BACKEND_CORS_ORIGINS]

# Note: When allow_origins=["*"], allow_credentials must be False according to CORS spec
allow_credentials = not settings.ALLOW_ALL_ORIGINS

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=600,
)

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)

def build_scan_runner(roster: CompanyRoster) -> ScanRunner:
    client = RetryingSearchClient(CourtListenerClient())
    orchestrator = ScanOrchestrator(client, roster)
    return ScanRunner(orchestrator, roster, session_factory=SessionLocal)

@app.on_event("startup")
async def startup_event():
    """Initialize database and load the company roster once"""
    init_db(recreate=False)
    roster = CompanyRoster.from_file(settings.COMPANIES_FILE)
    app.state.roster = roster
    app.state.scan_runner = build_scan_runner(roster)

@app.on_event("shutdown")
async def shutdown_event():
    runner = getattr(app.state, "scan_runner", None)
    if runner is not None:
        await runner.orchestrator.client.close()
        logger.info("Closed CourtListener session")

@app.get("/")
async def root():
    return {"message": "Welcome to the Litigation Scanner API"}

@app.get(f"{settings.API_V1_STR}/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
