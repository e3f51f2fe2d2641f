from fastapi import Request

from app.services.company_roster import CompanyRoster
from app.services.scan_runner import ScanRunner
from app.services.scan_session import ScanSessionRegistry

def get_scan_runner(request: Request) -> ScanRunner:
    return request.app.state.scan_runner

def get_roster(request: Request) -> CompanyRoster:
    return request.app.state.roster

def get_scan_registry(request: Request) -> ScanSessionRegistry:
    return request.app.state.scan_runner.registry
