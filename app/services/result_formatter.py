from datetime import date
from typing import Iterable, List, Optional

from app.core.config import settings
from app.schemas.company import PRIORITY_RANK
from app.schemas.lawsuit import FormattedLawsuit
from app.schemas.scan import ScanBatch
from app.services.case_classifier import analyze_case

def parse_filed_date(value) -> Optional[date]:
    """Accept "YYYY-MM-DD" or an ISO datetime; anything else is None"""
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None

def build_case_url(absolute_path: Optional[str], web_origin: Optional[str] = None) -> Optional[str]:
    if not absolute_path:
        return None
    origin = (web_origin or settings.COURTLISTENER_WEB_ORIGIN).rstrip('/')
    return f"{origin}/{absolute_path.lstrip('/')}"

def _sort_key(lawsuit: FormattedLawsuit):
    # undated cases sort as the oldest
    filed = lawsuit.date_filed or date.min
    return (PRIORITY_RANK[lawsuit.analysis.priority], -filed.toordinal())

def format_results(batches: Iterable[ScanBatch], web_origin: Optional[str] = None) -> List[FormattedLawsuit]:
    """Flatten scan batches into analyzed lawsuits, most relevant and most recent first"""
    formatted = []

    for batch in batches:
        for case in batch.cases:
            formatted.append(FormattedLawsuit(
                id=str(case.docket_id) if case.docket_id is not None else None,
                company=batch.company,
                company_id=batch.company_id,
                case_name=case.case_name,
                docket_number=case.docket_number,
                court=case.court,
                date_filed=parse_filed_date(case.date_filed),
                cause=case.cause,
                url=build_case_url(case.docket_absolute_url, web_origin),
                analysis=analyze_case(case),
                scanned_at=batch.scanned_at,
            ))

    # list.sort is stable, so ties keep their input order
    formatted.sort(key=_sort_key)
    return formatted
