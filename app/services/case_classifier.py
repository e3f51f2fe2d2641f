from app.schemas.company import Priority
from app.schemas.lawsuit import CaseAnalysis, RawCaseRecord

INTERESTING_KEYWORDS = (
    'antitrust',
    'class action',
    'sexual harassment',
    'discrimination',
    'trade secrets',
    'intellectual property',
    'copyright',
    'trademark',
    'patent',
    'employment',
    'wrongful termination',
    'securities fraud',
    'consumer protection',
    'privacy',
    'data breach',
    'loot box',
    'gambling',
    'unfair business practices',
)

def analyze_case(record: RawCaseRecord) -> CaseAnalysis:
    """Flag a case by the keywords found in its name, docket number and cause"""
    case_text = " ".join([
        record.case_name or "",
        record.docket_number or "",
        record.cause or "",
    ]).lower()

    found = [keyword for keyword in INTERESTING_KEYWORDS if keyword in case_text]

    if len(found) >= 2:
        priority = Priority.HIGH
    elif len(found) == 1:
        priority = Priority.MEDIUM
    else:
        priority = Priority.LOW

    return CaseAnalysis(is_interesting=bool(found), keywords=found, priority=priority)
