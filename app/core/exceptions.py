from typing import Optional


class ScannerError(Exception):
    """Base class for all scanner errors"""


class ExternalApiError(ScannerError):
    """A CourtListener call failed, either in transport or with a non-2xx status.

    ``retryable`` is set explicitly for transport failures. When left out it
    follows the status: 429 and 5xx are worth another attempt, anything else
    (including a bad payload with no status) is not.
    """

    def __init__(self, message: str, status: Optional[int] = None, retryable: Optional[bool] = None):
        super().__init__(message)
        self.status = status
        if retryable is None:
            retryable = status is not None and (status == 429 or status >= 500)
        self.retryable = retryable


class PersistenceError(ScannerError):
    """Saving a single lawsuit row failed"""


class NotFoundError(ScannerError):
    pass


class CompanyNotFoundError(NotFoundError):
    def __init__(self, company_id: str):
        super().__init__(f"Company not found: {company_id}")
        self.company_id = company_id


class UnhandledScanError(ScannerError):
    """Any other failure during a scan run, caught at the runner boundary"""


class ScanInProgressError(ScannerError):
    def __init__(self, session_id: str):
        super().__init__(f"A scan is already running (session {session_id})")
        self.session_id = session_id


class RosterError(ScannerError):
    """The company roster file is missing or malformed"""
