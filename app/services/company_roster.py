import json
from pathlib import Path
from typing import List, Optional, Tuple

from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import CompanyNotFoundError, RosterError
from app.schemas.company import Company, Priority

def load_companies(path) -> Tuple[Company, ...]:
    """Read a roster file of the form {"companies": [...]}"""
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
        entries = data["companies"] if isinstance(data, dict) else data
        return tuple(Company.model_validate(entry) for entry in entries)
    except (OSError, json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
        logger.error(f"Error loading company roster from {path}: {e}")
        raise RosterError(f"Could not load company roster from {path}: {e}") from e

class CompanyRoster:
    """Immutable snapshot of the tracked companies.

    The snapshot is swapped wholesale by ``reload``; callers that already hold
    ``companies`` keep iterating the snapshot they started with.
    """

    def __init__(self, companies=(), source: Optional[str] = None):
        self._companies: Tuple[Company, ...] = tuple(companies)
        self.source = source

    @classmethod
    def from_file(cls, path: Optional[str] = None) -> "CompanyRoster":
        path = path or settings.COMPANIES_FILE
        companies = load_companies(path)
        logger.info(f"Loaded {len(companies)} companies from {path}")
        return cls(companies, source=str(path))

    @property
    def companies(self) -> Tuple[Company, ...]:
        return self._companies

    def __len__(self) -> int:
        return len(self._companies)

    def __iter__(self):
        return iter(self._companies)

    def high_priority(self) -> List[Company]:
        return [c for c in self._companies if c.priority == Priority.HIGH]

    def get(self, company_id: str) -> Company:
        for company in self._companies:
            if company.id == company_id:
                return company
        raise CompanyNotFoundError(company_id)

    def reload(self) -> int:
        """Re-read the source file; the old snapshot stays in place on failure"""
        if not self.source:
            raise RosterError("Roster has no source file to reload from")
        self._companies = load_companies(self.source)
        logger.info(f"Reloaded {len(self._companies)} companies from {self.source}")
        return len(self._companies)
