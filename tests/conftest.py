"""
Shared fixtures: an in-memory database, a small roster and a scripted search client.
"""
import os

# Settings are read at import time, so the environment has to be ready first
os.environ.setdefault("COURTLISTENER_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("SEARCH_DELAY_SECONDS", "0")

from typing import Dict, List

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import init_db
from app.schemas.company import Company
from app.schemas.lawsuit import RawCaseRecord
from app.services.company_roster import CompanyRoster


def make_case(docket_id, case_name="Doe v. Acme Inc", date_filed="2024-01-10", cause="", docket_number="1:24-cv-00001"):
    """A search hit shaped like the CourtListener v4 response"""
    return {
        "docket_id": docket_id,
        "caseName": case_name,
        "docketNumber": docket_number,
        "court": "District Court, N.D. California",
        "dateFiled": date_filed,
        "cause": cause,
        "docket_absolute_url": f"/docket/{docket_id}/doe-v-acme/",
    }


class FakeSearchClient:
    """Returns canned results per search term and records every call"""

    def __init__(self, results: Dict[str, List[dict]] = None, error: Exception = None):
        self.results = results or {}
        self.error = error
        self.calls = []
        self.closed = False

    async def search_cases(self, term, filed_after=None):
        self.calls.append((term, filed_after))
        if self.error is not None:
            raise self.error
        return [RawCaseRecord.model_validate(case) for case in self.results.get(term, [])]

    async def close(self):
        self.closed = True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def companies() -> List[Company]:
    return [
        Company(id="acme", name="Acme Games", legal_names=("Acme Inc", "Acme Corp"), priority="high"),
        Company(id="globex", name="Globex", legal_names=("Globex LLC",), priority="medium"),
        Company(id="initech", name="Initech", legal_names=("Initech",), priority="high"),
    ]


@pytest.fixture
def roster(companies) -> CompanyRoster:
    return CompanyRoster(companies)


@pytest.fixture
def fake_client() -> FakeSearchClient:
    return FakeSearchClient({
        "Acme Inc": [make_case(101, "Doe v. Acme Inc", "2024-01-10", "Antitrust class action")],
        "Globex LLC": [make_case(202, "Smith v. Globex LLC", "2024-01-12", "Breach of contract")],
    })
