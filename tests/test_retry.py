"""Tests for the bounded retry wrapper."""

import pytest

from app.core.exceptions import ExternalApiError
from app.schemas.lawsuit import RawCaseRecord
from app.utils.courtlistener_client import CourtListenerClient
from app.utils.retry import RetryingSearchClient, retry_async


class FlakyClient:
    """Fails with the queued errors, then succeeds"""

    def __init__(self, errors, cases=None):
        self.errors = list(errors)
        self.cases = cases or [RawCaseRecord(docket_id=1)]
        self.calls = 0

    async def fetch_cases(self, term, filed_after=None):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.cases

    async def fetch_docket(self, docket_id):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return {"id": docket_id}

    async def close(self):
        pass


class CannedSession:
    """Stands in for aiohttp.ClientSession, answering every GET with one JSON payload"""

    def __init__(self, payload):
        self.payload = payload
        self.status = 200
        self.calls = 0

    def get(self, url, params=None):
        self.calls += 1
        return self

    async def json(self):
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def close(self):
        pass


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class TestRetryingSearchClient:
    @pytest.mark.asyncio
    async def test_recovers_from_transient_failures(self):
        client = FlakyClient([ExternalApiError("reset", retryable=True), ExternalApiError("busy", status=503)])
        sleep = RecordingSleep()
        retrying = RetryingSearchClient(client, max_attempts=3, base_delay=0.5, sleep=sleep)

        cases = await retrying.search_cases("Acme Inc")

        assert len(cases) == 1
        assert client.calls == 3
        assert sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        client = FlakyClient([ExternalApiError("busy", status=500)] * 5)
        sleep = RecordingSleep()
        retrying = RetryingSearchClient(client, max_attempts=3, base_delay=0.5, sleep=sleep)

        assert await retrying.search_cases("Acme Inc") == []
        assert client.calls == 3
        assert len(sleep.delays) == 2

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self):
        client = FlakyClient([ExternalApiError("bad token", status=403)])
        sleep = RecordingSleep()
        retrying = RetryingSearchClient(client, max_attempts=3, sleep=sleep)

        assert await retrying.search_cases("Acme Inc") == []
        assert client.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_rate_limited_is_retried(self):
        client = FlakyClient([ExternalApiError("slow down", status=429)])
        retrying = RetryingSearchClient(client, max_attempts=2, base_delay=0, sleep=RecordingSleep())

        assert len(await retrying.search_cases("Acme Inc")) == 1
        assert client.calls == 2

    @pytest.mark.asyncio
    async def test_docket_details_fail_soft(self):
        client = FlakyClient([ExternalApiError("gone", status=404)])
        retrying = RetryingSearchClient(client, max_attempts=3, sleep=RecordingSleep())

        assert await retrying.get_docket_details(7) is None

    @pytest.mark.asyncio
    async def test_bad_payload_is_not_retried(self):
        client = FlakyClient([ExternalApiError("Unexpected search response from CourtListener")])
        sleep = RecordingSleep()
        retrying = RetryingSearchClient(client, max_attempts=3, sleep=sleep)

        assert await retrying.search_cases("Acme Inc") == []
        assert client.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_malformed_record_is_one_request(self):
        client = CourtListenerClient(api_key="secret", base_url="https://cl.test/api/rest/v4")
        client.session = CannedSession({"results": [{"docket_id": 1, "caseName": 5}, {"docket_id": 2}]})
        sleep = RecordingSleep()
        retrying = RetryingSearchClient(client, max_attempts=3, base_delay=0.5, sleep=sleep)

        cases = await retrying.search_cases("Acme Inc")

        assert [case.docket_id for case in cases] == [2]
        assert client.session.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_single_attempt_disables_retries(self):
        client = FlakyClient([ExternalApiError("reset", retryable=True)])
        retrying = RetryingSearchClient(client, max_attempts=1, sleep=RecordingSleep())

        assert await retrying.search_cases("Acme Inc") == []
        assert client.calls == 1


@pytest.mark.asyncio
async def test_retry_async_passes_through_other_errors():
    async def broken():
        raise ValueError("not an API error")

    with pytest.raises(ValueError):
        await retry_async(broken, max_attempts=3, sleep=RecordingSleep())
