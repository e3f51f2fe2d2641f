import asyncio
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from loguru import logger

from app.core.config import settings
from app.core.exceptions import ExternalApiError
from app.schemas.lawsuit import RawCaseRecord
from app.utils.courtlistener_client import CourtListenerClient

async def retry_async(
    call: Callable[[], Awaitable[Any]],
    max_attempts: int = 3,
    base_delay: float = 0.5,
    description: str = "request",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Any:
    """Run ``call`` until it succeeds, doubling the delay after each retryable failure"""
    for attempt in range(1, max_attempts + 1):
        try:
            return await call()
        except ExternalApiError as e:
            if not e.retryable or attempt == max_attempts:
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(f"{description} attempt {attempt}/{max_attempts} failed: {e}. Retrying in {delay:.1f}s")
            await sleep(delay)

class RetryingSearchClient:
    """Bounded exponential-backoff retries around a CourtListenerClient.

    Keeps the fail-soft contract of the wrapped client: once every attempt is
    spent the failure is logged and an empty result comes back.
    """

    def __init__(
        self,
        client: CourtListenerClient,
        max_attempts: Optional[int] = None,
        base_delay: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.max_attempts = max(1, max_attempts if max_attempts is not None else settings.SEARCH_MAX_ATTEMPTS)
        self.base_delay = base_delay if base_delay is not None else settings.SEARCH_RETRY_BASE_DELAY
        self.sleep = sleep

    async def search_cases(self, term: str, filed_after: Optional[Union[date, str]] = None) -> List[RawCaseRecord]:
        try:
            return await retry_async(
                lambda: self.client.fetch_cases(term, filed_after),
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                description=f"Search for {term}",
                sleep=self.sleep,
            )
        except ExternalApiError as e:
            logger.error(f"Search for {term} failed after {self.max_attempts} attempt(s): {e}")
            return []

    async def get_docket_details(self, docket_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        try:
            return await retry_async(
                lambda: self.client.fetch_docket(docket_id),
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                description=f"Docket {docket_id} lookup",
                sleep=self.sleep,
            )
        except ExternalApiError as e:
            logger.error(f"Docket {docket_id} lookup failed after {self.max_attempts} attempt(s): {e}")
            return None

    async def close(self):
        await self.client.close()
