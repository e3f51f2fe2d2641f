import asyncio
from datetime import date
from typing import Any, Dict, List, Optional, Union

import aiohttp
from loguru import logger
from pydantic import ValidationError

from app.core.config import settings
from app.core.exceptions import ExternalApiError
from app.schemas.lawsuit import RawCaseRecord

# "r" selects RECAP dockets in the v4 search API
RECAP_DOCKET_TYPE = "r"

class CourtListenerClient:
    """Thin async wrapper around the CourtListener REST API.

    ``fetch_*`` methods raise ExternalApiError. ``search_cases`` and
    ``get_docket_details`` are fail-soft: they log the failure and return an
    empty result so a single bad search never ends a scan. Every call issues
    exactly one request, retries live in RetryingSearchClient.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.COURTLISTENER_API_KEY
        self.base_url = (base_url or settings.COURTLISTENER_BASE_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.session = None

    async def init_session(self):
        """Initialize aiohttp session"""
        if not self.session:
            self.session = aiohttp.ClientSession(
                headers={
                    'Authorization': f'Token {self.api_key}',
                    'Accept': 'application/json',
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )

    async def close(self):
        """Close aiohttp session"""
        if self.session:
            await self.session.close()
            self.session = None

    @staticmethod
    def build_search_params(term: str, filed_after: Optional[Union[date, str]] = None) -> Dict[str, str]:
        params = {
            'q': f'"{term}"',
            'type': RECAP_DOCKET_TYPE,
        }
        if filed_after:
            params['filed_after'] = filed_after.isoformat() if isinstance(filed_after, date) else filed_after
        return params

    async def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        await self.init_session()
        url = f"{self.base_url}{path}"
        try:
            async with self.session.get(url, params=params) as response:
                if response.status < 200 or response.status >= 300:
                    raise ExternalApiError(
                        f"CourtListener API error: {response.status}",
                        status=response.status,
                    )
                try:
                    return await response.json()
                except ValueError as e:
                    # JSONDecodeError and UnicodeDecodeError
                    raise ExternalApiError(
                        f"Invalid JSON from CourtListener: {e}",
                        status=response.status,
                    ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ExternalApiError(f"CourtListener request failed: {e!r}", retryable=True) from e

    async def fetch_cases(self, term: str, filed_after: Optional[Union[date, str]] = None) -> List[RawCaseRecord]:
        """Search RECAP dockets mentioning ``term`` as an exact phrase.

        Results that do not validate are logged and skipped so the rest of the
        page still comes back.
        """
        data = await self._get_json('/search/', params=self.build_search_params(term, filed_after))
        if not isinstance(data, dict):
            raise ExternalApiError("Unexpected search response from CourtListener")
        cases = []
        for item in data.get('results') or []:
            try:
                cases.append(RawCaseRecord.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed search result for {term}: {e}")
        return cases

    async def fetch_docket(self, docket_id: Union[int, str]) -> Dict[str, Any]:
        return await self._get_json(f'/dockets/{docket_id}/')

    async def search_cases(self, term: str, filed_after: Optional[Union[date, str]] = None) -> List[RawCaseRecord]:
        try:
            return await self.fetch_cases(term, filed_after)
        except ExternalApiError as e:
            logger.error(f"Error searching cases for {term}: {e}")
            return []

    async def get_docket_details(self, docket_id: Union[int, str]) -> Optional[Dict[str, Any]]:
        try:
            return await self.fetch_docket(docket_id)
        except ExternalApiError as e:
            logger.error(f"Error fetching docket {docket_id}: {e}")
            return None
