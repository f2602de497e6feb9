"""
Reputation provider clients.

Each client turns one batch of FIDs into exactly one outbound call and returns
a map containing every requested FID; FIDs the provider does not know map to
None so the cache can remember them as known-absent.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from unreplied.config import (
    OPENRANK_STRATEGY,
    OPENRANK_URL,
    PROVIDER_TIMEOUT,
    QUOTIENT_API_KEY,
    QUOTIENT_API_URL,
)
from unreplied.errors import ProviderError
from unreplied.models.reputation_models import ReputationScore

logger = logging.getLogger(__name__)

OPENRANK_STRATEGIES = ("following", "engagement")


class ReputationProvider:
    """Base class for a provider that scores batches of FIDs."""

    name = "provider"

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client

    async def fetch_batch(
        self, fids: List[int], timeout: float = PROVIDER_TIMEOUT
    ) -> Dict[int, Optional[ReputationScore]]:
        if not fids:
            return {}
        try:
            found = await asyncio.wait_for(self._call(fids, timeout), timeout)
        except asyncio.TimeoutError:
            raise ProviderError(self.name, f"timed out after {timeout}s")
        result: Dict[int, Optional[ReputationScore]] = {fid: None for fid in fids}
        for fid, score in found.items():
            if fid in result:
                result[fid] = score
            else:
                logger.debug(f"{self.name}: ignoring unrequested FID {fid}")
        logger.info(f"{self.name}: fetched {len(fids)} FIDs, {len(found)} known")
        return result

    async def _call(self, fids: List[int], timeout: float) -> Dict[int, ReputationScore]:
        raise NotImplementedError

    async def _post(self, url: str, payload: Any, timeout: float) -> httpx.Response:
        try:
            if self._client is not None:
                return await self._client.post(url, json=payload, timeout=timeout)
            async with httpx.AsyncClient(timeout=timeout) as client:
                return await client.post(url, json=payload)
        except httpx.TimeoutException as e:
            raise ProviderError(self.name, f"timed out after {timeout}s") from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"request failed: {e}") from e

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(self.name, "response is not valid JSON") from e

    def _score(self, item: Any, value_key: str, rank_key: str) -> ReputationScore:
        """Map one response item; a missing or badly typed field fails the whole batch."""
        try:
            return ReputationScore(
                fid=int(item["fid"]),
                value=item.get(value_key),
                rank=item.get(rank_key),
                raw=item,
            )
        except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as e:
            raise ProviderError(self.name, f"malformed response item: {item!r}") from e


class OpenRankProvider(ReputationProvider):
    """Graph-centrality rank from OpenRank's global ranking."""

    name = "openrank"

    def __init__(
        self,
        base_url: str = OPENRANK_URL,
        strategy: str = OPENRANK_STRATEGY,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(client)
        if strategy not in OPENRANK_STRATEGIES:
            raise ValueError(f"Unknown OpenRank strategy: {strategy}")
        if not base_url.endswith("/"):
            base_url += "/"
        self.url = f"{base_url}scores/global/{strategy}/fids"

    async def _call(self, fids: List[int], timeout: float) -> Dict[int, ReputationScore]:
        response = await self._post(self.url, fids, timeout)
        if response.status_code != 200:
            raise ProviderError(self.name, f"HTTP {response.status_code}")

        body = self._json(response)
        if not isinstance(body, dict) or not isinstance(body.get("result"), list):
            raise ProviderError(self.name, "unexpected response shape")

        scores = {}
        for item in body["result"]:
            score = self._score(item, value_key="score", rank_key="rank")
            scores[score.fid] = score
        return scores


class QuotientProvider(ReputationProvider):
    """Behavioral reputation score from the Quotient API."""

    name = "quotient"

    def __init__(
        self,
        url: str = QUOTIENT_API_URL,
        api_key: str = QUOTIENT_API_KEY,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(client)
        self.url = url
        self.api_key = api_key

    async def _call(self, fids: List[int], timeout: float) -> Dict[int, ReputationScore]:
        response = await self._post(self.url, {"fids": fids, "api_key": self.api_key}, timeout)

        # Quotient answers 404 when none of the FIDs are known
        if response.status_code == 404:
            return {}
        if response.status_code == 401:
            raise ProviderError(self.name, "authentication failed")
        if response.status_code != 200:
            raise ProviderError(self.name, f"HTTP {response.status_code}")

        body = self._json(response)
        if not isinstance(body, dict) or not isinstance(body.get("data"), list):
            raise ProviderError(self.name, "unexpected response shape")

        scores = {}
        for item in body["data"]:
            score = self._score(item, value_key="quotientScore", rank_key="quotientRank")
            scores[score.fid] = score
        return scores
