"""
Restaurant Resolution Service

Resolves a restaurant query against the local database first and falls
back to the external providers on a miss:
- Cache check (any non-empty local match is returned as-is)
- Parallel Yelp + Google Places search
- Merge, dedupe by name, rank by rating
- Best-effort persistence of the merged results
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, List, Optional, TypeVar

from app.models.records import RestaurantRecord
from app.services.database_service import RestaurantStore
from app.services.matching_service import merge_and_rank
from app.services.providers import RestaurantProvider, ProviderSearchResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CACHE_SEARCH_LIMIT = 50
DEFAULT_TRENDING_LIMIT = 20


class RestaurantResolver:
    """
    Cache-aside orchestrator over a RestaurantStore and two providers.

    Store and provider calls are blocking, so they run on thread pools owned
    by the resolver and the event loop is never blocked. Provider calls get a
    pool of their own so slow providers cannot starve cache reads. The two
    provider searches of a cache miss are joined with asyncio.gather: the call
    waits for both, and a slow provider is bounded only by its own HTTP timeout.
    """

    def __init__(
        self,
        store: RestaurantStore,
        primary_provider: RestaurantProvider,
        secondary_provider: RestaurantProvider,
        cache_search_limit: int = DEFAULT_CACHE_SEARCH_LIMIT,
        max_workers: int = 8,
        provider_workers: int = 8,
    ):
        self.store = store
        self.primary_provider = primary_provider
        self.secondary_provider = secondary_provider
        self.cache_search_limit = cache_search_limit
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="resolver")
        self._provider_executor = ThreadPoolExecutor(
            max_workers=provider_workers, thread_name_prefix="resolver-provider"
        )

    async def _run_blocking(self, func: Callable[..., T], *args) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args))

    async def _run_provider(self, provider: RestaurantProvider, *args) -> ProviderSearchResult:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._provider_executor, partial(provider.search_restaurants, *args)
        )

    async def search(
        self,
        query: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> List[RestaurantRecord]:
        """
        Search for restaurants matching a query.

        Args:
            query: Restaurant name or cuisine, already validated as non-empty
            latitude: Optional latitude to bias provider results
            longitude: Optional longitude to bias provider results

        Returns:
            Local matches on a cache hit, otherwise the merged provider results
        """
        logger.info(f"Searching restaurants: '{query}'")

        # 1. Local cache lookup
        cached = await self._run_blocking(self.store.search, query, self.cache_search_limit)
        if cached:
            logger.info(f"Cache hit - {len(cached)} restaurants from local database")
            return cached

        # 2. Cache miss - call both providers in parallel and wait for both
        logger.info(
            f"Cache miss - calling {self.primary_provider.name} and "
            f"{self.secondary_provider.name} in parallel"
        )
        primary_result, secondary_result = await asyncio.gather(
            self._run_provider(self.primary_provider, query, latitude, longitude),
            self._run_provider(self.secondary_provider, query, latitude, longitude),
        )
        self._log_provider_result(primary_result)
        self._log_provider_result(secondary_result)

        # 3. Merge, dedupe by normalized name, rank by rating
        merged = merge_and_rank(primary_result.restaurants, secondary_result.restaurants)
        logger.info(
            f"External providers returned {len(merged)} unique restaurants "
            f"({primary_result.provider}: {len(primary_result.restaurants)}, "
            f"{secondary_result.provider}: {len(secondary_result.restaurants)})"
        )

        # 4. Persist, best-effort
        if merged:
            await self._run_blocking(self.store.upsert_all, merged)

        return merged

    async def get_by_id(self, restaurant_id: str) -> Optional[RestaurantRecord]:
        """Look up a single restaurant by its id."""
        result = await self._run_blocking(self.store.find_by_id, restaurant_id)
        if result is not None:
            logger.info(f"Found restaurant: '{result.name}' ({restaurant_id})")
        else:
            logger.warning(f"Restaurant not found: {restaurant_id}")
        return result

    async def get_trending(self, limit: int = DEFAULT_TRENDING_LIMIT) -> List[RestaurantRecord]:
        """Return the top `limit` restaurants ordered by rating."""
        results = await self._run_blocking(self.store.get_trending, limit)
        logger.info(f"Retrieved {len(results)} trending restaurants")
        return results

    def close(self) -> None:
        self._provider_executor.shutdown(wait=True)
        self._executor.shutdown(wait=True)

    @staticmethod
    def _log_provider_result(result: ProviderSearchResult) -> None:
        if result.skipped:
            logger.warning(f"{result.provider} skipped (not configured)")
        elif result.error:
            logger.warning(f"{result.provider} unavailable: {result.error}")
