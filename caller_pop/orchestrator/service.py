"""Batch lookup service that resolves spreadsheet rows through the caller pipeline."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional

from ..client import LookupClient
from ..config import LookupSettings
from ..errors import UpstreamFailure
from ..ingestion.models import BatchResult, LookupRequest
from ..models import LookupOutcome, OutcomeKind
from ..pipeline import resolve_caller
from ..rate_limit import RateLimiter

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 5


class BatchLookupService:
    """Runs :func:`resolve_caller` for each request with bounded concurrency."""

    def __init__(
        self,
        settings: LookupSettings,
        *,
        client: Optional[LookupClient] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        rate_limiter: Optional[RateLimiter] = None,
        demo: bool = False,
        raise_on_error: bool = False,
    ) -> None:
        self._settings = settings
        self._client = client
        self._max_concurrency = max(1, int(max_concurrency))
        self._rate_limiter = rate_limiter or RateLimiter(None)
        self._demo = demo
        self._raise_on_error = raise_on_error

    async def run(self, requests: Iterable[LookupRequest]) -> List[BatchResult]:
        """Resolve every request, returning results in input order."""

        request_list = list(requests)
        if not request_list:
            return []

        semaphore = asyncio.Semaphore(min(self._max_concurrency, len(request_list)))

        async def _guarded(request: LookupRequest) -> BatchResult:
            async with semaphore:
                return await self._execute(request)

        return list(await asyncio.gather(*(_guarded(request) for request in request_list)))

    def run_sync(self, requests: Iterable[LookupRequest]) -> List[BatchResult]:
        return asyncio.run(self.run(requests))

    async def _execute(self, request: LookupRequest) -> BatchResult:
        if not self._demo:
            await self._rate_limiter.acquire()
        try:
            LOGGER.debug("Resolving caller for request %s", request.request_id or request.phone)
            outcome = await resolve_caller(
                request.phone,
                self._settings,
                first_name=request.first_name,
                last_name=request.last_name,
                demo=self._demo,
                client=self._client,
            )
        except Exception as exc:  # pragma: no cover - unexpected failures only
            LOGGER.exception("Lookup crashed for request %s", request.request_id or request.phone)
            if self._raise_on_error:
                raise
            outcome = LookupOutcome(
                kind=OutcomeKind.UPSTREAM_FAILURE,
                raw_phone=request.phone,
                message=str(exc),
                error=UpstreamFailure(str(exc)),
            )
        return BatchResult(request=request, outcome=outcome)
