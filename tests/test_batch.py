"""Tests for the concurrent batch runner and the async rate limiter."""
from __future__ import annotations

import asyncio
import json
import time

import httpx

from caller_pop.client import LookupClient
from caller_pop.config import LookupSettings
from caller_pop.ingestion import LookupRequest, export_outcomes
from caller_pop.models import OutcomeKind
from caller_pop.orchestrator import BatchLookupService
from caller_pop.rate_limit import RateLimiter

SETTINGS = LookupSettings(endpoint_url="https://crm.example.com/callers", credential="secret")


def _directory_transport() -> httpx.MockTransport:
    directory = {
        "+17145551212": {"full_name": "Ada Lovelace", "email": "ada@example.com"},
        "+17145550000": {"full_name": "Grace Hopper"},
    }

    async def _handle(request: httpx.Request) -> httpx.Response:
        phone = request.url.params["phone"]
        # Answer the first number slowest so completion order differs from input order.
        await asyncio.sleep(0.05 if phone == "+17145551212" else 0.0)
        if phone == "+17145559999":
            return httpx.Response(502, text="bad gateway")
        return httpx.Response(200, text=json.dumps(directory.get(phone)))

    return httpx.MockTransport(_handle)


def test_batch_preserves_input_order_and_isolates_failures(tmp_path) -> None:
    client = LookupClient(SETTINGS, transport=_directory_transport())
    service = BatchLookupService(SETTINGS, client=client, max_concurrency=4)
    requests = [
        LookupRequest(phone="714-555-1212", request_id="1"),
        LookupRequest(phone="7145550000", request_id="2"),
        LookupRequest(phone="", request_id="3"),
        LookupRequest(phone="714 555 9999", request_id="4"),
        LookupRequest(phone="7145554321", request_id="5"),
    ]

    results = service.run_sync(requests)

    assert [result.request.request_id for result in results] == ["1", "2", "3", "4", "5"]
    assert [result.outcome.kind for result in results] == [
        OutcomeKind.FOUND,
        OutcomeKind.FOUND,
        OutcomeKind.VALIDATION_ERROR,
        OutcomeKind.UPSTREAM_FAILURE,
        OutcomeKind.NOT_FOUND,
    ]
    assert results[0].outcome.record.name == "Ada Lovelace"
    assert results[1].outcome.record.name == "Grace Hopper"

    output_path = tmp_path / "outcomes.csv"
    export_outcomes(results, output_path)
    output_contents = output_path.read_text(encoding="utf-8")
    assert "Ada Lovelace" in output_contents
    assert "upstream_failure" in output_contents


def test_batch_demo_mode_needs_no_configuration() -> None:
    service = BatchLookupService(LookupSettings(), demo=True)

    results = service.run_sync([LookupRequest(phone="7145551212")])

    assert results[0].outcome.kind is OutcomeKind.FOUND
    assert results[0].outcome.demo is True


def test_batch_with_no_requests_returns_empty_list() -> None:
    assert BatchLookupService(SETTINGS).run_sync([]) == []


def test_rate_limiter_spaces_out_calls() -> None:
    limiter = RateLimiter(calls_per_minute=1200)

    async def _acquire_three() -> float:
        start = time.monotonic()
        for _ in range(3):
            await limiter.acquire()
        return time.monotonic() - start

    elapsed = asyncio.run(_acquire_three())

    assert limiter.interval == 0.05
    assert elapsed >= 0.09


def test_rate_limiter_disabled_without_limit() -> None:
    limiter = RateLimiter(None)

    asyncio.run(limiter.acquire())

    assert limiter.interval == 0.0
