"""HTTP client for the configured caller lookup endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .coercion import SchemaProfile, coerce
from .config import QUERY_PROTOCOL, LookupSettings
from .errors import ConfigurationError, UpstreamFailure, ValidationError
from .factory import resolve_profile
from .models import CallerRecord, NameQuery
from .phone import digits_only

LOGGER = logging.getLogger(__name__)


def payloads_from_json(data: Any) -> List[Any]:
    """Normalise a decoded response body into zero or more raw caller payloads."""

    if data is None:
        return []
    if isinstance(data, list):
        return [item for item in data if item is not None]
    return [data]


class LookupClient:
    """Looks a canonical phone up against the upstream API and coerces the result.

    Parameters
    ----------
    settings:
        Endpoint, credential and protocol for this deployment.
    profile:
        Schema profile used for coercion. Resolved from ``settings`` when omitted.
    transport:
        Optional :mod:`httpx` transport, mainly for tests.
    """

    def __init__(
        self,
        settings: LookupSettings,
        *,
        profile: Optional[SchemaProfile] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.profile = profile or resolve_profile(settings)
        self._transport = transport

    async def lookup(self, phone: str, name: Optional[NameQuery] = None) -> List[CallerRecord]:
        """Return every caller record matching ``phone``; an empty list means not found."""

        name = name or NameQuery()
        self.check_preconditions(phone, name)
        payloads = await self.fetch_payloads(phone, name)
        LOGGER.debug("Upstream returned %s payload(s) for %s", len(payloads), phone)
        return [
            coerce(payload, phone, profile=self.profile, default_country=self.settings.default_country)
            for payload in payloads
        ]

    def check_preconditions(self, phone: str, name: NameQuery) -> None:
        """Raise before any I/O when configuration or input is insufficient."""

        if not self.settings.endpoint_url:
            raise ConfigurationError("Missing API_URL", setting="API_URL")
        if not self.settings.credential:
            setting = self.settings.credential_setting
            raise ConfigurationError(f"Missing {setting}", setting=setting)
        if not phone:
            raise ValidationError("No valid phone provided", field="phone")
        if self.settings.require_name and not name.is_complete:
            raise ValidationError("First and last name required", field=name.missing_field() or "first_name")

    async def fetch_payloads(self, phone: str, name: NameQuery) -> List[Any]:
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(self.settings.timeout_seconds),
        ) as client:
            try:
                request = self.build_request(client, phone, name)
            except httpx.InvalidURL as exc:
                raise ConfigurationError(f"Invalid API_URL: {exc}", setting="API_URL") from exc
            LOGGER.info("Looking up %s via %s %s", phone, request.method, self.settings.endpoint_url)
            try:
                response = await client.send(request)
            except httpx.HTTPError as exc:
                raise UpstreamFailure(f"Upstream request failed: {exc}") from exc
        return self._handle_response(response)

    def build_request(self, client: httpx.AsyncClient, phone: str, name: NameQuery) -> httpx.Request:
        headers = {"accept": "application/json"}
        if self.settings.protocol == QUERY_PROTOCOL:
            headers["authorization"] = f"Bearer {self.settings.credential}"
            params: Dict[str, str] = {self.settings.phone_param: phone}
            if name.first_name:
                params["first_name"] = name.first_name
            if name.last_name:
                params["last_name"] = name.last_name
            return client.build_request("GET", self.settings.endpoint_url, params=params, headers=headers)

        headers[self.settings.token_header] = self.settings.credential or ""
        body: Dict[str, str] = {"phone_number": digits_only(phone)}
        if name.first_name:
            body["first_name"] = name.first_name
        if name.last_name:
            body["last_name"] = name.last_name
        return client.build_request("POST", self.settings.endpoint_url, json=body, headers=headers)

    def _handle_response(self, response: httpx.Response) -> List[Any]:
        if response.is_success:
            try:
                data = response.json()
            except ValueError as exc:
                raise UpstreamFailure(
                    f"Malformed upstream response ({response.status_code}): body is not JSON",
                    status_code=response.status_code,
                    status_text=response.reason_phrase,
                    body_excerpt=response.text,
                ) from exc
            return payloads_from_json(data)

        if self.settings.require_name and response.status_code in self.settings.not_found_statuses:
            LOGGER.info("Upstream reported no match (%s)", response.status_code)
            return []

        raise UpstreamFailure.from_status(response.status_code, response.reason_phrase, response.text)


async def lookup(
    phone: str,
    settings: LookupSettings,
    name: Optional[NameQuery] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> List[CallerRecord]:
    """Convenience wrapper around :meth:`LookupClient.lookup`."""

    return await LookupClient(settings, transport=transport).lookup(phone, name)


__all__ = ["LookupClient", "lookup", "payloads_from_json"]
