"""
Clients used by the Booking Service to talk to the Event Service ledger.

All variants share one contract: they never raise to the caller. A missing
event, a declined reservation and an unreachable Event Service all come back
as the same negative result (``None`` / ``False``), and the caller treats it
as authoritative.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from ..middleware.logging import NO_REQUEST_ID, REQUEST_ID_HEADER, request_id_var
from ..schemas.event import EventSummary
from ..utils.circuit_breaker import CircuitBreaker, CircuitState
from ..utils.exceptions import UpstreamUnavailableError

logger = logging.getLogger(__name__)

SERVICE_NAME = "event-service"


class EventServiceClient(ABC):
    """Capabilities the Booking Service needs from the inventory ledger."""

    @abstractmethod
    async def get_event(self, event_id: int) -> Optional[EventSummary]:
        """Return the event summary, or None when it cannot be obtained."""

    @abstractmethod
    async def reserve_seats(self, event_id: int, number_of_seats: int, reference: Optional[str] = None) -> bool:
        """Reserve seats; False means no reservation was made."""

    @abstractmethod
    async def release_seats(self, event_id: int, number_of_seats: int, reference: Optional[str] = None) -> bool:
        """Release seats; returns whether the ledger acknowledged the release."""

    async def aclose(self) -> None:
        """Release transport resources."""


class LiveEventServiceClient(EventServiceClient):
    """HTTP client for the Event Service with a bounded timeout."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        breaker: Optional[CircuitBreaker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.breaker = breaker
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def get_event(self, event_id: int) -> Optional[EventSummary]:
        try:
            response = await self._request("GET", f"/events/{event_id}")
        except UpstreamUnavailableError as e:
            logger.warning(f"Event Service unreachable for get_event id={event_id}. Returning None. ({e.message})")
            return None

        if response.status_code == 404:
            return None
        if response.is_error:
            logger.warning(f"Unexpected status {response.status_code} for get_event id={event_id}")
            return None
        try:
            return EventSummary.model_validate(response.json())
        except ValueError as e:
            logger.warning(f"Malformed event payload for get_event id={event_id}: {e}")
            return None

    async def reserve_seats(self, event_id: int, number_of_seats: int, reference: Optional[str] = None) -> bool:
        params = {"numberOfSeats": number_of_seats}
        if reference is not None:
            params["reference"] = reference

        try:
            response = await self._request("POST", f"/events/{event_id}/reserve", params=params)
        except UpstreamUnavailableError as e:
            logger.warning(f"Event Service unreachable for reserve_seats eventId={event_id}. Returning False. ({e.message})")
            return False

        if response.is_error:
            logger.warning(f"Reservation refused for eventId={event_id} with status {response.status_code}")
            return False
        try:
            return response.json() is True
        except ValueError:
            logger.warning(f"Malformed reservation answer for eventId={event_id}")
            return False

    async def release_seats(self, event_id: int, number_of_seats: int, reference: Optional[str] = None) -> bool:
        params = {"numberOfSeats": number_of_seats}
        if reference is not None:
            params["reference"] = reference

        try:
            response = await self._request("POST", f"/events/{event_id}/release", params=params)
        except UpstreamUnavailableError as e:
            logger.warning(f"Event Service unreachable for release_seats eventId={event_id}. ({e.message})")
            return False

        if response.is_error:
            logger.warning(f"Release refused for eventId={event_id} with status {response.status_code}")
            return False
        return True

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        Send one request; transport failures and 5xx raise UpstreamUnavailableError.

        Outcomes are reported to the circuit breaker. 4xx answers are the
        ledger speaking and count as successes.
        """
        # Carry the caller's request id over to the Event Service logs
        request_id = request_id_var.get()
        if request_id != NO_REQUEST_ID:
            kwargs.setdefault("headers", {})[REQUEST_ID_HEADER] = request_id

        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            await self._record_failure()
            raise UpstreamUnavailableError(SERVICE_NAME, f"timeout after {self.timeout}s") from e
        except httpx.TransportError as e:
            await self._record_failure()
            raise UpstreamUnavailableError(SERVICE_NAME, f"{type(e).__name__}: {e}") from e

        if response.status_code >= 500:
            await self._record_failure()
            raise UpstreamUnavailableError(
                SERVICE_NAME, f"server error {response.status_code}", status_code=response.status_code
            )

        if self.breaker is not None:
            await self.breaker.record_success()
        return response

    async def _record_failure(self) -> None:
        if self.breaker is not None:
            await self.breaker.record_failure()


class FallbackEventServiceClient(EventServiceClient):
    """Degraded client returning safe defaults without any network call."""

    async def get_event(self, event_id: int) -> Optional[EventSummary]:
        logger.error(f"FALLBACK: cannot fetch event id={event_id}. Event Service unavailable.")
        return None

    async def reserve_seats(self, event_id: int, number_of_seats: int, reference: Optional[str] = None) -> bool:
        # Never confirm a reservation the ledger has not granted
        logger.error(
            f"FALLBACK: cannot reserve {number_of_seats} seats for event id={event_id}. "
            f"Event Service unavailable."
        )
        return False

    async def release_seats(self, event_id: int, number_of_seats: int, reference: Optional[str] = None) -> bool:
        logger.error(
            f"FALLBACK: cannot release {number_of_seats} seats for event id={event_id} "
            f"(reference={reference}). Event Service unavailable, reconciliation required."
        )
        return False


class CircuitBreakingEventServiceClient(EventServiceClient):
    """Routes each call to the live client or the fallback according to the breaker."""

    def __init__(
        self,
        live: LiveEventServiceClient,
        breaker: CircuitBreaker,
        fallback: Optional[EventServiceClient] = None,
    ):
        self.live = live
        self.breaker = breaker
        self.fallback = fallback or FallbackEventServiceClient()
        self.live.breaker = breaker

    @property
    def state(self) -> CircuitState:
        return self.breaker.state

    async def _select(self) -> EventServiceClient:
        if await self.breaker.allow_request():
            return self.live
        return self.fallback

    async def get_event(self, event_id: int) -> Optional[EventSummary]:
        client = await self._select()
        return await client.get_event(event_id)

    async def reserve_seats(self, event_id: int, number_of_seats: int, reference: Optional[str] = None) -> bool:
        client = await self._select()
        return await client.reserve_seats(event_id, number_of_seats, reference)

    async def release_seats(self, event_id: int, number_of_seats: int, reference: Optional[str] = None) -> bool:
        client = await self._select()
        return await client.release_seats(event_id, number_of_seats, reference)

    async def aclose(self) -> None:
        await self.live.aclose()
