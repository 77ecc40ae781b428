"""Clients for calling other Event Platform services."""

from .event_service_client import (
    EventServiceClient,
    LiveEventServiceClient,
    FallbackEventServiceClient,
    CircuitBreakingEventServiceClient,
)

__all__ = [
    "EventServiceClient",
    "LiveEventServiceClient",
    "FallbackEventServiceClient",
    "CircuitBreakingEventServiceClient",
]
