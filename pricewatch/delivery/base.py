"""Subscriber capability and delivery result types."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

from ..models import NotificationEvent


@runtime_checkable
class Subscriber(Protocol):
    """
    Anything that can receive a price notification.

    Implementations expose a stable display name and handle one event per
    call. Raising from on_price_changed marks that delivery as failed; it
    never affects other subscribers of the same update.
    """

    name: str

    def on_price_changed(self, event: NotificationEvent) -> None:
        ...


class DeliveryStatus(Enum):
    """Outcome of a single subscriber notification."""
    SUCCESS = "success"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class DeliveryResult:
    """Result of one notification attempt."""
    subscriber: str
    status: DeliveryStatus
    message: Optional[str] = None
    delivery_time_ms: Optional[int] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.status == DeliveryStatus.SUCCESS


@dataclass
class DispatchReport:
    """Outcome of fanning one price update out to its subscribers."""
    topic: str
    price: Decimal
    results: list[DeliveryResult] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def delivered(self) -> list[str]:
        return [r.subscriber for r in self.results if r.succeeded]

    @property
    def failed(self) -> list[str]:
        return [r.subscriber for r in self.results if not r.succeeded]

    @property
    def all_delivered(self) -> bool:
        return all(r.succeeded for r in self.results)
