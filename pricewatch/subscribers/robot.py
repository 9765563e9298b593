"""Threshold-driven trading robot subscriber."""

from collections.abc import Callable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

import structlog

from ..models import NotificationEvent, normalize_price, normalize_topic

logger = structlog.get_logger(__name__)


class Decision(Enum):
    """Robot reaction to a price."""
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class TradingRobot:
    """
    Chooses BUY, SELL or HOLD from private per-topic thresholds.

    BUY when the price is at or below the topic's buy level, otherwise SELL
    when it is at or above the sell level, otherwise HOLD. Topics without
    thresholds always HOLD. The robot keeps no state between events.
    """

    def __init__(
        self,
        name: str,
        buy_thresholds: Optional[Mapping[str, Any]] = None,
        sell_thresholds: Optional[Mapping[str, Any]] = None,
        on_decision: Optional[Callable[[NotificationEvent, Decision], None]] = None
    ):
        self.name = name
        self._buy = self._normalize_thresholds(buy_thresholds, "buy_threshold")
        self._sell = self._normalize_thresholds(sell_thresholds, "sell_threshold")
        self._on_decision = on_decision
        self.logger = logger.bind(subscriber=name)

    @staticmethod
    def _normalize_thresholds(thresholds: Optional[Mapping[str, Any]], field: str) -> dict[str, Decimal]:
        # Private copy keyed like engine topics
        return {
            normalize_topic(topic): normalize_price(level, field=field)
            for topic, level in (thresholds or {}).items()
        }

    def decide(self, event: NotificationEvent) -> Decision:
        buy_level = self._buy.get(event.topic)
        if buy_level is not None and event.price <= buy_level:
            return Decision.BUY

        sell_level = self._sell.get(event.topic)
        if sell_level is not None and event.price >= sell_level:
            return Decision.SELL

        return Decision.HOLD

    def on_price_changed(self, event: NotificationEvent) -> None:
        decision = self.decide(event)

        if self._on_decision is not None:
            self._on_decision(event, decision)
        else:
            self.logger.info(
                "Robot decision",
                decision=decision.value,
                topic=event.topic,
                price=str(event.price)
            )

    def __repr__(self) -> str:
        return f"TradingRobot(name={self.name!r})"
