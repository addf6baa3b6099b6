"""Market model — current and base price of every tradable resource."""

from __future__ import annotations

from dataclasses import dataclass, field

from idleserver.models.resources import Resource


@dataclass
class Market:
    """Price board of the single in-process market.

    Attributes:
        base_prices: Reference price per resource. Never written after
            construction; every repricing starts from these values.
        prices: Current price per resource, re-rolled around the base price.
        last_price_update: Timestamp of the last repricing.
    """

    base_prices: dict[Resource, float]
    prices: dict[Resource, float] = field(default_factory=dict)
    last_price_update: float = 0.0

    def __post_init__(self) -> None:
        self.base_prices = dict(self.base_prices)
        if not self.prices:
            self.prices = dict(self.base_prices)
