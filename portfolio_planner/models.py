"""Data models for the portfolio planner."""

import datetime
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Asset:
    """A holding the investor owns, or a watchlist entry when quantity is zero."""

    id: str
    asset_class: str
    ticker: str
    quantity: Decimal
    current_price: Decimal
    average_price: Decimal = Decimal("0")
    score: Decimal = Decimal("0")
    total_dividends: Decimal = Decimal("0")
    note: str = ""

    @property
    def market_value(self) -> Decimal:
        return Decimal(self.quantity) * self.current_price

    @property
    def cost_basis(self) -> Decimal:
        return Decimal(self.quantity) * self.average_price

    @property
    def unrealized_gain(self) -> Decimal:
        return self.market_value - self.cost_basis

    @property
    def is_watchlist(self) -> bool:
        return self.quantity == 0


@dataclass(frozen=True)
class Dividend:
    """A distribution received from one asset.

    ``type`` holds a ``DividendType`` value; ticker and class are copied from
    the asset when the dividend is recorded.
    """

    id: str
    date: datetime.date
    asset_id: str
    ticker: str
    asset_class: str
    type: str
    value_per_share: Decimal
    total_value: Decimal


@dataclass(frozen=True)
class DividendRanking:
    ticker: str
    asset_class: str
    total: Decimal
    yield_percentage: Decimal


@dataclass(frozen=True)
class InvestmentGoal:
    """Target share (0-100) of total portfolio value for one asset class."""

    asset_class: str
    percentage: Decimal


@dataclass(frozen=True)
class AssetMetric:
    """An asset together with its weights relative to the whole portfolio."""

    asset: Asset
    total_value: Decimal
    current_percentage: Decimal
    ideal_percentage: Decimal
    gap: Decimal

    @property
    def id(self) -> str:
        return self.asset.id

    @property
    def ticker(self) -> str:
        return self.asset.ticker

    @property
    def asset_class(self) -> str:
        return self.asset.asset_class


@dataclass(frozen=True)
class ClassAllocation:
    """Current share (value) of one goal class next to its target (meta)."""

    name: str
    value: Decimal
    meta: Decimal


@dataclass(frozen=True)
class PortfolioMetrics:
    total_value: Decimal
    metrics: list[AssetMetric]
    class_allocation: list[ClassAllocation]


@dataclass(frozen=True)
class ContributionSuggestion:
    """A proposed purchase for one asset."""

    asset_id: Optional[str]
    ticker: str
    asset_class: str
    suggested_value: Decimal
    suggested_qty: Decimal
    current_percentage: Decimal
    after_percentage: Decimal
    ideal_percentage: Decimal
    is_new_class: bool

    def __str__(self) -> str:
        return (
            f"BUY {self.suggested_qty:.4f} {self.ticker} [{self.asset_class}] "
            f"(${self.suggested_value:.2f}, {self.current_percentage:.1f}% -> "
            f"{self.after_percentage:.1f}%, ideal: {self.ideal_percentage:.1f}%)"
        )
