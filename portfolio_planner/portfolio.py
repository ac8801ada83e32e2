import logging
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Literal, Optional, Sequence

from .config import AssetClass, DividendType, PlannerConfig, default_investment_goals
from .dividends import RankingMetric, rank_dividends
from .metrics import calculate_portfolio_metrics, total_value
from .models import (
    Asset,
    ContributionSuggestion,
    Dividend,
    DividendRanking,
    InvestmentGoal,
    PortfolioMetrics,
)
from .planners import GreedyGapPlanner, TrackingErrorPlanner, TwoStagePlanner
from .scoring import calculate_adherence_score, calculate_portfolio_deficit

logger = logging.getLogger(__name__)

StrategyName = Literal["two_stage", "greedy_gap", "tracking_error"]

STRATEGIES = {
    "two_stage": TwoStagePlanner,
    "greedy_gap": GreedyGapPlanner,
    "tracking_error": TrackingErrorPlanner,
}


def plan_contribution(
    assets: Sequence[Asset],
    investment_goals: Sequence[InvestmentGoal],
    amount: Decimal,
    strategy: StrategyName = "two_stage",
) -> list[ContributionSuggestion]:
    """Suggest purchases for ``amount`` of new cash.

    Args:
        assets: Every asset, held or watchlisted.
        investment_goals: Target percentage per class.
        amount: Cash to invest. Zero or negative yields no suggestions.
        strategy: Planning strategy to use:
            - "two_stage": Class budgets, then asset gaps (default)
            - "greedy_gap": Largest asset gaps first, ignoring class budgets
            - "tracking_error": Minimize deviation from asset targets (L1 norm)

    Returns:
        List of ContributionSuggestion objects, largest first.
    """
    planner_cls = STRATEGIES.get(strategy)
    if planner_cls is None:
        raise ValueError(f"Unknown strategy: {strategy}")

    return planner_cls().plan(assets, investment_goals, amount)


def _require_finite(value: Decimal, label: str) -> None:
    if not Decimal(value).is_finite():
        raise ValueError(f"{label} must be a finite number, got {value}")


class Portfolio:
    """Asset list, class goals and dividend ledger, edited through validated commands.

    Every command replaces the stored tuples, so a snapshot taken before an
    edit is never affected by it.
    """

    def __init__(
        self,
        assets: Iterable[Asset] = (),
        investment_goals: Optional[Iterable[InvestmentGoal]] = None,
        config: Optional[PlannerConfig] = None,
        dividends: Iterable[Dividend] = (),
    ) -> None:
        self.config = config or PlannerConfig()
        self._assets: tuple[Asset, ...] = tuple(assets)
        if investment_goals is None:
            investment_goals = default_investment_goals()
        self._goals: tuple[InvestmentGoal, ...] = tuple(investment_goals)
        self._dividends: tuple[Dividend, ...] = tuple(dividends)

    @property
    def assets(self) -> tuple[Asset, ...]:
        return self._assets

    @property
    def investment_goals(self) -> tuple[InvestmentGoal, ...]:
        return self._goals

    @property
    def dividends(self) -> tuple[Dividend, ...]:
        return self._dividends

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        return next((a for a in self._assets if a.id == asset_id), None)

    def add_asset(self, asset: Asset) -> None:
        if self.get_asset(asset.id) is not None:
            raise ValueError(f"Asset {asset.id} already exists")
        self._validate_asset(asset)
        self._assets = self._assets + (asset,)

    def update_asset(self, asset: Asset) -> None:
        if self.get_asset(asset.id) is None:
            raise ValueError(f"Unknown asset: {asset.id}")
        self._validate_asset(asset)
        self._replace_asset(asset)

    def remove_asset(self, asset_id: str) -> Optional[Asset]:
        removed = self.get_asset(asset_id)
        if removed is not None:
            self._assets = tuple(a for a in self._assets if a.id != asset_id)
        return removed

    def get_dividend(self, dividend_id: str) -> Optional[Dividend]:
        return next((d for d in self._dividends if d.id == dividend_id), None)

    def record_dividend(self, dividend: Dividend) -> None:
        """Append a received distribution and add it to the asset's running total."""
        if self.get_dividend(dividend.id) is not None:
            raise ValueError(f"Dividend {dividend.id} already exists")
        asset = self.get_asset(dividend.asset_id)
        if asset is None:
            raise ValueError(f"Unknown asset: {dividend.asset_id}")
        if dividend.type not in {t.value for t in DividendType}:
            raise ValueError(f"Unknown dividend type: {dividend.type}")
        for value in (dividend.value_per_share, dividend.total_value):
            _require_finite(value, "Dividend value")
            if value < 0:
                raise ValueError(f"Dividend value must be non-negative, got {value}")
        self._dividends = self._dividends + (dividend,)
        self._replace_asset(
            replace(asset, total_dividends=asset.total_dividends + dividend.total_value)
        )

    def remove_dividend(self, dividend_id: str) -> Optional[Dividend]:
        removed = self.get_dividend(dividend_id)
        if removed is None:
            return None
        self._dividends = tuple(d for d in self._dividends if d.id != dividend_id)
        asset = self.get_asset(removed.asset_id)
        if asset is not None:
            self._replace_asset(
                replace(asset, total_dividends=asset.total_dividends - removed.total_value)
            )
        return removed

    def set_investment_goals(self, goals: Iterable[InvestmentGoal]) -> None:
        goals = list(goals)
        seen: set[str] = set()
        for goal in goals:
            _require_finite(goal.percentage, f"Goal for {goal.asset_class}")
            if goal.percentage < 0 or goal.percentage > 100:
                raise ValueError(
                    f"Goal for {goal.asset_class} must be between 0 and 100, got {goal.percentage}"
                )
            if goal.asset_class in seen:
                raise ValueError(f"Duplicate goal for {goal.asset_class}")
            seen.add(goal.asset_class)

        total = sum((Decimal(g.percentage) for g in goals), start=Decimal("0"))
        if abs(total - 100) >= self.config.GOAL_SUM_TOLERANCE:
            raise ValueError(
                f"Goals must sum to 100%, got {total} (off by {100 - total})"
            )

        self._goals = tuple(goals)

    def complete_goals(self) -> None:
        """Add a 0% goal for every well-known class that has none."""
        known = {g.asset_class for g in self._goals}
        missing = [
            InvestmentGoal(asset_class=c.value, percentage=Decimal("0"))
            for c in AssetClass
            if c.value not in known
        ]
        if missing:
            logger.debug("Adding empty goals for %s", [g.asset_class for g in missing])
            self._goals = self._goals + tuple(missing)

    def total_value(self) -> Decimal:
        return total_value(self._assets)

    def metrics(self) -> PortfolioMetrics:
        return calculate_portfolio_metrics(self._assets, self._goals)

    def plan_contribution(
        self, amount: Decimal, strategy: StrategyName = "two_stage"
    ) -> list[ContributionSuggestion]:
        return plan_contribution(self._assets, self._goals, amount, strategy)

    def adherence_score(self) -> int:
        return calculate_adherence_score(self._assets, self._goals)

    def deficit(self) -> Decimal:
        return calculate_portfolio_deficit(self._assets, self._goals)

    def dividend_ranking(
        self,
        year: int,
        month: int,
        metric: RankingMetric = "yield",
        trailing_year: bool = False,
        limit: int = 10,
    ) -> list[DividendRanking]:
        return rank_dividends(
            self._dividends, self._assets, year, month, metric, trailing_year, limit
        )

    def _replace_asset(self, asset: Asset) -> None:
        self._assets = tuple(asset if a.id == asset.id else a for a in self._assets)

    def _validate_asset(self, asset: Asset) -> None:
        for value in (
            asset.quantity, asset.current_price, asset.average_price, asset.score, asset.total_dividends
        ):
            _require_finite(value, f"Values for {asset.ticker}")
        if asset.quantity < 0:
            raise ValueError(f"Quantity for {asset.ticker} must be non-negative, got {asset.quantity}")
        if asset.current_price < 0 or asset.average_price < 0:
            raise ValueError(f"Prices for {asset.ticker} must be non-negative")
        if asset.score < 0 or asset.score > self.config.MAX_SCORE:
            raise ValueError(
                f"Score for {asset.ticker} must be between 0 and {self.config.MAX_SCORE}, got {asset.score}"
            )

    @classmethod
    def from_file(cls, path: str) -> "Portfolio":
        """Create a Portfolio from a saved application state document.

        Args:
            path: Path to the JSON state file.

        Returns:
            Portfolio holding the document's assets, investment goals and dividends.
        """
        from .loaders import load_state

        return load_state(path)

    def __repr__(self) -> str:
        return (
            f"Portfolio(assets={[a.ticker for a in self._assets]}, "
            f"total_value={self.total_value()}, "
            f"investment_goals={[(g.asset_class, g.percentage) for g in self._goals]})"
        )
