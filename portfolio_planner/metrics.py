"""Current and ideal weights for every asset in a portfolio.

The ideal weight of an asset is its class target split across the class
members proportionally to score, where every member weighs at least
``PlannerConfig.SCORE_FLOOR`` so a zero-score holding still gets a share.
"""

from decimal import Decimal
from typing import Iterable, Sequence

from .config import PlannerConfig
from .models import Asset, AssetMetric, ClassAllocation, InvestmentGoal, PortfolioMetrics

CONFIG = PlannerConfig()


def total_value(assets: Iterable[Asset]) -> Decimal:
    return sum((a.market_value for a in assets), start=Decimal("0"))


def class_value(assets: Iterable[Asset], asset_class: str) -> Decimal:
    return total_value(a for a in assets if a.asset_class == asset_class)


def score_weight(asset: Asset) -> Decimal:
    """Score with the floor applied."""
    return max(Decimal(asset.score or 0), CONFIG.SCORE_FLOOR)


def goals_by_class(goals: Iterable[InvestmentGoal]) -> dict[str, Decimal]:
    # Duplicate classes: the last goal wins.
    return {g.asset_class: Decimal(g.percentage) for g in goals}


def percentage_of(value: Decimal, total: Decimal) -> Decimal:
    if total <= 0:
        return Decimal("0")
    return value / total * 100


def ideal_percentages(
    members: Sequence[Asset], goals: dict[str, Decimal]
) -> dict[str, Decimal]:
    """Score-weighted ideal share of total value for each member, keyed by id.

    The weight pool is formed per class from ``members`` only, so callers decide
    who competes for a class target (held assets, or held plus watchlist).
    """
    pools: dict[str, Decimal] = {}
    for a in members:
        pools[a.asset_class] = pools.get(a.asset_class, Decimal("0")) + score_weight(a)

    ideals = {}
    for a in members:
        pool = pools[a.asset_class]
        if pool <= 0:
            ideals[a.id] = Decimal("0")
            continue
        ideals[a.id] = goals.get(a.asset_class, Decimal("0")) * score_weight(a) / pool
    return ideals


def calculate_portfolio_metrics(
    assets: Sequence[Asset], investment_goals: Sequence[InvestmentGoal]
) -> PortfolioMetrics:
    """Compute per-asset weights and per-class allocation.

    Args:
        assets: Every asset, held or watchlisted.
        investment_goals: Target percentage per class.

    Returns:
        PortfolioMetrics with one AssetMetric per asset (input order) and one
        ClassAllocation per goal, sorted by target descending.
    """
    total = total_value(assets)
    goals = goals_by_class(investment_goals)
    ideals = ideal_percentages([a for a in assets if a.quantity > 0], goals)

    metrics: list[AssetMetric] = []
    for a in assets:
        value = a.market_value
        current_pct = percentage_of(value, total)
        ideal_pct = ideals.get(a.id, Decimal("0")) if a.quantity > 0 else Decimal("0")
        metrics.append(
            AssetMetric(
                asset=a,
                total_value=value,
                current_percentage=current_pct,
                ideal_percentage=ideal_pct,
                gap=ideal_pct - current_pct,
            )
        )

    class_allocation = sorted(
        (
            ClassAllocation(
                name=goal.asset_class,
                value=percentage_of(class_value(assets, goal.asset_class), total),
                meta=Decimal(goal.percentage),
            )
            for goal in investment_goals
        ),
        key=lambda c: c.meta,
        reverse=True,
    )

    return PortfolioMetrics(total_value=total, metrics=metrics, class_allocation=class_allocation)
