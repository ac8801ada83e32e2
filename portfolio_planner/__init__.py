"""
Portfolio Planner - Class-target rebalancing and contribution planning for a personal portfolio.

Exports:
    Asset: Dataclass representing a holding or watchlist entry
    InvestmentGoal: Dataclass representing a class target percentage
    AssetMetric, ClassAllocation, PortfolioMetrics: Derived weight records
    ContributionSuggestion: Dataclass representing a proposed purchase
    Dividend, DividendRanking: Ledger entry and per-ticker ranking
    Portfolio: Validated store of assets, goals and dividends
    calculate_portfolio_metrics: Current, ideal and gap weights per asset
    plan_contribution: Buy-only allocation of new cash
    calculate_adherence_score: 0-100 closeness to class targets
    calculate_portfolio_deficit: Cash needed to reach targets by dilution
    TwoStagePlanner: Class budgets, then asset gaps (default)
    GreedyGapPlanner: Largest asset gaps first
    TrackingErrorPlanner: Minimize deviation via MILP
    rank_dividends, monthly_totals, yearly_totals: Dividend ledger summaries
"""

from .config import AssetClass, DividendType, PlannerConfig, default_investment_goals
from .dividends import (
    filter_dividends,
    monthly_totals,
    period_total,
    rank_dividends,
    yearly_totals,
)
from .metrics import calculate_portfolio_metrics
from .models import (
    Asset,
    AssetMetric,
    ClassAllocation,
    ContributionSuggestion,
    Dividend,
    DividendRanking,
    InvestmentGoal,
    PortfolioMetrics,
)
from .planners import (
    ContributionPlanner,
    GreedyGapPlanner,
    TrackingErrorPlanner,
    TwoStagePlanner,
)
from .portfolio import Portfolio, plan_contribution
from .scoring import calculate_adherence_score, calculate_portfolio_deficit

__all__ = [
    "Asset",
    "AssetClass",
    "AssetMetric",
    "ClassAllocation",
    "ContributionPlanner",
    "ContributionSuggestion",
    "Dividend",
    "DividendRanking",
    "DividendType",
    "GreedyGapPlanner",
    "InvestmentGoal",
    "PlannerConfig",
    "Portfolio",
    "PortfolioMetrics",
    "TrackingErrorPlanner",
    "TwoStagePlanner",
    "calculate_adherence_score",
    "calculate_portfolio_deficit",
    "calculate_portfolio_metrics",
    "default_investment_goals",
    "filter_dividends",
    "monthly_totals",
    "period_total",
    "plan_contribution",
    "rank_dividends",
    "yearly_totals",
]
