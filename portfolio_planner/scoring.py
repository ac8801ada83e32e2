"""Scalar diagnostics of how far a portfolio is from its class targets."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from .metrics import class_value, percentage_of, total_value
from .models import Asset, InvestmentGoal


def calculate_adherence_score(
    assets: Sequence[Asset], investment_goals: Sequence[InvestmentGoal]
) -> int:
    """Score 0-100 of how closely class weights match their targets.

    Total deviation is the sum of absolute differences between current and
    target class percentages, plus the full weight of held value in classes
    without a positive target. A complete swap between two classes deviates by
    200, so the score is ``100 - deviation / 2`` floored at 0.
    """
    total = total_value(assets)
    if total == 0:
        return 0

    valid_goals = [g for g in investment_goals if g.percentage > 0]
    deviation = Decimal("0")

    for goal in valid_goals:
        current_pct = percentage_of(class_value(assets, goal.asset_class), total)
        deviation += abs(current_pct - Decimal(goal.percentage))

    tracked = {g.asset_class for g in valid_goals}
    untracked_value = total_value(
        a for a in assets if a.asset_class not in tracked and a.quantity > 0
    )
    if untracked_value > 0:
        deviation += percentage_of(untracked_value, total)

    score = max(Decimal("0"), Decimal("100") - deviation / 2)
    return int(score.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_portfolio_deficit(
    assets: Sequence[Asset], investment_goals: Sequence[InvestmentGoal]
) -> Decimal:
    """Cash needed to dilute every class down to its target without selling.

    For each class with a positive target, the portfolio total at which its
    current value would sit exactly on target is ``value / (target / 100)``.
    The largest such total is binding; the deficit is how far the current
    total is below it.
    """
    total = total_value(assets)
    if total == 0:
        return Decimal("0")

    max_total = total
    for goal in investment_goals:
        if goal.percentage <= 0:
            continue
        theoretical = class_value(assets, goal.asset_class) / (Decimal(goal.percentage) / 100)
        if theoretical > max_total:
            max_total = theoretical

    return max_total - total
