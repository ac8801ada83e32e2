"""Two-stage contribution planner: class budgets first, then assets.

Stage A measures, for every goal class, how much value it lacks relative to
its target on the post-contribution total::

    deficit[c] = max(0, goal[c] / 100 * (V + A) - value[c])
    scale      = min(1, A / sum(deficit))

so the amount is never spent beyond what brings every class to target.

Stage B splits each class budget ``deficit[c] * scale`` across the class
candidates proportionally to their individual gaps. An overweight class gets
nothing even if it holds an attractive watchlist entry.
"""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from ..config import PlannerConfig
from ..metrics import class_value, goals_by_class, percentage_of
from ..models import Asset, ContributionSuggestion, InvestmentGoal
from .base import ContributionPlanner

logger = logging.getLogger(__name__)


class TwoStagePlanner(ContributionPlanner):
    """Distribute cash to underweight classes, then to assets within each class."""

    def __init__(
        self,
        config: Optional[PlannerConfig] = None,
        suggest_new_classes: bool = False,
    ) -> None:
        """Initialize the planner.

        Args:
            config: Thresholds; defaults to PlannerConfig().
            suggest_new_classes: Emit a placeholder suggestion, named after the
                class, for funded classes that have no candidate asset yet.
        """
        super().__init__(config)
        self.suggest_new_classes = suggest_new_classes

    def plan(
        self,
        assets: Sequence[Asset],
        investment_goals: Sequence[InvestmentGoal],
        amount: Decimal,
    ) -> list[ContributionSuggestion]:
        if amount <= 0:
            return []

        total_current, total_post = self._totals(assets, amount)
        candidates = self._collect_candidates(assets, investment_goals, total_post)

        # Stage A: class deficits against the post-contribution total
        deficits: dict[str, Decimal] = {}
        for asset_class, pct in goals_by_class(investment_goals).items():
            target = pct / 100 * total_post
            deficit = target - class_value(assets, asset_class)
            deficits[asset_class] = deficit if deficit > self.config.ZERO_TOLERANCE else Decimal("0")

        total_deficit = sum(deficits.values(), start=Decimal("0"))
        if total_deficit <= 0:
            logger.debug("No class is below target; nothing to suggest")
            return []

        scale = min(Decimal("1"), Decimal(amount) / total_deficit)
        logger.debug("Macro deficit %s, scale %s", total_deficit, scale)

        # Stage B: split each class budget by asset gap
        suggestions: list[ContributionSuggestion] = []
        for asset_class, deficit in deficits.items():
            budget = deficit * scale
            if budget <= self.config.MIN_CLASS_BUDGET:
                continue

            members = [c for c in candidates if c.asset.asset_class == asset_class]
            gap_sum = sum((c.gap for c in members), start=Decimal("0"))
            logger.debug("Class %s budget %s across %d candidates", asset_class, budget, len(members))

            if gap_sum <= 0:
                if self.suggest_new_classes and not members:
                    suggestions.append(
                        self._placeholder(asset_class, budget, investment_goals, total_post)
                    )
                continue

            for candidate in members:
                if candidate.gap <= 0:
                    continue
                allocation = budget * candidate.gap / gap_sum
                if allocation <= self.config.MIN_ALLOCATION:
                    continue
                suggestions.append(
                    self._suggestion(candidate, allocation, total_current, total_post)
                )

        return self._sorted(suggestions)

    def _placeholder(
        self,
        asset_class: str,
        budget: Decimal,
        investment_goals: Sequence[InvestmentGoal],
        total_post: Decimal,
    ) -> ContributionSuggestion:
        """Suggestion for a class with nothing to buy yet, priced at 1 per unit."""
        return ContributionSuggestion(
            asset_id=None,
            ticker=asset_class,
            asset_class=asset_class,
            suggested_value=budget,
            suggested_qty=budget,
            current_percentage=Decimal("0"),
            after_percentage=percentage_of(budget, total_post),
            ideal_percentage=goals_by_class(investment_goals)[asset_class],
            is_new_class=True,
        )
