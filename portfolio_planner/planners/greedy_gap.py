"""Single-stage greedy planner.

Candidates are ranked by how much value they lack and filled one at a time
until the cash runs out. Class priorities are not enforced: one asset with a
large individual gap can absorb the whole amount even when its class is
overweight. Kept for comparison with the two-stage planner.
"""

import logging
from decimal import Decimal
from typing import Sequence

from ..models import Asset, ContributionSuggestion, InvestmentGoal
from .base import ContributionPlanner

logger = logging.getLogger(__name__)


class GreedyGapPlanner(ContributionPlanner):
    """Fill the largest asset gaps first."""

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
        ranked = sorted(
            (c for c in candidates if c.gap > self.config.ZERO_TOLERANCE),
            key=lambda c: c.gap,
            reverse=True,
        )

        remaining = Decimal(amount)
        suggestions: list[ContributionSuggestion] = []
        for candidate in ranked:
            if remaining <= self.config.ZERO_TOLERANCE:
                break
            allocation = min(candidate.gap, remaining)
            if allocation <= self.config.MIN_ALLOCATION:
                continue
            remaining -= allocation
            suggestions.append(
                self._suggestion(candidate, allocation, total_current, total_post)
            )

        logger.debug("Greedy fill left %s unallocated", remaining)
        return self._sorted(suggestions)
