"""Buy-only tracking error minimization using MILP optimization.

Mathematical Formulation (L1 norm minimization):

    minimize: sum(e_plus[i] + e_minus[i])

    subject to:
        q[i] * p[i] - e_plus[i] + e_minus[i] = t[i] - v[i]   (deviation balance)
        sum(q[i] * p[i]) <= A                                 (cash constraint)
        q[i], e_plus[i], e_minus[i] >= 0                      (no selling)

    where:
        q[i]     = units of candidate i to buy (decision variable)
        p[i]     = price per unit of candidate i
        t[i]     = target value of candidate i on the post-contribution total
        v[i]     = current value of candidate i
        A        = cash to invest
        e_plus   = value still missing after the purchase
        e_minus  = value above target after the purchase

Targets come from the same score-weighted candidate model as the two-stage
planner, but classes are not budgeted separately: the solver trades off every
candidate's deviation at once. With ``whole_units`` the quantities are
integers.
"""

import logging
from decimal import Decimal
from typing import Optional, Sequence

import numpy as np
from scipy.optimize import Bounds, LinearConstraint, milp

from ..config import PlannerConfig
from ..models import Asset, ContributionSuggestion, InvestmentGoal
from .base import ContributionPlanner

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class TrackingErrorPlanner(ContributionPlanner):
    """Minimize total deviation from asset targets after buying."""

    def __init__(
        self, config: Optional[PlannerConfig] = None, whole_units: bool = False
    ) -> None:
        super().__init__(config)
        self.whole_units = whole_units

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
        if not candidates:
            return []

        n = len(candidates)
        prices = np.array([float(c.price) for c in candidates])
        shortfall = np.array(
            [float(c.target_value - c.current_value) for c in candidates]
        )

        # Variables: [q_1..q_n, e_plus_1..e_plus_n, e_minus_1..e_minus_n]
        c = np.zeros(3 * n)
        c[n:] = 1.0

        A_eq = np.zeros((n, 3 * n))
        for i in range(n):
            A_eq[i, i] = prices[i]
            A_eq[i, n + i] = -1.0
            A_eq[i, 2 * n + i] = 1.0
        deviation_constraint = LinearConstraint(A_eq, shortfall, shortfall)

        A_cash = np.zeros((1, 3 * n))
        A_cash[0, :n] = prices
        cash_constraint = LinearConstraint(A_cash, -np.inf, float(amount))

        bounds = Bounds(np.zeros(3 * n), np.full(3 * n, np.inf))

        integrality = np.zeros(3 * n, dtype=int)
        if self.whole_units:
            integrality[:n] = 1

        result = milp(
            c=c,
            constraints=[deviation_constraint, cash_constraint],
            integrality=integrality,
            bounds=bounds,
        )

        if not result.success:
            logger.warning(
                "Tracking error solver failed (%s); falling back to two-stage plan",
                result.message,
            )
            from .two_stage import TwoStagePlanner

            return TwoStagePlanner(self.config).plan(assets, investment_goals, amount)

        units = result.x[:n]
        if self.whole_units:
            units = np.round(units)

        suggestions: list[ContributionSuggestion] = []
        for candidate, qty in zip(candidates, units):
            allocation = (Decimal(str(float(qty))) * candidate.price).quantize(CENT)
            if allocation <= self.config.MIN_ALLOCATION:
                continue
            suggestions.append(
                self._suggestion(candidate, allocation, total_current, total_post)
            )

        return self._sorted(suggestions)
