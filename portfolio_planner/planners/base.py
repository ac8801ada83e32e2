"""Abstract base class for contribution planners."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from ..config import PlannerConfig
from ..metrics import goals_by_class, ideal_percentages, percentage_of, total_value
from ..models import Asset, ContributionSuggestion, InvestmentGoal


@dataclass(frozen=True)
class Candidate:
    """An asset eligible to receive new cash, with its target for the post-contribution total."""

    asset: Asset
    ideal_percentage: Decimal
    current_value: Decimal
    target_value: Decimal

    @property
    def gap(self) -> Decimal:
        return max(Decimal("0"), self.target_value - self.current_value)

    @property
    def price(self) -> Decimal:
        # Zero-priced assets are sized as if one unit cost 1.
        return self.asset.current_price if self.asset.current_price > 0 else Decimal("1")


class ContributionPlanner(ABC):
    """Abstract base class for buy-only contribution strategies."""

    def __init__(self, config: Optional[PlannerConfig] = None) -> None:
        self.config = config or PlannerConfig()

    @abstractmethod
    def plan(
        self,
        assets: Sequence[Asset],
        investment_goals: Sequence[InvestmentGoal],
        amount: Decimal,
    ) -> list[ContributionSuggestion]:
        """Propose purchases for new cash without selling anything.

        Args:
            assets: Every asset, held or watchlisted.
            investment_goals: Target percentage per class.
            amount: Cash to invest.

        Returns:
            Suggestions sorted by suggested value, largest first. Empty when
            amount is not positive.
        """
        pass

    def _collect_candidates(
        self,
        assets: Sequence[Asset],
        investment_goals: Sequence[InvestmentGoal],
        total_post: Decimal,
    ) -> list[Candidate]:
        """Held assets plus watchlisted ones with a positive score.

        The score-weight pool of a class spans all of its candidates, so
        watchlisted assets compete with holdings for the class target.
        """
        members = [a for a in assets if a.quantity > 0 or (a.score and a.score > 0)]
        ideals = ideal_percentages(members, goals_by_class(investment_goals))

        return [
            Candidate(
                asset=a,
                ideal_percentage=ideals[a.id],
                current_value=a.market_value,
                target_value=ideals[a.id] / 100 * total_post,
            )
            for a in members
        ]

    def _suggestion(
        self,
        candidate: Candidate,
        allocation: Decimal,
        total_current: Decimal,
        total_post: Decimal,
    ) -> ContributionSuggestion:
        asset = candidate.asset
        return ContributionSuggestion(
            asset_id=asset.id,
            ticker=asset.ticker,
            asset_class=asset.asset_class,
            suggested_value=allocation,
            suggested_qty=allocation / candidate.price,
            current_percentage=percentage_of(candidate.current_value, total_current),
            after_percentage=percentage_of(candidate.current_value + allocation, total_post),
            ideal_percentage=candidate.ideal_percentage,
            is_new_class=asset.is_watchlist,
        )

    def _totals(self, assets: Sequence[Asset], amount: Decimal) -> tuple[Decimal, Decimal]:
        """Current total and the total after the contribution."""
        total_current = total_value(assets)
        return total_current, total_current + Decimal(amount)

    @staticmethod
    def _sorted(suggestions: list[ContributionSuggestion]) -> list[ContributionSuggestion]:
        return sorted(suggestions, key=lambda s: s.suggested_value, reverse=True)
