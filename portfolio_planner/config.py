"""Configuration constants for the portfolio planner."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from .models import InvestmentGoal


class AssetClass(Enum):
    """Well-known asset classes offered by default."""

    ACOES_BR = "Ações (BR)"
    STOCKS = "Stocks"
    FIIS = "FIIs"
    REITS = "REITs"
    CRIPTO = "Cripto"
    RENDA_FIXA_BR = "Renda Fixa (BR)"
    RENDA_FIXA_INTER = "Renda Fixa Inter."


class DividendType(Enum):
    DIVIDENDOS = "Dividendos"
    JSCP = "JSCP"
    RENDIMENTO = "Rendimento"


@dataclass(frozen=True)
class PlannerConfig:
    """Thresholds shared by the metrics calculator and the planners."""

    SCORE_FLOOR: Decimal = Decimal("0.1")
    MAX_SCORE: Decimal = Decimal("15")
    MIN_CLASS_BUDGET: Decimal = Decimal("1")
    MIN_ALLOCATION: Decimal = Decimal("1")
    ZERO_TOLERANCE: Decimal = Decimal("0.01")
    GOAL_SUM_TOLERANCE: Decimal = Decimal("0.01")


def default_investment_goals() -> list[InvestmentGoal]:
    """Split 100% evenly across the well-known classes.

    Each share is rounded to one decimal place and the last class absorbs the
    rounding so the goals sum to exactly 100.
    """
    classes = [c.value for c in AssetClass]
    share = (Decimal("100") / len(classes)).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP
    )
    goals = [InvestmentGoal(asset_class=cls, percentage=share) for cls in classes[:-1]]
    goals.append(
        InvestmentGoal(
            asset_class=classes[-1],
            percentage=Decimal("100") - share * (len(classes) - 1),
        )
    )
    return goals
