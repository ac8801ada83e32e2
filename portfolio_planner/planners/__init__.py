"""Contribution planning strategies."""

from .base import Candidate, ContributionPlanner
from .greedy_gap import GreedyGapPlanner
from .tracking_error import TrackingErrorPlanner
from .two_stage import TwoStagePlanner

__all__ = [
    "Candidate",
    "ContributionPlanner",
    "GreedyGapPlanner",
    "TrackingErrorPlanner",
    "TwoStagePlanner",
]
