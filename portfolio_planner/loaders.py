"""Loaders for importing portfolio data from saved application state."""

import datetime
import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from .config import default_investment_goals
from .models import Asset, Dividend, InvestmentGoal
from .portfolio import Portfolio

logger = logging.getLogger(__name__)


def load_state(path: str | Path) -> Portfolio:
    """Load a portfolio from a JSON state file.

    Args:
        path: Path to the state document.

    Returns:
        Portfolio with the document's assets, investment goals and dividends.

    Raises:
        ValueError: If the file is not a valid state document.
    """
    return parse_state(Path(path).read_text(encoding="utf-8"))


def parse_state(text: str) -> Portfolio:
    """Build a portfolio from the text of a JSON state document.

    The document is the application's single state object; only its ``assets``,
    ``investmentGoals`` and ``dividends`` arrays are read. A missing or
    malformed array falls back to an empty list (default goals for
    ``investmentGoals``), and malformed entries are skipped with a warning.

    Raises:
        ValueError: If the text is not JSON or its root is not an object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid state document: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("Invalid state document: expected a JSON object")

    assets: list[Asset] = []
    seen_ids: set[str] = set()
    for item in _as_list(data.get("assets")):
        asset = _parse_asset(item)
        if asset is None:
            continue
        if asset.id in seen_ids:
            logger.warning("Skipping asset %s: id already used", asset.id)
            continue
        seen_ids.add(asset.id)
        assets.append(asset)

    raw_goals = data.get("investmentGoals")
    if isinstance(raw_goals, list):
        goals = [g for g in (_parse_goal(item) for item in raw_goals) if g is not None]
    else:
        goals = default_investment_goals()

    dividends = [
        d for d in (_parse_dividend(item) for item in _as_list(data.get("dividends")))
        if d is not None
    ]

    return Portfolio(assets=assets, investment_goals=goals, dividends=dividends)


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _to_decimal(value: Any) -> Decimal:
    """Convert a JSON number (or numeric string) to Decimal; missing means 0."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        d = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e
    if not d.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return d


def _parse_asset(item: Any) -> Optional[Asset]:
    if not isinstance(item, dict) or "id" not in item or "class" not in item:
        logger.warning("Skipping malformed asset entry: %r", item)
        return None

    try:
        return Asset(
            id=str(item["id"]),
            asset_class=str(item["class"]),
            ticker=str(item.get("ticker", "")),
            quantity=_to_decimal(item.get("quantity")),
            current_price=_to_decimal(item.get("currentPrice")),
            average_price=_to_decimal(item.get("averagePrice")),
            score=_to_decimal(item.get("score")),
            total_dividends=_to_decimal(item.get("totalDividends")),
            note=str(item.get("note") or ""),
        )
    except ValueError as e:
        logger.warning("Skipping asset %s: %s", item.get("id"), e)
        return None


def _parse_goal(item: Any) -> Optional[InvestmentGoal]:
    if not isinstance(item, dict) or "class" not in item:
        logger.warning("Skipping malformed goal entry: %r", item)
        return None

    try:
        return InvestmentGoal(
            asset_class=str(item["class"]),
            percentage=_to_decimal(item.get("percentage")),
        )
    except ValueError as e:
        logger.warning("Skipping goal %s: %s", item.get("class"), e)
        return None


def _parse_dividend(item: Any) -> Optional[Dividend]:
    if not isinstance(item, dict) or "id" not in item or "date" not in item:
        logger.warning("Skipping malformed dividend entry: %r", item)
        return None

    try:
        return Dividend(
            id=str(item["id"]),
            date=datetime.date.fromisoformat(str(item["date"])[:10]),
            asset_id=str(item.get("assetId", "")),
            ticker=str(item.get("ticker", "")),
            asset_class=str(item.get("class", "")),
            type=str(item.get("type", "")),
            value_per_share=_to_decimal(item.get("valuePerShare")),
            total_value=_to_decimal(item.get("totalValue")),
        )
    except ValueError as e:
        logger.warning("Skipping dividend %s: %s", item.get("id"), e)
        return None
