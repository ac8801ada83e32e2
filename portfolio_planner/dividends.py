"""Totals and rankings over the dividend ledger.

Yield is measured against what the investor paid, per share::

    yield[t] = sum(value_per_share[t]) / average_price[t] * 100

Months are 1-12 throughout.
"""

from decimal import Decimal
from typing import Iterable, Literal, Optional, Sequence

from .models import Asset, Dividend, DividendRanking

RankingMetric = Literal["yield", "total"]


def _month_index(year: int, month: int) -> int:
    return year * 12 + month - 1


def filter_dividends(
    dividends: Iterable[Dividend],
    asset_class: Optional[str] = None,
    dividend_type: Optional[str] = None,
    ticker: Optional[str] = None,
) -> list[Dividend]:
    """Keep dividends matching every filter given; None matches anything."""
    return [
        d
        for d in dividends
        if (asset_class is None or d.asset_class == asset_class)
        and (dividend_type is None or d.type == dividend_type)
        and (ticker is None or d.ticker == ticker)
    ]


def period_total(
    dividends: Iterable[Dividend], year: int, month: Optional[int] = None
) -> Decimal:
    """Total received in one month, or in the whole year when month is None."""
    return sum(
        (
            d.total_value
            for d in dividends
            if d.date.year == year and (month is None or d.date.month == month)
        ),
        start=Decimal("0"),
    )


def monthly_totals(
    dividends: Sequence[Dividend], year: int, month: int, months: int = 12
) -> list[tuple[int, int, Decimal]]:
    """(year, month, total) for the ``months`` months ending at the given one, oldest first."""
    end = _month_index(year, month)
    result = []
    for index in range(end - months + 1, end + 1):
        y, m = divmod(index, 12)
        result.append((y, m + 1, period_total(dividends, y, m + 1)))
    return result


def yearly_totals(
    dividends: Sequence[Dividend], year: int, years: int = 5
) -> list[tuple[int, Decimal]]:
    return [(y, period_total(dividends, y)) for y in range(year - years + 1, year + 1)]


def rank_dividends(
    dividends: Iterable[Dividend],
    assets: Sequence[Asset],
    year: int,
    month: int,
    metric: RankingMetric = "yield",
    trailing_year: bool = False,
    limit: int = 10,
) -> list[DividendRanking]:
    """Rank tickers by dividends received in a month or the trailing twelve months.

    Args:
        dividends: The ledger, optionally pre-filtered.
        assets: Assets to look up the average price by ticker.
        year: Year of the selected month.
        month: Selected month (1-12).
        metric: "yield" (per-share sum over average price) or "total" (cash received).
        trailing_year: Pool the twelve months ending at the selected month
            instead of the month alone.
        limit: Maximum number of entries returned.

    Returns:
        Rankings sorted by the chosen metric, largest first.
    """
    end = _month_index(year, month)
    start = end - 11 if trailing_year else end

    groups: dict[str, dict] = {}
    for d in dividends:
        if not start <= _month_index(d.date.year, d.date.month) <= end:
            continue
        group = groups.setdefault(
            d.ticker,
            {"asset_class": d.asset_class, "total": Decimal("0"), "unit_sum": Decimal("0")},
        )
        group["total"] += d.total_value
        group["unit_sum"] += d.value_per_share

    rankings = []
    for ticker, group in groups.items():
        asset = next((a for a in assets if a.ticker == ticker), None)
        avg_price = asset.average_price if asset is not None else Decimal("0")
        yield_pct = group["unit_sum"] / avg_price * 100 if avg_price > 0 else Decimal("0")
        rankings.append(
            DividendRanking(
                ticker=ticker,
                asset_class=group["asset_class"],
                total=group["total"],
                yield_percentage=yield_pct,
            )
        )

    if metric == "yield":
        rankings.sort(key=lambda r: r.yield_percentage, reverse=True)
    else:
        rankings.sort(key=lambda r: r.total, reverse=True)
    return rankings[:limit]
