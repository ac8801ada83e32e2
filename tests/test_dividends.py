"""Tests for dividend ledger totals and rankings."""

import datetime
from decimal import Decimal

from portfolio_planner.dividends import (
    filter_dividends,
    monthly_totals,
    period_total,
    rank_dividends,
    yearly_totals,
)
from portfolio_planner.models import Asset, Dividend


def dividend(dividend_id, ticker, year, month, per_share, total, asset_class="FIIs", kind="Rendimento"):
    return Dividend(
        id=dividend_id,
        date=datetime.date(year, month, 15),
        asset_id=ticker,
        ticker=ticker,
        asset_class=asset_class,
        type=kind,
        value_per_share=Decimal(per_share),
        total_value=Decimal(total),
    )


def ledger():
    return [
        dividend("1", "HGLG11", 2024, 1, "1.10", "11.00"),
        dividend("2", "HGLG11", 2024, 2, "1.10", "11.00"),
        dividend("3", "KNIP11", 2024, 2, "0.90", "45.00"),
        dividend("4", "PETR4", 2024, 2, "1.50", "15.00", "Ações (BR)", "JSCP"),
        dividend("5", "PETR4", 2023, 3, "2.00", "20.00", "Ações (BR)", "Dividendos"),
    ]


def assets():
    return [
        Asset("HGLG11", "FIIs", "HGLG11", 10, Decimal("160"), Decimal("110")),
        Asset("KNIP11", "FIIs", "KNIP11", 50, Decimal("92"), Decimal("100")),
        Asset("PETR4", "Ações (BR)", "PETR4", 10, Decimal("38"), Decimal("30")),
    ]


class TestFilterDividends:
    def test_no_filters_keeps_all(self):
        assert filter_dividends(ledger()) == ledger()

    def test_filters_combine(self):
        result = filter_dividends(ledger(), asset_class="Ações (BR)", dividend_type="JSCP")
        assert [d.id for d in result] == ["4"]

    def test_by_ticker(self):
        assert [d.id for d in filter_dividends(ledger(), ticker="HGLG11")] == ["1", "2"]


class TestPeriodTotals:
    def test_month_total(self):
        assert period_total(ledger(), 2024, 2) == Decimal("71.00")

    def test_year_total(self):
        assert period_total(ledger(), 2024) == Decimal("82.00")

    def test_empty_period(self):
        assert period_total(ledger(), 2022) == 0

    def test_monthly_totals_cross_year_boundary(self):
        totals = monthly_totals(ledger(), 2024, 2, months=3)
        assert totals == [
            (2023, 12, Decimal("0")),
            (2024, 1, Decimal("11.00")),
            (2024, 2, Decimal("71.00")),
        ]

    def test_monthly_totals_default_twelve(self):
        totals = monthly_totals(ledger(), 2024, 2)
        assert len(totals) == 12
        assert totals[0][:2] == (2023, 3)
        assert totals[0][2] == Decimal("20.00")

    def test_yearly_totals(self):
        assert yearly_totals(ledger(), 2024, years=2) == [
            (2023, Decimal("20.00")),
            (2024, Decimal("82.00")),
        ]


class TestRankDividends:
    def test_rank_by_yield_for_month(self):
        rankings = rank_dividends(ledger(), assets(), 2024, 2)

        assert [r.ticker for r in rankings] == ["PETR4", "HGLG11", "KNIP11"]
        assert rankings[0].yield_percentage == Decimal("5")
        assert rankings[1].yield_percentage == Decimal("1")
        assert rankings[2].yield_percentage == Decimal("0.9")

    def test_rank_by_total(self):
        rankings = rank_dividends(ledger(), assets(), 2024, 2, metric="total")
        assert [r.ticker for r in rankings] == ["KNIP11", "PETR4", "HGLG11"]
        assert rankings[0].total == Decimal("45.00")

    def test_trailing_year_sums_per_share_values(self):
        rankings = rank_dividends(ledger(), assets(), 2024, 2, trailing_year=True)
        by_ticker = {r.ticker: r for r in rankings}

        # 2023-03 is the first month of the window ending 2024-02
        assert by_ticker["PETR4"].total == Decimal("35.00")
        assert by_ticker["PETR4"].yield_percentage == Decimal("3.5") / Decimal("30") * 100
        assert by_ticker["HGLG11"].total == Decimal("22.00")
        assert by_ticker["HGLG11"].yield_percentage == Decimal("2")

    def test_window_excludes_older_months(self):
        rankings = rank_dividends(ledger(), assets(), 2024, 3, trailing_year=True)
        petr = next(r for r in rankings if r.ticker == "PETR4")
        assert petr.total == Decimal("15.00")

    def test_unknown_ticker_has_zero_yield(self):
        rankings = rank_dividends(ledger(), [], 2024, 2, metric="total")
        assert all(r.yield_percentage == 0 for r in rankings)
        assert [r.ticker for r in rankings] == ["KNIP11", "PETR4", "HGLG11"]

    def test_zero_average_price_has_zero_yield(self):
        held = [Asset("HGLG11", "FIIs", "HGLG11", 10, Decimal("160"))]
        [ranking] = rank_dividends(ledger(), held, 2024, 1)
        assert ranking.yield_percentage == 0
        assert ranking.asset_class == "FIIs"

    def test_limit(self):
        rankings = rank_dividends(ledger(), assets(), 2024, 2, limit=2)
        assert len(rankings) == 2

    def test_empty_month(self):
        assert rank_dividends(ledger(), assets(), 2024, 6) == []
