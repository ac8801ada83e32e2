"""Tests for portfolio metrics, adherence score and deficit."""

from decimal import Decimal

from portfolio_planner.metrics import calculate_portfolio_metrics, score_weight
from portfolio_planner.models import Asset, InvestmentGoal
from portfolio_planner.scoring import calculate_adherence_score, calculate_portfolio_deficit


def verification_assets():
    return [
        Asset("1", "Acoes", "PETR4", 1, Decimal("100"), Decimal("90"), 10),
        Asset("1b", "Acoes", "VALE3", 0, Decimal("100"), score=10),
        Asset("2", "FIIs", "HGLG11", 1, Decimal("100"), Decimal("90"), 10),
        Asset("2b", "FIIs", "KNIP11", 0, Decimal("100"), score=10),
        Asset("3", "Renda Fixa", "TESOURO", 8, Decimal("100"), Decimal("100"), 10),
    ]


def verification_goals():
    return [
        InvestmentGoal("Acoes", Decimal("40")),
        InvestmentGoal("FIIs", Decimal("40")),
        InvestmentGoal("Renda Fixa", Decimal("20")),
    ]


class TestCalculatePortfolioMetrics:
    def test_total_value(self):
        result = calculate_portfolio_metrics(verification_assets(), verification_goals())
        assert result.total_value == Decimal("1000")

    def test_one_metric_per_asset_in_order(self):
        assets = verification_assets()
        result = calculate_portfolio_metrics(assets, verification_goals())
        assert [m.ticker for m in result.metrics] == [a.ticker for a in assets]

    def test_current_percentages_sum_to_100(self):
        assets = [
            Asset("a", "A", "AAA", 1, Decimal("100")),
            Asset("b", "A", "BBB", 3, Decimal("100")),
            Asset("c", "B", "CCC", 6, Decimal("100")),
        ]
        result = calculate_portfolio_metrics(assets, [InvestmentGoal("A", 100)])
        assert [m.current_percentage for m in result.metrics] == [10, 30, 60]
        assert sum(m.current_percentage for m in result.metrics) == 100

    def test_empty_portfolio_all_zero(self):
        assets = [
            Asset("a", "A", "AAA", 0, Decimal("100"), score=5),
            Asset("b", "B", "BBB", 0, Decimal("50"), score=5),
        ]
        result = calculate_portfolio_metrics(assets, [InvestmentGoal("A", 100)])

        assert result.total_value == 0
        for m in result.metrics:
            assert m.current_percentage == 0
            assert m.ideal_percentage == 0
            assert m.gap == 0

    def test_no_assets(self):
        result = calculate_portfolio_metrics([], [InvestmentGoal("A", 100)])
        assert result.metrics == []
        assert result.class_allocation[0].value == 0

    def test_ideal_split_by_score(self):
        assets = [
            Asset("a", "A", "AAA", 1, Decimal("100"), score=10),
            Asset("b", "A", "BBB", 1, Decimal("100"), score=5),
        ]
        result = calculate_portfolio_metrics(assets, [InvestmentGoal("A", Decimal("60"))])
        assert [m.ideal_percentage for m in result.metrics] == [40, 20]

    def test_zero_score_gets_floor_share(self):
        assets = [
            Asset("a", "A", "AAA", 1, Decimal("100"), score=0),
            Asset("b", "A", "BBB", 1, Decimal("100"), score=10),
        ]
        result = calculate_portfolio_metrics(assets, [InvestmentGoal("A", Decimal("50"))])

        zero_score = result.metrics[0]
        assert zero_score.ideal_percentage > 0
        assert zero_score.ideal_percentage == Decimal("50") * Decimal("0.1") / Decimal("10.1")

    def test_score_weight_floor(self):
        assert score_weight(Asset("a", "A", "AAA", 1, Decimal("1"), score=0)) == Decimal("0.1")
        assert score_weight(Asset("a", "A", "AAA", 1, Decimal("1"), score=7)) == 7

    def test_watchlist_asset_has_no_ideal_and_does_not_dilute(self):
        assets = [
            Asset("a", "A", "AAA", 2, Decimal("100"), score=5),
            Asset("b", "A", "BBB", 0, Decimal("100"), score=15),
        ]
        result = calculate_portfolio_metrics(assets, [InvestmentGoal("A", Decimal("80"))])

        assert result.metrics[0].ideal_percentage == 80
        assert result.metrics[1].ideal_percentage == 0
        assert result.metrics[1].current_percentage == 0

    def test_gap_is_ideal_minus_current(self):
        result = calculate_portfolio_metrics(verification_assets(), verification_goals())
        by_ticker = {m.ticker: m for m in result.metrics}

        petr = by_ticker["PETR4"]
        assert petr.current_percentage == 10
        assert petr.ideal_percentage == 40
        assert petr.gap == 30

        tesouro = by_ticker["TESOURO"]
        assert tesouro.current_percentage == 80
        assert tesouro.ideal_percentage == 20
        assert tesouro.gap == -60

    def test_missing_goal_gives_zero_ideal(self):
        assets = [Asset("a", "Cripto", "BTC", 1, Decimal("100"), score=10)]
        result = calculate_portfolio_metrics(assets, [InvestmentGoal("A", 100)])
        assert result.metrics[0].ideal_percentage == 0
        assert result.metrics[0].gap == -100

    def test_class_allocation_follows_goals_sorted_by_meta(self):
        goals = [
            InvestmentGoal("FIIs", Decimal("25")),
            InvestmentGoal("Acoes", Decimal("50")),
            InvestmentGoal("Renda Fixa", Decimal("25")),
        ]
        assets = [
            Asset("1", "Acoes", "PETR4", 3, Decimal("100")),
            Asset("2", "Renda Fixa", "TESOURO", 1, Decimal("100")),
            Asset("3", "Cripto", "BTC", 1, Decimal("100")),
        ]
        result = calculate_portfolio_metrics(assets, goals)

        assert [c.name for c in result.class_allocation] == ["Acoes", "FIIs", "Renda Fixa"]
        fiis = result.class_allocation[1]
        assert fiis.value == 0
        assert fiis.meta == 25

    def test_class_allocation_sums_to_100(self):
        result = calculate_portfolio_metrics(verification_assets(), verification_goals())
        assert sum(c.value for c in result.class_allocation) == 100

    def test_does_not_mutate_inputs(self):
        assets = verification_assets()
        goals = verification_goals()
        calculate_portfolio_metrics(assets, goals)
        assert assets == verification_assets()
        assert goals == verification_goals()


class TestAdherenceScore:
    def test_perfect_match(self):
        assets = [
            Asset("a", "A", "AAA", 4, Decimal("100")),
            Asset("b", "B", "BBB", 6, Decimal("100")),
        ]
        goals = [InvestmentGoal("A", 40), InvestmentGoal("B", 60)]
        assert calculate_adherence_score(assets, goals) == 100

    def test_empty_portfolio(self):
        assert calculate_adherence_score([], [InvestmentGoal("A", 100)]) == 0

    def test_decreases_with_deviation(self):
        goals = [InvestmentGoal("A", 40), InvestmentGoal("B", 60)]

        def score(a_value, b_value):
            return calculate_adherence_score(
                [
                    Asset("a", "A", "AAA", 1, Decimal(a_value)),
                    Asset("b", "B", "BBB", 1, Decimal(b_value)),
                ],
                goals,
            )

        assert score(400, 600) == 100
        assert score(500, 500) == 90
        assert score(600, 400) == 80
        assert score(1000, 0) == 40

    def test_untracked_class_counts_as_deviation(self):
        assets = [
            Asset("a", "A", "AAA", 5, Decimal("100")),
            Asset("x", "X", "XXX", 5, Decimal("100")),
        ]
        assert calculate_adherence_score(assets, [InvestmentGoal("A", 100)]) == 50

    def test_zero_goal_class_counts_as_untracked(self):
        assets = [
            Asset("a", "A", "AAA", 5, Decimal("100")),
            Asset("x", "X", "XXX", 5, Decimal("100")),
        ]
        goals = [InvestmentGoal("A", 100), InvestmentGoal("X", 0)]
        assert calculate_adherence_score(assets, goals) == 50

    def test_full_swap_scores_zero(self):
        assets = [Asset("b", "B", "BBB", 1, Decimal("100"))]
        assert calculate_adherence_score(assets, [InvestmentGoal("A", 100)]) == 0

    def test_rounds_half_up(self):
        assets = [
            Asset("a", "A", "AAA", 1, Decimal("415")),
            Asset("b", "B", "BBB", 1, Decimal("585")),
        ]
        goals = [InvestmentGoal("A", 40), InvestmentGoal("B", 60)]
        # deviation 3 -> 98.5
        assert calculate_adherence_score(assets, goals) == 99

    def test_returns_int(self):
        assert isinstance(calculate_adherence_score(verification_assets(), verification_goals()), int)


class TestPortfolioDeficit:
    def test_verification_scenario(self):
        deficit = calculate_portfolio_deficit(verification_assets(), verification_goals())
        assert deficit == Decimal("3000")

    def test_balanced_portfolio_has_no_deficit(self):
        assets = [
            Asset("a", "A", "AAA", 4, Decimal("100")),
            Asset("b", "B", "BBB", 6, Decimal("100")),
        ]
        goals = [InvestmentGoal("A", 40), InvestmentGoal("B", 60)]
        assert calculate_portfolio_deficit(assets, goals) == 0

    def test_classes_below_target_have_no_deficit(self):
        # Goals summing above 100 leave every class under its target
        assets = [
            Asset("a", "A", "AAA", 3, Decimal("100")),
            Asset("b", "B", "BBB", 3, Decimal("100")),
        ]
        goals = [InvestmentGoal("A", 60), InvestmentGoal("B", 60)]
        assert calculate_portfolio_deficit(assets, goals) == 0

    def test_empty_portfolio(self):
        assert calculate_portfolio_deficit([], verification_goals()) == 0

    def test_zero_goals_are_ignored(self):
        assets = [
            Asset("a", "A", "AAA", 5, Decimal("100")),
            Asset("b", "B", "BBB", 5, Decimal("100")),
        ]
        goals = [InvestmentGoal("A", 100), InvestmentGoal("B", 0)]
        assert calculate_portfolio_deficit(assets, goals) == 0

    def test_most_overweight_class_binds(self):
        assets = [
            Asset("a", "A", "AAA", 6, Decimal("100")),
            Asset("b", "B", "BBB", 4, Decimal("100")),
        ]
        goals = [InvestmentGoal("A", 50), InvestmentGoal("B", 25), InvestmentGoal("C", 25)]
        # A at 600 must be 50% -> total 1200; B at 400 must be 25% -> total 1600
        assert calculate_portfolio_deficit(assets, goals) == Decimal("600")
