#!/usr/bin/env python3
import os
import sys
import termios
import tty
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from io import StringIO

from rich import box
from rich.console import Console, Group
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text

from portfolio_planner import (
    Asset,
    AssetClass,
    ContributionSuggestion,
    Dividend,
    DividendType,
    InvestmentGoal,
    Portfolio,
    PortfolioMetrics,
    period_total,
)

console = Console()

# Thresholds and defaults
GAP_THRESHOLD = Decimal("2")
DEFAULT_STRATEGY_INDEX = 0

STRATEGIES: list[str] = ["two_stage", "greedy_gap", "tracking_error"]
STRATEGY_LABELS: dict[str, str] = {
    "two_stage": "Two-stage (class budget, then asset gap)",
    "greedy_gap": "Greedy gap (largest gaps first)",
    "tracking_error": "Tracking Error (min deviation)",
}


def build_demo_portfolio() -> Portfolio:
    """A small drifted portfolio: fixed income far above target, equities below."""
    acoes, fiis, renda_fixa = (
        AssetClass.ACOES_BR.value,
        AssetClass.FIIS.value,
        AssetClass.RENDA_FIXA_BR.value,
    )
    portfolio = Portfolio(
        investment_goals=[
            InvestmentGoal(acoes, Decimal("40")),
            InvestmentGoal(fiis, Decimal("40")),
            InvestmentGoal(renda_fixa, Decimal("20")),
        ]
    )
    for asset in (
        Asset("1", acoes, "PETR4", Decimal("10"), Decimal("38.50"), Decimal("31.20"), Decimal("10")),
        Asset("2", acoes, "VALE3", Decimal("0"), Decimal("61.90"), score=Decimal("8")),
        Asset("3", fiis, "HGLG11", Decimal("4"), Decimal("158.00"), Decimal("162.40"), Decimal("12")),
        Asset("4", fiis, "KNIP11", Decimal("0"), Decimal("92.10"), score=Decimal("6")),
        Asset("5", renda_fixa, "TESOURO IPCA+", Decimal("3"), Decimal("3100.00"), Decimal("2950.00"), Decimal("5")),
    ):
        portfolio.add_asset(asset)

    this_month = date.today().replace(day=15)
    last_month = (this_month.replace(day=1) - timedelta(days=1)).replace(day=15)
    for dividend in (
        Dividend("d1", last_month, "1", "PETR4", acoes, DividendType.DIVIDENDOS.value, Decimal("1.25"), Decimal("12.50")),
        Dividend("d2", last_month, "3", "HGLG11", fiis, DividendType.RENDIMENTO.value, Decimal("1.10"), Decimal("4.40")),
        Dividend("d3", this_month, "3", "HGLG11", fiis, DividendType.RENDIMENTO.value, Decimal("1.10"), Decimal("4.40")),
    ):
        portfolio.record_dividend(dividend)
    return portfolio


def _gap_color(gap: Decimal) -> str:
    """Return color based on gap magnitude and direction."""
    if abs(gap) < GAP_THRESHOLD:
        return "green"
    return "red" if gap > 0 else "blue"


def holdings_table(metrics: PortfolioMetrics, title: str) -> Table:
    """Build a Rich table showing each asset's weight against its ideal."""
    t = Table(title=title, box=box.ROUNDED, title_style="bold white")
    t.add_column("Ticker", style="cyan")
    t.add_column("Class", style="dim")
    t.add_column("Score", justify="right")
    t.add_column("Qty", justify="right")
    t.add_column("Price", justify="right")
    t.add_column("Value", justify="right")
    t.add_column("Alloc", justify="right", style="yellow")
    t.add_column("Ideal", justify="right", style="green")
    t.add_column("Gap", justify="right")

    for m in metrics.metrics:
        a = m.asset
        t.add_row(
            a.ticker,
            a.asset_class,
            f"{a.score}",
            f"{a.quantity:,}",
            f"${a.current_price:,.2f}",
            f"${m.total_value:,.2f}",
            f"{m.current_percentage:.1f}%",
            f"{m.ideal_percentage:.1f}%",
            Text(f"{m.gap:+.1f}%", style=_gap_color(m.gap)),
        )

    t.add_section()
    t.add_row("", "", "", "", "Total", f"[bold]${metrics.total_value:,.2f}[/bold]", "", "", "")
    return t


def class_table(metrics: PortfolioMetrics) -> Table:
    """Build a Rich table showing each goal class against its target."""
    t = Table(title="Allocation by Class", box=box.ROUNDED, title_style="bold white")
    t.add_column("Class", style="cyan")
    t.add_column("Current", justify="right", style="yellow")
    t.add_column("Target", justify="right", style="green")
    t.add_column("Gap", justify="right")

    for c in metrics.class_allocation:
        gap = c.meta - c.value
        t.add_row(
            c.name,
            f"{c.value:.1f}%",
            f"{c.meta:.1f}%",
            Text(f"{gap:+.1f}%", style=_gap_color(gap)),
        )
    return t


def suggestions_table(suggestions: list[ContributionSuggestion], amount: Decimal) -> Table:
    """Build a Rich table showing suggested purchases."""
    t = Table(title="Contribution Plan", box=box.ROUNDED, title_style="bold white")
    t.add_column("Ticker", style="cyan")
    t.add_column("Class", style="dim")
    t.add_column("Qty", justify="right")
    t.add_column("Amount", justify="right")
    t.add_column("Alloc", justify="right", style="yellow")
    t.add_column("After", justify="right")
    t.add_column("Ideal", justify="right", style="green")

    invested = Decimal(0)
    for s in suggestions:
        invested += s.suggested_value
        ticker = Text(s.ticker, style="bold magenta") if s.is_new_class else s.ticker
        t.add_row(
            ticker,
            s.asset_class,
            f"{s.suggested_qty:,.4f}",
            f"${s.suggested_value:,.2f}",
            f"{s.current_percentage:.1f}%",
            f"{s.after_percentage:.1f}%",
            f"{s.ideal_percentage:.1f}%",
        )

    t.add_section()
    t.add_row("", "[dim]Cash available[/dim]", "", f"[dim]${amount:,.2f}[/dim]", "", "", "")
    t.add_row("", "[bold]Suggested[/bold]", "", f"[green]${invested:,.2f}[/green]", "", "", "")
    uninvested = amount - invested
    if uninvested > Decimal("0.01"):
        t.add_row("", "[yellow]Unallocated[/yellow]", "", f"[yellow]${uninvested:,.2f}[/yellow]", "", "", "")
    return t


def summary_panel(portfolio: Portfolio) -> Panel:
    """Adherence score and equilibrium deficit."""
    score = portfolio.adherence_score()
    color = "green" if score >= 90 else "yellow" if score >= 70 else "red"
    return Panel(
        f"Adherence: [bold {color}]{score}/100[/bold {color}]    "
        f"Deficit to equilibrium: [bold]${portfolio.deficit():,.2f}[/bold]",
        box=box.ROUNDED,
    )


def dividends_table(portfolio: Portfolio, today: date) -> Table:
    """Rank tickers by dividends received over the twelve months ending this month."""
    rankings = portfolio.dividend_ranking(today.year, today.month, trailing_year=True)
    t = Table(title="Dividends · last 12 months", box=box.ROUNDED, title_style="bold white")
    t.add_column("Ticker", style="cyan")
    t.add_column("Class", style="dim")
    t.add_column("Received", justify="right")
    t.add_column("Yield on cost", justify="right", style="green")

    for r in rankings:
        t.add_row(r.ticker, r.asset_class, f"${r.total:,.2f}", f"{r.yield_percentage:.2f}%")

    t.add_section()
    this_month = period_total(portfolio.dividends, today.year, today.month)
    this_year = period_total(portfolio.dividends, today.year)
    t.add_row("", "[dim]This month[/dim]", f"[dim]${this_month:,.2f}[/dim]", "")
    t.add_row("", "[bold]This year[/bold]", f"[bold]${this_year:,.2f}[/bold]", "")
    return t


def _read_key() -> str:
    """Block for one keypress; arrow keys arrive as a single escape sequence."""
    fd = sys.stdin.fileno()
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        return os.read(fd, 3).decode(errors="ignore")
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


class StrategyPicker:
    """Arrow-key strategy menu that previews the plan each strategy produces."""

    MOVES = {"\x1b[A": -1, "k": -1, "\x1b[B": 1, "j": 1}

    def __init__(self, portfolio: Portfolio, amount: Decimal) -> None:
        self.portfolio = portfolio
        self.amount = amount
        self.index = DEFAULT_STRATEGY_INDEX
        self._plans: dict[str, list[ContributionSuggestion]] = {}
        self._drawn_lines = 0

    @property
    def current(self) -> str:
        return STRATEGIES[self.index]

    def plan(self, strategy: str) -> list[ContributionSuggestion]:
        if strategy not in self._plans:
            self._plans[strategy] = self.portfolio.plan_contribution(self.amount, strategy=strategy)
        return self._plans[strategy]

    def _menu(self) -> Text:
        menu = Text()
        for i, strategy in enumerate(STRATEGIES):
            plan = self.plan(strategy)
            invested = sum((s.suggested_value for s in plan), start=Decimal("0"))
            marker, style = ("▸", "bold cyan") if i == self.index else (" ", "dim")
            menu.append(f"  {marker} {STRATEGY_LABELS[strategy]}", style=style)
            menu.append(f"  ${invested:,.2f} in {len(plan)} buys", style="dim")
            if i < len(STRATEGIES) - 1:
                menu.append("\n")
        return menu

    def _frame(self) -> str:
        buf = StringIO()
        frame_console = Console(file=buf, width=console.width, force_terminal=True)
        preview = suggestions_table(self.plan(self.current), self.amount)
        frame_console.print(Group(preview, self._menu()))
        return buf.getvalue()

    def _erase(self) -> None:
        if self._drawn_lines:
            sys.stdout.write(f"\033[{self._drawn_lines}A\033[J")
            self._drawn_lines = 0

    def _draw(self) -> None:
        self._erase()
        frame = self._frame()
        sys.stdout.write(frame)
        sys.stdout.flush()
        self._drawn_lines = frame.count("\n")

    def run(self) -> str:
        if not sys.stdin.isatty():
            return self.current

        self._draw()
        while True:
            key = _read_key()
            if key in ("\r", "\n"):
                break
            if key in self.MOVES:
                self.index = (self.index + self.MOVES[key]) % len(STRATEGIES)
                self._draw()

        self._erase()
        sys.stdout.flush()
        console.print(f"  [bold cyan]▸ {STRATEGY_LABELS[self.current]}[/bold cyan]")
        return self.current


def _pick_strategy(portfolio: Portfolio, amount: Decimal) -> str:
    console.print()
    console.print("[bold]Strategy:[/bold] [dim](↑/↓, enter)[/dim]")
    return StrategyPicker(portfolio, amount).run()


def _prompt_amount(portfolio: Portfolio) -> Decimal:
    deficit = portfolio.deficit()
    console.print()
    if deficit > 0:
        console.print(
            f"  [dim]Investing[/dim] [bold]${deficit:,.2f}[/bold] "
            "[dim]brings every class to target without selling.[/dim]"
        )
    raw = Prompt.ask("  Amount to invest", default=f"{deficit:.2f}")
    try:
        amount = Decimal(raw.replace(",", ""))
    except InvalidOperation:
        amount = None
    if amount is None or not amount.is_finite():
        console.print(f"  [red]Not a number: {raw}[/red]")
        return Decimal("0")
    return amount


def display_plan(
    suggestions: list[ContributionSuggestion], amount: Decimal
) -> None:
    """Display the suggested purchases."""
    if not suggestions:
        console.print("[green]  No purchases suggested for this amount.[/green]")
        return

    console.print(suggestions_table(suggestions, amount))


def run_cli_loop(portfolio: Portfolio, source: str) -> None:
    while True:
        metrics = portfolio.metrics()
        console.print()
        console.print(holdings_table(metrics, f"Holdings · {source}"))
        console.print(class_table(metrics))
        console.print(summary_panel(portfolio))
        if portfolio.dividends:
            console.print(dividends_table(portfolio, date.today()))

        amount = _prompt_amount(portfolio)
        strategy = _pick_strategy(portfolio, amount)

        console.print()
        display_plan(portfolio.plan_contribution(amount, strategy=strategy), amount)

        console.print()
        if not Confirm.ask("  Run again?", default=True):
            break


def main() -> None:
    """Entry point for the CLI application."""
    console.print()
    console.print(
        Panel("[bold]Portfolio Planner[/bold] · rebalance with new cash", box=box.DOUBLE)
    )

    if len(sys.argv) > 1:
        path = sys.argv[1]
        try:
            portfolio = Portfolio.from_file(path)
        except (OSError, ValueError) as e:
            console.print(f"[red]Could not load {path}: {e}[/red]")
            sys.exit(1)
        source = path
    else:
        portfolio = build_demo_portfolio()
        source = "demo portfolio"

    run_cli_loop(portfolio, source)


if __name__ == "__main__":
    main()
