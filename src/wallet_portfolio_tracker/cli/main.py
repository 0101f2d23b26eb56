"""CLI for wallet portfolio tracker."""

import json
import logging
import random
from decimal import Decimal
from enum import StrEnum

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table
from rich.traceback import install

from wallet_portfolio_tracker.config import Settings
from wallet_portfolio_tracker.core import classifier
from wallet_portfolio_tracker.core.aggregator import PortfolioAggregator
from wallet_portfolio_tracker.core.models import (
    AppState,
    NetworkFamily,
    NetworkKind,
    NormalizedHolding,
    UserPreferences,
    WalletPortfolio,
    WalletRecord,
)
from wallet_portfolio_tracker.core.performance import Period, generate_history
from wallet_portfolio_tracker.core.registry import WalletRegistry
from wallet_portfolio_tracker.core.state import SetPreferences, SetWallets, reduce
from wallet_portfolio_tracker.core.tracker import PortfolioTracker
from wallet_portfolio_tracker.data import get_all_supported_networks, get_display_name, get_network_config
from wallet_portfolio_tracker.errors import PortfolioTrackerError, WalletValidationError
from wallet_portfolio_tracker.providers import CoinGeckoPricing, HeliusSolanaClient, MoralisClient
from wallet_portfolio_tracker.storage import WalletStore

app = typer.Typer(
    name="wallet-portfolio-tracker",
    help="Track token holdings of EVM and Solana wallets with USD valuations",
    add_completion=False,
)

console = Console()


class OutputFormat(StrEnum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def _configure_logging(debug: bool) -> None:
    """Route log records through rich; debug enables verbose output and rich tracebacks."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=debug)],
        force=True,
    )
    if debug:
        install(show_locals=True)
        # httpx logs every request at INFO
        logging.getLogger("httpx").setLevel(logging.INFO)


def _open_store() -> tuple[Settings, WalletStore]:
    settings = Settings.from_env()
    return settings, WalletStore(settings.store_path)


def _load_state(store: WalletStore) -> AppState:
    """Build application state from the store."""
    state = AppState(user_id=store.get_user_id())
    state = reduce(state, SetWallets(wallets=store.get_wallets()))
    return reduce(state, SetPreferences(preferences=store.get_preferences()))


def _build_tracker(settings: Settings) -> PortfolioTracker:
    return PortfolioTracker(
        balance_providers={
            NetworkFamily.EVM: MoralisClient(settings.moralis_api_key, timeout=settings.timeout),
            NetworkFamily.SOLANA: HeliusSolanaClient(settings.helius_api_key, timeout=settings.timeout),
        },
        pricing=CoinGeckoPricing(settings.coingecko_api_key, timeout=settings.timeout),
    )


def _close_tracker(tracker: PortfolioTracker) -> None:
    for provider in tracker.balance_providers.values():
        provider.close()
    tracker.pricing.close()


def _print_validation_errors(error: WalletValidationError) -> None:
    for field_error in error.errors:
        console.print(f"[bold red]{field_error.field}:[/bold red] {escape(field_error.message)}")


def _format_address(address: str) -> str:
    return f"{address[:6]}...{address[-4:]}" if len(address) > 12 else address


def _format_usd(value: Decimal) -> str:
    return f"${value:,.2f}"


def _format_percent(value: Decimal) -> str:
    color = "green" if value >= 0 else "red"
    sign = "+" if value > 0 else ""
    return f"[{color}]{sign}{value:.2f}%[/{color}]"


@app.command()
def detect(address: str = typer.Argument(..., help="Address to classify")) -> None:
    """Show which address family an address belongs to."""
    family = classifier.classify(address.strip())
    if family is None:
        console.print(f"[yellow]{escape(repr(address))} is not a valid EVM or Solana address[/yellow]")
        raise typer.Exit(code=1)

    networks = [name for name in get_all_supported_networks() if get_network_config(name).family == family]
    console.print(f"[bold cyan]{escape(address)}[/bold cyan] is a [green]{family.value}[/green] address")
    console.print(f"[dim]Valid networks: {', '.join(networks)}[/dim]")


@app.command()
def add_wallet(
    address: str = typer.Argument(..., help="Wallet address"),
    alias: str = typer.Option(..., "--alias", "-a", help="Display name (max 50 characters)"),
    network: NetworkKind | None = typer.Option(
        None,
        "--network",
        "-n",
        help="Network; defaults to ethereum for EVM and solana for Solana addresses",
    ),
) -> None:
    """Register a wallet address."""
    _, store = _open_store()
    registry = WalletRegistry(store.get_wallets())

    try:
        wallet = registry.add(address, alias, network)
    except WalletValidationError as e:
        _print_validation_errors(e)
        raise typer.Exit(code=1)

    store.save_wallets(registry.list_wallets())
    console.print(
        f"[green]✓[/green] Added [bold]{escape(wallet.alias)}[/bold] "
        f"({get_display_name(wallet.network)}) [dim]{wallet.id}[/dim]"
    )


@app.command()
def list_wallets() -> None:
    """List registered wallets."""
    _, store = _open_store()
    wallets = store.get_wallets()

    if not wallets:
        console.print("[yellow]No wallets registered[/yellow]")
        return

    table = Table(title="Wallets", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Network", style="blue")
    table.add_column("Address", style="green")
    table.add_column("Added", style="white")

    for wallet in wallets:
        table.add_row(
            wallet.id[:8],
            escape(wallet.alias),
            get_display_name(wallet.network),
            escape(wallet.address),
            wallet.created_at.strftime("%Y-%m-%d"),
        )

    console.print(table)


@app.command()
def edit_wallet(
    wallet: str = typer.Argument(..., help="Wallet id, address or name"),
    alias: str | None = typer.Option(None, "--alias", "-a", help="New display name"),
    address: str | None = typer.Option(None, "--address", help="New address"),
    network: NetworkKind | None = typer.Option(None, "--network", "-n", help="New network"),
) -> None:
    """Rename a wallet or change its address or network."""
    _, store = _open_store()
    registry = WalletRegistry(store.get_wallets())

    try:
        current = registry.resolve(wallet)
        updated = registry.update(current.id, alias=alias, address=address, network=network)
    except WalletValidationError as e:
        _print_validation_errors(e)
        raise typer.Exit(code=1)
    except PortfolioTrackerError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    store.save_wallets(registry.list_wallets())
    console.print(f"[green]✓[/green] Updated [bold]{escape(updated.alias)}[/bold]")


@app.command()
def remove_wallet(
    wallet: str = typer.Argument(..., help="Wallet id, address or name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a wallet."""
    _, store = _open_store()
    registry = WalletRegistry(store.get_wallets())

    try:
        target = registry.resolve(wallet)
    except PortfolioTrackerError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    if not yes and not typer.confirm(f"Delete wallet '{target.alias}'?"):
        raise typer.Abort()

    registry.remove(target.id)
    store.save_wallets(registry.list_wallets())
    console.print(f"[green]✓[/green] Removed [bold]{escape(target.alias)}[/bold]")


def _fetch_state(wallet_key: str | None, debug: bool) -> tuple[AppState, WalletRecord | None]:
    """
    Load wallets from the store and fetch their portfolios.

    Parameters
    ----------
    wallet_key : str | None
        Wallet id, address or name to fetch alone; None fetches all wallets
    debug : bool
        Enable debug output

    Returns
    -------
    tuple[AppState, WalletRecord | None]
        Refreshed state and the selected wallet, if any

    Raises
    ------
    typer.Exit
        If no wallets are registered or the selected wallet is unknown

    """
    _configure_logging(debug)
    settings, store = _open_store()
    state = _load_state(store)

    if not state.wallets:
        console.print("[yellow]No wallets registered. Add one with add-wallet.[/yellow]")
        raise typer.Exit(code=1)

    selected = None
    if wallet_key:
        try:
            selected = WalletRegistry(state.wallets).resolve(wallet_key)
        except PortfolioTrackerError as e:
            console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)

    tracker = _build_tracker(settings)
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            if selected is not None:
                task = progress.add_task(f"Fetching {escape(selected.alias)}...", total=1)
                state = tracker.fetch_wallet_portfolio(state, selected.id)
                progress.update(task, completed=1)
            else:
                task = progress.add_task(f"Fetching {len(state.wallets)} wallets...", total=len(state.wallets))
                state = tracker.fetch_all_portfolios(state, progress=progress, task_id=task)
    finally:
        _close_tracker(tracker)

    return state, selected


@app.command()
def portfolio(
    wallet: str | None = typer.Option(None, "--wallet", "-w", help="Wallet id, address or name"),
    format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-f", help="Output format"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """
    Show holdings of one wallet or of all wallets combined.

    Examples:

        # All wallets
        wallet-portfolio-tracker portfolio

        # A single wallet by name
        wallet-portfolio-tracker portfolio --wallet "Main"

        # Output as JSON
        wallet-portfolio-tracker portfolio --format json
    """
    state, selected = _fetch_state(wallet, debug)
    aggregator = PortfolioAggregator()

    if selected is not None:
        wallet_portfolio = state.portfolios[selected.id]
        if format == OutputFormat.JSON:
            console.print(json.dumps(wallet_portfolio.model_dump(mode="json"), indent=2), markup=False)
        else:
            _output_wallet(selected, wallet_portfolio)
        return

    holdings = aggregator.merge_across_wallets(state.portfolios.values())
    total = aggregator.total_value(state.portfolios.values())

    if format == OutputFormat.JSON:
        data = {
            "total_usd_value": str(total),
            "holdings": [holding.model_dump(mode="json") for holding in holdings],
            "wallets": {key: value.model_dump(mode="json") for key, value in state.portfolios.items()},
        }
        console.print(json.dumps(data, indent=2), markup=False)
        return

    _output_wallet_summary(state)
    _output_holdings("All Wallets", holdings)
    console.print(f"\n[bold]Total Value:[/bold] [bold green]{_format_usd(total)}[/bold green]\n")


@app.command()
def distribution(
    wallet: str | None = typer.Option(None, "--wallet", "-w", help="Wallet id, address or name"),
    top: int = typer.Option(8, "--top", "-t", min=1, help="Number of slices"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """Show the share of the largest holdings."""
    state, selected = _fetch_state(wallet, debug)
    aggregator = PortfolioAggregator()

    if selected is not None:
        portfolios = [state.portfolios[selected.id]]
    else:
        portfolios = list(state.portfolios.values())
    holdings = aggregator.merge_across_wallets(portfolios)
    slices = aggregator.distribution(holdings, top_n=top)

    if not slices:
        console.print("[yellow]No holdings found[/yellow]")
        return

    table = Table(title="Portfolio Distribution", show_header=True, header_style="bold magenta")
    table.add_column("Token", style="cyan")
    table.add_column("USD Value", style="bold green", justify="right")
    table.add_column("Share", style="yellow", justify="right")

    for item in slices:
        table.add_row(escape(item.symbol), _format_usd(item.usd_value), f"{item.percent:.1f}%")

    console.print(table)


@app.command()
def history(
    wallet: str | None = typer.Option(None, "--wallet", "-w", help="Wallet id, address or name"),
    period: Period = typer.Option(Period.YEAR, "--period", "-p", help="Chart period"),
    seed: int | None = typer.Option(None, "--seed", help="Seed for reproducible output"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """Show simulated historical portfolio value."""
    state, selected = _fetch_state(wallet, debug)
    aggregator = PortfolioAggregator()

    if selected is not None:
        current = state.portfolios[selected.id].total_usd_value
    else:
        current = aggregator.total_value(state.portfolios.values())

    points = generate_history(current, period, rng=random.Random(seed))

    table = Table(title=f"Portfolio Value ({period.value}, simulated)", show_header=True, header_style="bold magenta")
    table.add_column("Time", style="cyan")
    table.add_column("USD Value", style="bold green", justify="right")

    for point in points:
        table.add_row(point.label, _format_usd(point.usd_value))

    console.print(table)


@app.command()
def list_networks() -> None:
    """List all supported networks."""
    table = Table(title="Supported Networks", show_header=True, header_style="bold magenta")
    table.add_column("Network", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Family", style="green")
    table.add_column("Native", style="yellow")

    for name in get_all_supported_networks():
        config = get_network_config(name)
        table.add_row(name, config.display_name, config.family.value, config.native_symbol)

    console.print(table)


@app.command()
def settings(
    currency: str | None = typer.Option(None, "--currency", help="Display currency (USD or JPY)"),
    theme: str | None = typer.Option(None, "--theme", help="Theme (light or dark)"),
    reset: bool = typer.Option(False, "--reset", help="Delete all stored wallets and settings"),
) -> None:
    """Show or change display preferences."""
    _, store = _open_store()

    if reset:
        if not typer.confirm("Delete all wallets and settings?"):
            raise typer.Abort()
        store.clear_all()
        console.print("[green]✓[/green] All data cleared")
        return

    preferences = store.get_preferences()
    updates = {key: value for key, value in {"currency": currency, "theme": theme}.items() if value is not None}
    if updates:
        try:
            preferences = UserPreferences.model_validate({**preferences.model_dump(), **updates})
        except ValueError as e:
            console.print(f"[bold red]Invalid setting:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)
        store.save_preferences(preferences)

    table = Table(show_header=False, box=None)
    table.add_column("Label", style="bold")
    table.add_column("Value", style="cyan")
    table.add_row("Currency:", preferences.currency)
    table.add_row("Theme:", preferences.theme)
    table.add_row("User ID:", store.get_user_id())
    console.print(table)


def _output_wallet(wallet: WalletRecord, wallet_portfolio: WalletPortfolio) -> None:
    """Output one wallet's holdings as rich tables."""
    title = escape(f"{wallet.alias} ({get_display_name(wallet.network)}) {_format_address(wallet.address)}")
    if wallet_portfolio.error:
        console.print(f"\n[bold red]Error loading {escape(wallet.alias)}:[/bold red] {escape(wallet_portfolio.error)}")
        if wallet_portfolio.last_updated is None:
            return
        console.print("[dim]Showing last known values[/dim]")

    _output_holdings(title, wallet_portfolio.holdings)
    console.print(
        f"\n[bold]Total Value:[/bold] [bold green]{_format_usd(wallet_portfolio.total_usd_value)}[/bold green]\n"
    )


def _output_wallet_summary(state: AppState) -> None:
    """Output one row per wallet with its total and status."""
    table = Table(title="Wallets", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Network", style="blue")
    table.add_column("Address", style="green")
    table.add_column("USD Value", style="bold green", justify="right")
    table.add_column("Status", style="white")

    for wallet in state.wallets:
        wallet_portfolio = state.portfolios.get(wallet.id)
        if wallet_portfolio is None or wallet_portfolio.loading:
            status = "[dim]Loading...[/dim]"
        elif wallet_portfolio.error:
            status = f"[red]{escape(wallet_portfolio.error)}[/red]"
        else:
            status = "[green]✓[/green]"
        value = _format_usd(wallet_portfolio.total_usd_value) if wallet_portfolio else "-"
        table.add_row(
            escape(wallet.alias),
            get_display_name(wallet.network),
            _format_address(wallet.address),
            value,
            status,
        )

    console.print("\n")
    console.print(table)


def _output_holdings(title: str, holdings: list[NormalizedHolding]) -> None:
    """Output holdings as rich table."""
    if not holdings:
        console.print("\n[yellow]No holdings found[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Token", style="cyan")
    table.add_column("Balance", style="white", justify="right")
    table.add_column("Price", style="white", justify="right")
    table.add_column("24h", justify="right")
    table.add_column("USD Value", style="bold green", justify="right")

    for holding in holdings:
        table.add_row(
            escape(holding.symbol),
            f"{holding.human_balance:,.4f}",
            _format_usd(holding.usd_price) if holding.usd_price else "-",
            _format_percent(holding.change_24h_percent),
            _format_usd(holding.usd_value),
        )

    console.print("\n")
    console.print(table)


if __name__ == "__main__":
    app()
